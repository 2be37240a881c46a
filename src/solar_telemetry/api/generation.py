"""
Daily generation service client.

Handles site listing and posting of daily generation totals.
"""

import logging
from typing import Any, Dict, List

from .client import APIClient


class DailyGenerationAPI(APIClient):
    """Client for the daily generation service."""

    logger: logging.Logger

    def get_sites(self) -> List[Dict[str, Any]]:
        """
        Get the list of sites known to the generation service.

        Returns:
            List of site objects
        """
        self.logger.info("Fetching sites")
        result = self.get("/sites")

        # API might return a list or dict with sites
        if isinstance(result, list):
            return result
        return result.get("sites", [])

    def post_daily_generation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Post one day's generation total.

        Args:
            payload: Body with site, date (ISO), dailyGeneration and status

        Returns:
            Created daily generation object
        """
        self.logger.debug(f"Posting daily generation for {payload.get('date')}")
        return self.post("/daily-generation", payload)
