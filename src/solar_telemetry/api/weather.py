"""
Remote weather store.

Reads weather samples from the weather service so meter batches can be
correlated against data that lives outside this process.
"""

import logging
from typing import Any, Dict, Iterable, List

from ..models import WeatherSample
from .client import APIClient


class WeatherStoreAPI(APIClient):
    """Weather service client usable as the weather store of a meter batch."""

    logger: logging.Logger

    def fetch_by_date_variants(self, variants: Iterable[str]) -> List[WeatherSample]:
        """
        Fetch every weather sample stored under any of the given date strings.

        Args:
            variants: Equivalent date strings (meter, weather and ISO forms)

        Returns:
            List of WeatherSample objects
        """
        dates = [v for v in variants if v]
        if not dates:
            return []

        self.logger.info(f"Fetching weather for {len(dates)} date variants")
        result = self.get("/weather", params=[("date", d) for d in dates])

        # API might return a list or a dict with the samples under "data"
        if isinstance(result, dict):
            documents: List[Dict[str, Any]] = result.get("data", [])
        elif isinstance(result, list):
            documents = result
        else:
            self.logger.warning(f"Unexpected weather response format: {type(result)}")
            documents = []

        samples = [WeatherSample.from_mapping(doc) for doc in documents if isinstance(doc, dict)]
        self.logger.debug(f"Retrieved {len(samples)} weather samples")
        return samples
