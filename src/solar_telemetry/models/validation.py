"""
Validation and submission result models.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core import constants


@dataclass
class RowError:
    """Defects found on one spreadsheet row."""

    row_number: int  # 1-based, header row included
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"rowNumber": self.row_number, "errors": list(self.errors)}


@dataclass
class ValidationBatchResult:
    """Outcome of validating one uploaded batch."""

    rows: List[Dict[str, Any]]
    errors: List[RowError]

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def error_row_numbers(self) -> List[int]:
        return [error.row_number for error in self.errors]

    def _partition(self, erroneous: bool) -> List[Dict[str, Any]]:
        flagged = {n - constants.ROW_NUMBER_OFFSET for n in self.error_row_numbers()}
        return [row for index, row in enumerate(self.rows) if (index in flagged) == erroneous]

    def valid_rows(self) -> List[Dict[str, Any]]:
        """Rows without any defect."""
        return self._partition(erroneous=False)

    def error_rows(self) -> List[Dict[str, Any]]:
        """Rows with at least one defect."""
        return self._partition(erroneous=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "errors": [error.to_dict() for error in self.errors],
            "isValid": self.is_valid,
        }


@dataclass
class SubmissionResult:
    """Counts produced by an upsert submission."""

    inserted_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "insertedCount": self.inserted_count,
            "updatedCount": self.updated_count,
            "skippedCount": self.skipped_count,
        }
