"""
Meter reading aggregation module.

Pairs initial/final register readings found in a meter row and calculates
per-meter totals, grid-substation (GSS) totals and the net export at GSS.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core import constants
from ..core.fields import coerce_number
from ..models import MeterReadingPair

# "Export|Import <meter id> Initial|Start|Final|End ...", e.g.
# "Export 1 Initial", "Export-2 Final Reading", "Import GSS Start".
# The transaction type must lead the column name.
PAIR_COLUMN_RE = re.compile(
    r"^\s*(?P<kind>export|import)(?![a-z])(?P<trail>.*?)"
    r"(?<![a-z])(?P<edge>initial|start|final|end)(?![a-z])",
    re.IGNORECASE,
)

_ID_SEPARATORS_RE = re.compile(r"[\s\-_:()./]+")
_INITIAL_EDGES = ("initial", "start")
_DEFAULT_METER_ID = "1"

_COMPUTED_TOTAL_RE = re.compile(r"^(export|import) total\b", re.IGNORECASE)

DERIVED_FIELDS = (
    constants.PLANT_START_FIELD,
    constants.PLANT_STOP_FIELD,
    constants.OPERATING_TOTAL_FIELD,
    constants.GSS_EXPORT_FIELD,
    constants.GSS_IMPORT_FIELD,
    constants.NET_EXPORT_FIELD,
)
_DERIVED_KEYS = frozenset(name.lower() for name in DERIVED_FIELDS)


def is_derived_field(key: str) -> bool:
    """Check whether a column is written by the enricher rather than the user."""
    return key.strip().lower() in _DERIVED_KEYS or bool(_COMPUTED_TOTAL_RE.match(key))


def strip_derived_fields(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Drop enricher output from a row so it can be recomputed from scratch.

    User-supplied GSS totals are dropped too and never count as readings.
    """
    return {k: v for k, v in row.items() if not is_derived_field(k)}


def parse_pair_column(key: str) -> Optional[Tuple[str, str, bool]]:
    """
    Match a column name against the pairing rule.

    Args:
        key: Column name

    Returns:
        (kind, meter_id, is_initial) or None if the column is not a reading edge
    """
    match = PAIR_COLUMN_RE.match(key)
    if not match:
        return None

    meter_id = _ID_SEPARATORS_RE.sub(" ", match.group("trail")).strip()
    kind = match.group("kind").capitalize()
    is_initial = match.group("edge").lower() in _INITIAL_EDGES
    return kind, meter_id or _DEFAULT_METER_ID, is_initial


@dataclass
class MeterTotals:
    """Totals derived from the reading pairs of one meter row."""

    pairs: List[MeterReadingPair] = field(default_factory=list)
    has_gss: bool = False
    gss_export_total: float = 0.0
    gss_import_total: float = 0.0

    @property
    def net_export(self) -> float:
        return self.gss_export_total - self.gss_import_total

    def to_fields(self) -> Dict[str, float]:
        """Render the totals as row columns."""
        fields: Dict[str, float] = {pair.label: pair.total for pair in self.pairs}
        fields[constants.GSS_EXPORT_FIELD] = self.gss_export_total
        fields[constants.GSS_IMPORT_FIELD] = self.gss_import_total
        fields[constants.NET_EXPORT_FIELD] = self.net_export
        return fields


class MeterAggregator:
    """Calculate per-meter and substation totals from a meter row."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize meter aggregator.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def find_pairs(self, row: Mapping[str, Any]) -> List[MeterReadingPair]:
        """
        Pair initial and final readings sharing a meter id and transaction type.

        Initials without a matching final, and pairs with a blank or
        non-numeric side, are skipped.

        Args:
            row: Meter row

        Returns:
            Reading pairs, exports first, in column order
        """
        initials: Dict[Tuple[str, str], Tuple[str, str]] = {}
        finals: Dict[Tuple[str, str], str] = {}

        for key in row.keys():
            if is_derived_field(key):
                continue
            parsed = parse_pair_column(key)
            if parsed is None:
                continue
            kind, meter_id, is_initial = parsed
            pair_key = (kind, meter_id.lower())
            if is_initial:
                initials.setdefault(pair_key, (meter_id, key))
            else:
                finals.setdefault(pair_key, key)

        pairs: List[MeterReadingPair] = []
        for kind in ("Export", "Import"):
            for pair_key, (meter_id, initial_key) in initials.items():
                if pair_key[0] != kind or pair_key not in finals:
                    continue
                try:
                    initial = coerce_number(row[initial_key])
                    final = coerce_number(row[finals[pair_key]])
                except ValueError:
                    self.logger.debug(f"Skipping malformed {kind} pair for meter {meter_id}")
                    continue
                if initial is None or final is None:
                    continue
                pairs.append(MeterReadingPair(meter_id=meter_id, kind=kind, initial=initial, final=final))

        return pairs

    def calculate_totals(self, row: Mapping[str, Any]) -> MeterTotals:
        """
        Calculate GSS export/import totals and net export for a row.

        If any pair in the row belongs to a GSS meter, only GSS pairs are
        summed; otherwise every pair is summed.

        Args:
            row: Meter row

        Returns:
            MeterTotals instance
        """
        pairs = self.find_pairs(row)
        has_gss = any(pair.is_gss for pair in pairs)
        counted = [pair for pair in pairs if pair.is_gss] if has_gss else pairs

        export_total = sum(pair.total for pair in counted if pair.kind == "Export")
        import_total = sum(pair.total for pair in counted if pair.kind == "Import")

        return MeterTotals(
            pairs=pairs,
            has_gss=has_gss,
            gss_export_total=float(export_total),
            gss_import_total=float(import_total),
        )
