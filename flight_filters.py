"""
Dashboard filters: airline, route and arrival-delay range.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from flight_records import FlightRecord

logger = logging.getLogger(__name__)

ALL = "all"
DEFAULT_DELAY_RANGE = (-50, 200)


@dataclass(frozen=True)
class FilterSpec:
    airline: str = ALL
    route: str = ALL
    delay_range: Tuple[float, float] = DEFAULT_DELAY_RANGE

    def matches(self, record: FlightRecord) -> bool:
        if self.airline != ALL and record.airline != self.airline:
            return False
        if self.route != ALL and record.route != self.route:
            return False
        low, high = self.delay_range
        return low <= record.arrival_delay <= high


def apply_filters(records: Iterable[FlightRecord], spec: FilterSpec = FilterSpec()) -> List[FlightRecord]:
    """
    Keep the records matching every active constraint, in input order.
    An empty result is valid.
    """
    filtered = [record for record in records if spec.matches(record)]
    logger.info(
        "Filter airline=%s route=%s delay_range=%s kept %d records",
        spec.airline,
        spec.route,
        spec.delay_range,
        len(filtered),
    )
    return filtered


def filter_options(records: Iterable[FlightRecord]) -> Dict[str, List[str]]:
    """Sorted distinct airlines and routes for the filter dropdowns."""
    records = list(records)
    return {
        "airlines": sorted({record.airline for record in records}),
        "routes": sorted({record.route for record in records}),
    }
