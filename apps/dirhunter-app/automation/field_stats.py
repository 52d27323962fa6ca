"""
Field frequency aggregation across the sites of one analysis run.
"""

import math
from typing import Dict, Iterable, List

from form_logic import field_key, is_fillable_field
from models import FieldStat, RawFieldDescriptor


def field_frequency(count: int, site_count: int) -> int:
    """
    Frequency percentage of a field key, rounded half up.

    The denominator is the length of the key's own site list, which gets one
    entry per occurrence, so the result is always 100 for any count > 0.
    """
    if site_count <= 0:
        return 0
    return int(math.floor(count / site_count * 100 + 0.5))


class FieldFrequencyAggregator:
    """
    Accumulates field occurrences per key for one analysis run.

    Owned by the run that creates it. Duplicate keys within one site are
    counted every time (a site with two email fields counts twice).
    """

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._sites: Dict[str, List[str]] = {}
        self.sites_recorded = 0

    def add_site(self, site_name: str, fields: Iterable[RawFieldDescriptor]):
        """Record every fillable field of one site."""
        self.sites_recorded += 1
        for field in fields:
            if not is_fillable_field(field):
                continue
            key = field_key(field)
            self._counts[key] = self._counts.get(key, 0) + 1
            self._sites.setdefault(key, []).append(site_name)

    def results(self) -> List[FieldStat]:
        """FieldStats sorted by count, highest first (ties keep first-seen order)."""
        ordered = sorted(self._counts.items(), key=lambda item: item[1], reverse=True)
        return [
            FieldStat(
                canonical_key=key,
                count=count,
                sites=list(self._sites[key]),
                frequency=field_frequency(count, len(self._sites[key])),
            )
            for key, count in ordered
        ]

    def __len__(self) -> int:
        return len(self._counts)
