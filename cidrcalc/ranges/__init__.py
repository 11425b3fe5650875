"""CIDR range classification.

This package provides membership lookup and bounded range evaluation against a
store of labelled CIDR blocks:
- RangeEntryStore: immutable, ordered (label, block) entries
- lookup: labels owning a single address
- classify_input: address or range report with label aggregation

Example:
    >>> from cidrcalc.ranges import RangeEntryStore, classify_input
    >>> store = RangeEntryStore.from_raw_entries([("hooks", "192.30.252.0/22")])
    >>> report = classify_input(store, "192.30.252.42")
    >>> report.labels
    ('hooks',)
"""

from .evaluator import (
    DEFAULT_THRESHOLD,
    RangeEvaluator,
    address_count,
    classify_input,
    classify_many,
    last_address,
    parse_range,
)
from .membership import lookup
from .models import ClassificationReport, EmptyDatasetError, Entry, RangeEntryStore, ReportOutcome

__all__ = [
    "DEFAULT_THRESHOLD",
    "ClassificationReport",
    "EmptyDatasetError",
    "Entry",
    "RangeEntryStore",
    "RangeEvaluator",
    "ReportOutcome",
    "address_count",
    "classify_input",
    "classify_many",
    "last_address",
    "parse_range",
    "lookup",
]
