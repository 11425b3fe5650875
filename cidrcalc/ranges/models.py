"""Data models for CIDR range classification.

This module provides the immutable entry and store types shared by the
membership engine and the range evaluator, plus the report produced for each
classified input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv4Network, IPv6Network, ip_network
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

Network = Union[IPv4Network, IPv6Network]


class EmptyDatasetError(ValueError):
    """Raised when a parsed block list yields no usable CIDR entries."""


@dataclass(slots=True, frozen=True)
class Entry:
    """A single labelled CIDR block.

    Attributes:
        label: Category the block belongs to (e.g. "hooks", "api", "web")
        network: The CIDR block, IPv4 or IPv6
    """

    label: str
    network: Network

    @property
    def sort_key(self) -> Tuple[str, str]:
        """Ordering key: label first, then the block's canonical text."""
        return self.label, str(self.network)


class RangeEntryStore:
    """Immutable, ordered collection of labelled CIDR blocks.

    Entries are sorted by label and then by the canonical text of their block
    so repeated queries and serialized output are reproducible. The store is
    never mutated after construction and can be shared between threads.

    Two ways to build one:
        - ``RangeEntryStore.from_raw_entries(pairs)`` parses ``(label, text)``
          pairs, drops text that is not a CIDR block and raises
          ``EmptyDatasetError`` when nothing usable is left.
        - ``RangeEntryStore(entries)`` trusts already-built entries and accepts
          an empty collection.

    Example:
        >>> store = RangeEntryStore.from_raw_entries([("hooks", "192.30.252.0/22")])
        >>> len(store)
        1
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        """Create a store from pre-built entries (empty is allowed)."""
        self._entries: Tuple[Entry, ...] = tuple(sorted(entries, key=lambda entry: entry.sort_key))

    @classmethod
    def from_raw_entries(cls, pairs: Iterable[Tuple[str, str]]) -> "RangeEntryStore":
        """Parse ``(label, cidr_text)`` pairs into a store.

        Args:
            pairs: Label and CIDR text tuples, typically produced by payload parsing

        Returns:
            A populated RangeEntryStore

        Raises:
            EmptyDatasetError: If no pair contains a valid CIDR block
        """
        entries: List[Entry] = []
        skipped = 0
        for label, text in pairs:
            try:
                network = ip_network(text)
            except (TypeError, ValueError) as e:
                skipped += 1
                logger.debug(f"Skipping invalid CIDR for {label!r}: {text!r} ({e})")
                continue
            entries.append(Entry(label=label, network=network))

        if not entries:
            raise EmptyDatasetError(f"No CIDR entries found ({skipped} invalid values skipped)")

        if skipped:
            logger.debug(f"Dropped {skipped} unparseable CIDR values")
        return cls(entries)

    def entries(self) -> List[Entry]:
        """Return a copy of the entries; mutating it does not affect the store."""
        return list(self._entries)

    def labels(self) -> List[str]:
        """Return the distinct labels in alphabetical order."""
        return sorted({entry.label for entry in self._entries})

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(entries={len(self._entries)}, labels={len(self.labels())})"


class ReportOutcome(str, Enum):
    """Terminal states of one classified input.

    Attributes:
        ADDRESS: A single address was looked up
        RANGE: A CIDR range was enumerated and aggregated
        INVALID_INPUT: Text is neither an address nor a CIDR range
        RANGE_TOO_LARGE: Range holds more addresses than the threshold
    """

    ADDRESS = "address"
    RANGE = "range"
    INVALID_INPUT = "invalid_input"
    RANGE_TOO_LARGE = "range_too_large"


@dataclass(slots=True, frozen=True)
class ClassificationReport:
    """Immutable result of classifying one input.

    Attributes:
        text: The raw input as given
        outcome: Which terminal state produced this report
        labels: Sorted labels owning a single address (ADDRESS only)
        evaluated: Number of addresses classified
        owned: Addresses with at least one label
        not_owned: Addresses with no label
        distribution: (signature, count) pairs sorted by signature, where the
            signature is the address's sorted labels joined with ","
        address_count: Size of the parsed range (RANGE and RANGE_TOO_LARGE)
        threshold: Enumeration limit in force for this input
        error: Parse failure reason (INVALID_INPUT only)
    """

    text: str
    outcome: ReportOutcome
    labels: Tuple[str, ...] = ()
    evaluated: int = 0
    owned: int = 0
    not_owned: int = 0
    distribution: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)
    address_count: Optional[int] = None
    threshold: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_owned(self) -> bool:
        """True when at least one evaluated address carries a label."""
        return self.owned > 0

    def to_dict(self) -> Dict[str, Any]:
        """Return this report as a plain dictionary for JSON/text output."""
        return {
            "input": self.text,
            "outcome": self.outcome.value,
            "labels": list(self.labels),
            "evaluated": self.evaluated,
            "owned": self.owned,
            "not_owned": self.not_owned,
            "distribution": dict(self.distribution),
            "address_count": self.address_count,
            "threshold": self.threshold,
            "error": self.error,
        }
