"""Classify raw text input as a single address or a bounded CIDR range.

Each input goes through the same steps: parse as an address, otherwise parse
as a range, check the range size against the threshold, walk every address,
aggregate label combinations and build a report. Invalid text and oversized
ranges end early with their own report outcome; nothing here raises for bad
input, so one bad line never stops a batch.
"""

from __future__ import annotations

import logging
from collections import Counter
from ipaddress import IPv4Address, IPv6Address, ip_address, ip_network
from typing import Iterable, Iterator, List, Optional, Union

from .membership import lookup
from .models import ClassificationReport, Network, RangeEntryStore, ReportOutcome

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 4096

Address = Union[IPv4Address, IPv6Address]


def address_count(network: Network) -> int:
    """Number of addresses in ``network``: ``2 ** (address_bits - prefix_length)``.

    Python integers are unbounded, so the count stays exact even for a /0 in
    the IPv6 family.
    """
    return 1 << (network.max_prefixlen - network.prefixlen)


def last_address(network: Network) -> Address:
    """Return the highest address of ``network``.

    Every host bit (each position at or beyond the prefix length) is set to 1
    and the network bits are kept, so prefixes that split a byte are handled
    the same way as byte-aligned ones.

    Example:
        >>> last_address(ip_network("192.168.1.0/30"))
        IPv4Address('192.168.1.3')
    """
    host_bits = network.max_prefixlen - network.prefixlen
    host_mask = (1 << host_bits) - 1
    first = network.network_address
    return first.__class__(int(first) | host_mask)


def iter_addresses(network: Network) -> Iterator[Address]:
    """Yield every address from the first to the last, ascending."""
    current = network.network_address
    last = last_address(network)
    while True:
        yield current
        if current == last:
            return
        current += 1


def parse_range(text: str) -> Network:
    """Parse ``address/prefix-length`` text, masking any host bits.

    Only a decimal prefix length is accepted after the slash; netmask and
    hostmask suffixes such as ``10.0.0.0/255.255.255.0`` are rejected.

    Raises:
        ValueError: If ``text`` is not a CIDR range
    """
    _, slash, prefix = text.partition("/")
    if slash and not (prefix.isascii() and prefix.isdigit()):
        raise ValueError(f"{text!r} does not appear to be an IPv4 or IPv6 network")
    return ip_network(text, strict=False)


def label_signature(labels: Iterable[str]) -> str:
    """Canonical key for a label combination: sorted labels joined by commas."""
    return ",".join(sorted(labels))


class RangeEvaluator:
    """Classify addresses and ranges against a fixed entry store.

    The evaluator holds no mutable state, so a single instance can serve any
    number of inputs and callers.

    Example:
        >>> evaluator = RangeEvaluator(store, threshold=4096)
        >>> report = evaluator.classify("192.30.252.0/30")
        >>> report.evaluated, report.owned
        (4, 4)
    """

    def __init__(self, store: Optional[RangeEntryStore], threshold: int = DEFAULT_THRESHOLD) -> None:
        """Initialize evaluator.

        Args:
            store: Entries to classify against (None behaves as an empty store)
            threshold: Largest range size that will be enumerated (default: 4096)

        Raises:
            ValueError: If threshold is negative
        """
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        self.store = store
        self.threshold = threshold

    def classify(self, text: str) -> ClassificationReport:
        """Classify one raw input and return its report."""
        try:
            address = ip_address(text)
        except ValueError as address_error:
            try:
                network = parse_range(text)
            except ValueError as range_error:
                reason = range_error if "/" in text else address_error
                return ClassificationReport(
                    text=text,
                    outcome=ReportOutcome.INVALID_INPUT,
                    threshold=self.threshold,
                    error=str(reason),
                )
            return self.classify_network(text, network)

        return self.classify_address(text, address)

    def classify_address(self, text: str, address: Address) -> ClassificationReport:
        """Report the labels owning a single address."""
        labels = lookup(self.store, address)
        owned = 1 if labels else 0
        return ClassificationReport(
            text=text,
            outcome=ReportOutcome.ADDRESS,
            labels=tuple(labels),
            evaluated=1,
            owned=owned,
            not_owned=1 - owned,
            distribution=((label_signature(labels), 1),) if labels else (),
            address_count=1,
            threshold=self.threshold,
        )

    def classify_network(self, text: str, network: Network) -> ClassificationReport:
        """Enumerate a range within the threshold and aggregate its labels."""
        count = address_count(network)
        if count > self.threshold:
            logger.debug(f"Range {network} holds {count} addresses, above threshold {self.threshold}")
            return ClassificationReport(
                text=text,
                outcome=ReportOutcome.RANGE_TOO_LARGE,
                address_count=count,
                threshold=self.threshold,
            )

        owned = 0
        not_owned = 0
        signatures: Counter[str] = Counter()
        for address in iter_addresses(network):
            labels = lookup(self.store, address)
            if not labels:
                not_owned += 1
                continue
            owned += 1
            signatures[label_signature(labels)] += 1

        return ClassificationReport(
            text=text,
            outcome=ReportOutcome.RANGE,
            evaluated=owned + not_owned,
            owned=owned,
            not_owned=not_owned,
            distribution=tuple(sorted(signatures.items())),
            address_count=count,
            threshold=self.threshold,
        )


def classify_input(
    store: Optional[RangeEntryStore],
    text: str,
    threshold: int = DEFAULT_THRESHOLD,
) -> ClassificationReport:
    """Classify ``text`` (an address or CIDR range) against ``store``."""
    return RangeEvaluator(store, threshold=threshold).classify(text)


def classify_many(
    store: Optional[RangeEntryStore],
    texts: Iterable[str],
    threshold: int = DEFAULT_THRESHOLD,
) -> List[ClassificationReport]:
    """Classify each input independently, in order."""
    evaluator = RangeEvaluator(store, threshold=threshold)
    return [evaluator.classify(text) for text in texts]
