"""Unit tests for range entry store and report models."""

from __future__ import annotations

import dataclasses
from ipaddress import ip_network

import pytest

from cidrcalc.ranges.models import (
    ClassificationReport,
    EmptyDatasetError,
    Entry,
    RangeEntryStore,
    ReportOutcome,
)


class TestEntry:
    """Test Entry dataclass."""

    def test_entry_is_immutable(self) -> None:
        """Test that entries cannot be modified after creation."""
        entry = Entry(label="hooks", network=ip_network("192.30.252.0/22"))

        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.label = "web"  # type: ignore[misc]

    def test_sort_key_uses_label_then_canonical_text(self) -> None:
        """Test sort key combines label and canonical CIDR text."""
        entry = Entry(label="hooks", network=ip_network("2001:0db8:0001::/48"))

        assert entry.sort_key == ("hooks", "2001:db8:1::/48")


class TestRangeEntryStoreFromRawEntries:
    """Test parsing (label, text) pairs into a store."""

    def test_valid_pairs_build_store(self) -> None:
        """Test all valid pairs become entries."""
        store = RangeEntryStore.from_raw_entries(
            [("hooks", "192.30.252.0/22"), ("hooks", "2001:db8:1::/48"), ("web", "140.82.112.0/20")]
        )

        assert len(store) == 3
        assert store.labels() == ["hooks", "web"]

    def test_invalid_pairs_are_skipped(self) -> None:
        """Test unparseable text is dropped without aborting construction."""
        store = RangeEntryStore.from_raw_entries(
            [
                ("hooks", "192.30.252.0/22"),
                ("hooks", "not-a-cidr"),
                ("web", "140.82.112.0/33"),
                ("web", "140.82.112.1/20"),  # host bits set
                ("ssh_keys", "ssh-ed25519 AAAA"),
            ]
        )

        assert len(store) == 1
        assert store.entries()[0].label == "hooks"

    def test_no_valid_pairs_raises_empty_dataset(self) -> None:
        """Test zero usable entries is rejected."""
        with pytest.raises(EmptyDatasetError, match="No CIDR entries found"):
            RangeEntryStore.from_raw_entries([("ssh_keys", "ssh-ed25519 AAAA"), ("web", "")])

    def test_empty_input_raises_empty_dataset(self) -> None:
        """Test an empty pair list is rejected."""
        with pytest.raises(EmptyDatasetError):
            RangeEntryStore.from_raw_entries([])

    def test_entries_sorted_by_label_then_block_text(self) -> None:
        """Test deterministic ordering regardless of input order."""
        store = RangeEntryStore.from_raw_entries(
            [
                ("web", "140.82.112.0/20"),
                ("hooks", "2001:db8:1::/48"),
                ("api", "20.201.28.151/32"),
                ("hooks", "192.30.252.0/22"),
            ]
        )

        assert [(entry.label, str(entry.network)) for entry in store.entries()] == [
            ("api", "20.201.28.151/32"),
            ("hooks", "192.30.252.0/22"),
            ("hooks", "2001:db8:1::/48"),
            ("web", "140.82.112.0/20"),
        ]


class TestRangeEntryStoreDirectConstruction:
    """Test constructing a store from pre-built entries."""

    def test_empty_store_is_allowed(self) -> None:
        """Test direct construction trusts its input, including no entries."""
        store = RangeEntryStore([])

        assert len(store) == 0
        assert store.entries() == []
        assert store.labels() == []

    def test_entries_returns_defensive_copy(self, sample_store: RangeEntryStore) -> None:
        """Test mutating the returned list leaves the store untouched."""
        entries = sample_store.entries()
        entries.clear()

        assert len(sample_store) == 5
        assert len(sample_store.entries()) == 5

    def test_construction_copies_source_list(self) -> None:
        """Test later changes to the source list do not leak into the store."""
        source = [Entry(label="web", network=ip_network("140.82.112.0/20"))]
        store = RangeEntryStore(source)
        source.append(Entry(label="api", network=ip_network("192.30.252.0/24")))

        assert len(store) == 1

    def test_repr_reports_counts(self, sample_store: RangeEntryStore) -> None:
        """Test repr mentions entry and label counts."""
        assert repr(sample_store) == "RangeEntryStore(entries=5, labels=4)"


class TestClassificationReport:
    """Test ClassificationReport dataclass."""

    def test_to_dict(self) -> None:
        """Test to_dict converts to a plain dictionary."""
        report = ClassificationReport(
            text="192.30.252.0/30",
            outcome=ReportOutcome.RANGE,
            evaluated=4,
            owned=4,
            not_owned=0,
            distribution=(("api,hooks", 4),),
            address_count=4,
            threshold=4096,
        )

        result = report.to_dict()

        assert result["input"] == "192.30.252.0/30"
        assert result["outcome"] == "range"
        assert result["distribution"] == {"api,hooks": 4}
        assert result["labels"] == []
        assert result["error"] is None

    def test_is_owned(self) -> None:
        """Test is_owned reflects the owned count."""
        owned = ClassificationReport(text="a", outcome=ReportOutcome.ADDRESS, evaluated=1, owned=1)
        not_owned = ClassificationReport(text="b", outcome=ReportOutcome.ADDRESS, evaluated=1, not_owned=1)

        assert owned.is_owned
        assert not not_owned.is_owned

    def test_outcome_values(self) -> None:
        """Test outcome enum string values."""
        assert ReportOutcome.ADDRESS.value == "address"
        assert ReportOutcome.RANGE.value == "range"
        assert ReportOutcome.INVALID_INPUT.value == "invalid_input"
        assert ReportOutcome.RANGE_TOO_LARGE.value == "range_too_large"
