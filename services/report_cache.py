"""Ordered in-memory mirror of the report store with optimistic entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from models.report import Report


class EntryState(str, Enum):
    PENDING = "pending"          # local change not yet confirmed by the store
    CONFIRMED = "confirmed"      # mirrors the last canonical listing
    ORPHANED = "orphaned"        # the store write failed; visible until the next refetch
    TOMBSTONED = "tombstoned"    # delete in flight; hidden from snapshots


@dataclass
class CacheEntry:
    report: Report
    state: EntryState = EntryState.CONFIRMED


class ReportCache:
    """Reports in display order: newest `timestamp` first.

    Between refetches optimistic inserts sit at the head regardless of their
    provisional timestamp; `replace_all` re-derives the order.
    """

    def __init__(self) -> None:
        self._entries: List[CacheEntry] = []

    @staticmethod
    def _sorted(entries: Iterable[CacheEntry]) -> List[CacheEntry]:
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(entries, key=lambda e: e.report.timestamp, reverse=True)

    def replace_all(self, reports: Iterable[Report]) -> None:
        """Replace every entry with the canonical listing.

        Reports whose delete is still in flight stay tombstoned.
        """
        tombstoned = {e.report.id for e in self._entries if e.state is EntryState.TOMBSTONED}
        self._entries = self._sorted(
            CacheEntry(report, EntryState.TOMBSTONED if report.id in tombstoned else EntryState.CONFIRMED)
            for report in reports
        )

    def insert_head(self, report: Report, state: EntryState = EntryState.PENDING) -> CacheEntry:
        if report.id in self:
            raise ValueError(f"Report {report.id} is already cached")
        entry = CacheEntry(report, state)
        self._entries.insert(0, entry)
        return entry

    def splice(self, report: Report, state: EntryState = EntryState.PENDING) -> CacheEntry:
        """Replace the entry with the same id in place, then re-derive the order.

        Pending head inserts stay ahead of the re-sorted remainder.
        """
        idx = self._index(report.id)
        if idx is None:
            raise KeyError(f"Report {report.id} not cached")
        entry = CacheEntry(report, state)
        self._entries[idx] = entry

        head: List[CacheEntry] = []
        for existing in self._entries:
            if existing.state is not EntryState.PENDING or existing is entry:
                break
            head.append(existing)
        self._entries = head + self._sorted(self._entries[len(head):])
        return entry

    def tombstone(self, report_id: str) -> Optional[CacheEntry]:
        entry = self.get_entry(report_id)
        if entry is not None:
            entry.state = EntryState.TOMBSTONED
        return entry

    def restore(self, report_id: str) -> Optional[CacheEntry]:
        """Bring a tombstoned entry back as confirmed, at its previous position."""
        entry = self.get_entry(report_id)
        if entry is not None and entry.state is EntryState.TOMBSTONED:
            entry.state = EntryState.CONFIRMED
        return entry

    def remove(self, report_id: str) -> Optional[Report]:
        idx = self._index(report_id)
        if idx is None:
            return None
        return self._entries.pop(idx).report

    def mark(self, report_id: str, state: EntryState) -> None:
        entry = self.get_entry(report_id)
        if entry is not None:
            entry.state = state

    def get_entry(self, report_id: str) -> Optional[CacheEntry]:
        idx = self._index(report_id)
        return self._entries[idx] if idx is not None else None

    def get(self, report_id: str) -> Optional[Report]:
        entry = self.get_entry(report_id)
        if entry is None or entry.state is EntryState.TOMBSTONED:
            return None
        return entry.report

    def state_of(self, report_id: str) -> Optional[EntryState]:
        entry = self.get_entry(report_id)
        return entry.state if entry else None

    def snapshot(self) -> List[Report]:
        """Visible reports in display order."""
        return [e.report for e in self._entries if e.state is not EntryState.TOMBSTONED]

    def entries(self) -> List[CacheEntry]:
        return list(self._entries)

    def _index(self, report_id: str) -> Optional[int]:
        for idx, entry in enumerate(self._entries):
            if entry.report.id == report_id:
                return idx
        return None

    def __contains__(self, report_id: object) -> bool:
        return isinstance(report_id, str) and self._index(report_id) is not None

    def __len__(self) -> int:
        return len(self.snapshot())
