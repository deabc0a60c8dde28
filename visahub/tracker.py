"""Track jobs the user applied to, persisted through a key-value store.

Entries are kept newest first and are unique by job URL: the first apply
wins and later applies to the same URL change nothing. The tracker owns a
snapshot of title, company and date, so refreshing the catalog never touches
its history.
"""
from __future__ import annotations

import webbrowser
from datetime import date
from typing import Callable, Iterator

from visahub.log import get_logger
from visahub.models import JobListing, TrackerEntry
from visahub.storage import KeyValueStore, StorageError

log = get_logger(__name__)

DEFAULT_STORAGE_KEY = "sre_job_tracker"
DATE_FORMAT = "%d %b %Y"


def open_in_new_tab(url: str) -> None:
    webbrowser.open_new_tab(url)


def format_applied_date(day: date) -> str:
    """``19 Oct 2026`` style date used in the tracker table."""
    return day.strftime(DATE_FORMAT)


class ApplicationTracker:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        opener: Callable[[str], None] = open_in_new_tab,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._key = storage_key
        self._opener = opener
        self._today = today
        self._entries: list[TrackerEntry] = []

    # ── Lifecycle ────────────────────────────────────────────────────────

    def initialize(self) -> None:
        """Load saved entries; unreadable data starts an empty tracker."""
        try:
            raw = self._store.load(self._key)
        except StorageError as exc:
            log.warning("Tracker data unreadable, starting empty: %s", exc)
            self._entries = []
            return

        if raw is None:
            self._entries = []
            return
        if not isinstance(raw, list):
            log.warning("Tracker data malformed (%s), starting empty", type(raw).__name__)
            self._entries = []
            return

        entries: list[TrackerEntry] = []
        seen: set[str] = set()
        skipped = 0
        for item in raw:
            entry = TrackerEntry.from_dict(item)
            if entry is None or entry.url in seen:
                skipped += 1
                continue
            seen.add(entry.url)
            entries.append(entry)

        if skipped:
            log.warning("Dropped %d malformed or duplicate tracker record(s)", skipped)
        self._entries = entries
        log.info("Loaded %d tracked application(s)", len(entries))

    # ── Mutations ────────────────────────────────────────────────────────

    def record_application(self, job: JobListing, company_name: str) -> bool:
        """Track *job* and open its posting. Returns False if already tracked."""
        if job.url in self:
            log.debug("Already tracked: %s", job.url)
            return False

        entry = TrackerEntry(
            job_title=job.title,
            company_name=company_name,
            date_applied=format_applied_date(self._today()),
            url=job.url,
        )
        self._commit([entry, *self._entries])
        log.info("Tracked: %s @ %s", job.title, company_name)

        try:
            self._opener(job.url)
        except Exception as exc:
            log.warning("Could not open %s: %s", job.url, exc)
        return True

    def clear(self, confirm: Callable[[], bool]) -> bool:
        """Empty the tracker if *confirm* says yes. Irreversible."""
        if not confirm():
            log.debug("Clear history cancelled")
            return False
        removed = len(self._entries)
        self._commit([])
        log.info("Cleared %d tracked application(s)", removed)
        return True

    def _commit(self, entries: list[TrackerEntry]) -> None:
        # Memory only changes once the write went through.
        self._store.save(self._key, [e.to_dict() for e in entries])
        self._entries = entries

    # ── Views ────────────────────────────────────────────────────────────

    @property
    def entries(self) -> tuple[TrackerEntry, ...]:
        return tuple(self._entries)

    @property
    def applied_urls(self) -> frozenset[str]:
        return frozenset(e.url for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TrackerEntry]:
        return iter(tuple(self._entries))

    def __contains__(self, url: object) -> bool:
        return any(e.url == url for e in self._entries)
