"""In-memory company catalog: load, hiring-priority ordering and filtering.

Every load takes a request id. Only the latest id may settle the catalog, so a
refresh clicked while another is still in flight supersedes it and the older
result is dropped when it eventually arrives.
"""
from __future__ import annotations

import locale
import threading
import unicodedata
from dataclasses import dataclass
from typing import Iterable

from visahub.log import get_logger
from visahub.models import Company, JobListing, SearchResult, Source
from visahub.sources.base import ListingFetcher

log = get_logger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch latest SRE job data. Please try again later."

# Letters with no Unicode decomposition that collate with a base letter.
_LATIN_FOLDS = str.maketrans({
    "ø": "o", "æ": "ae", "œ": "oe", "ð": "d", "đ": "d", "ł": "l", "þ": "th", "ı": "i",
})


def use_system_collation() -> None:
    """Adopt the user's LC_COLLATE so name sorting follows their locale."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        log.debug("System collation unavailable, keeping default: %s", exc)


def _fold_name(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(
        ch for ch in decomposed
        if not unicodedata.combining(ch) and unicodedata.category(ch) != "Cc"
    )
    return base.translate(_LATIN_FOLDS)


def _name_key(name: str) -> tuple[str, str]:
    # Accent-blind primary key; the exact name breaks ties deterministically.
    return locale.strxfrm(_fold_name(name)), name.casefold()


def sort_companies(companies: Iterable[Company]) -> list[Company]:
    """Actively hiring companies first, then by name. Stable."""
    return sorted(
        companies,
        key=lambda c: (not c.is_actively_hiring_today, _name_key(c.name)),
    )


def filter_companies(companies: Iterable[Company], search_term: str) -> list[Company]:
    term = (search_term or "").casefold()
    if not term:
        return list(companies)
    return [
        c for c in companies
        if term in c.name.casefold()
        or term in c.industry.casefold()
        or any(term in loc.casefold() for loc in c.locations)
    ]


def available_jobs(company: Company, applied_urls: Iterable[str]) -> list[JobListing]:
    applied = set(applied_urls)
    return [j for j in company.sre_jobs if j.url not in applied]


@dataclass(frozen=True)
class CatalogState:
    result: SearchResult | None = None
    loading: bool = False
    error: str | None = None

    @property
    def companies(self) -> tuple[Company, ...]:
        return self.result.companies if self.result else ()

    @property
    def sources(self) -> tuple[Source, ...]:
        return self.result.sources if self.result else ()

    @property
    def has_data(self) -> bool:
        return self.result is not None


class CatalogStore:
    def __init__(self, fetcher: ListingFetcher) -> None:
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._state = CatalogState()
        self._latest_request = 0

    @property
    def state(self) -> CatalogState:
        with self._lock:
            return self._state

    # ── Load lifecycle ───────────────────────────────────────────────────

    def begin_load(self) -> int:
        with self._lock:
            self._latest_request += 1
            request_id = self._latest_request
            self._state = CatalogState(result=self._state.result, loading=True, error=None)
        log.debug("Catalog load #%d started", request_id)
        return request_id

    def complete_load(self, request_id: int, result: SearchResult) -> bool:
        try:
            ordered = SearchResult(
                companies=tuple(sort_companies(result.companies)),
                sources=result.sources,
            )
        except Exception as exc:
            self.fail_load(request_id, exc)
            return False
        with self._lock:
            if request_id != self._latest_request:
                log.info("Discarding stale catalog load #%d (latest #%d)", request_id, self._latest_request)
                return False
            self._state = CatalogState(result=ordered, loading=False, error=None)
        log.info(
            "Catalog load #%d: %d companies, %d sources",
            request_id, len(ordered.companies), len(ordered.sources),
        )
        return True

    def fail_load(self, request_id: int, exc: BaseException) -> bool:
        with self._lock:
            if request_id != self._latest_request:
                log.info("Ignoring failure of stale catalog load #%d: %s", request_id, exc)
                return False
            self._state = CatalogState(result=self._state.result, loading=False, error=FETCH_ERROR_MESSAGE)
        log.error("Catalog load #%d failed: %s", request_id, exc)
        return True

    def load(self) -> SearchResult | None:
        """Fetch and install a fresh catalog.

        Returns the installed (sorted) result, or None if the fetch failed or a
        newer load superseded this one.
        """
        request_id = self.begin_load()
        try:
            result = self._fetcher.fetch_listings()
        except Exception as exc:
            self.fail_load(request_id, exc)
            return None
        if not self.complete_load(request_id, result):
            return None
        return self.state.result

    # ── Derived views ────────────────────────────────────────────────────

    def filter(self, search_term: str) -> list[Company]:
        return filter_companies(self.state.companies, search_term)
