"""
Unit tests for visahub/catalog.py
"""

import pytest
from unittest.mock import MagicMock

from visahub.catalog import (
    FETCH_ERROR_MESSAGE,
    CatalogStore,
    available_jobs,
    filter_companies,
    sort_companies,
)
from visahub.models import Company, SearchResult, Source
from visahub.sources.base import ListingFetcher


class StubFetcher(ListingFetcher):
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def fetch_listings(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class TestSortCompanies:
    """Tests for hiring-priority ordering."""

    def test_active_before_inactive(self):
        """Should place actively hiring companies first."""
        a = Company(name="Zeta", is_actively_hiring_today=False)
        b = Company(name="Alpha", is_actively_hiring_today=True)
        assert sort_companies([a, b]) == [b, a]

    def test_alphabetical_within_group(self):
        """Should order by name inside the same activity flag."""
        c = Company(name="Beta", is_actively_hiring_today=True)
        b = Company(name="Alpha", is_actively_hiring_today=True)
        assert sort_companies([c, b]) == [b, c]

    def test_missing_flag_counts_as_inactive(self):
        """Should treat an unknown hiring flag like false."""
        unknown = Company(name="Aardvark")
        active = Company(name="Zulu", is_actively_hiring_today=True)
        assert sort_companies([unknown, active]) == [active, unknown]

    def test_case_insensitive_names(self):
        """Should not sort lower-case names after upper-case ones."""
        names = [c.name for c in sort_companies([Company(name="booking"), Company(name="Adyen")])]
        assert names == ["Adyen", "booking"]

    def test_accented_names_sort_with_their_base_letter(self):
        """Should place accented initials next to their plain letter, not after Z."""
        companies = [Company(name="Zalando"), Company(name="Ørsted"), Company(name="Étoile")]
        assert [c.name for c in sort_companies(companies)] == ["Étoile", "Ørsted", "Zalando"]

    def test_control_characters_in_name_do_not_break_sorting(self):
        """Should sort names carrying NUL and other control characters."""
        bad = Company(name="Bad\x00Co")
        good = Company(name="Acme")
        assert sort_companies([bad, good]) == [good, bad]


class TestFilterCompanies:
    """Tests for the search filter."""

    def test_empty_term_returns_all_in_order(self, sample_companies):
        """Should return the catalog unchanged for an empty term."""
        assert filter_companies(sample_companies, "") == sample_companies

    def test_matches_name_case_insensitive(self, sample_companies):
        """Should match company names regardless of case."""
        assert [c.name for c in filter_companies(sample_companies, "ALPHA")] == ["Alpha Cloud"]

    def test_matches_industry(self, sample_companies):
        """Should match on industry."""
        assert [c.name for c in filter_companies(sample_companies, "fintech")] == ["Beta Pay"]

    def test_matches_any_location(self, sample_companies):
        """Should match on any location entry."""
        assert [c.name for c in filter_companies(sample_companies, "rotter")] == ["Alpha Cloud"]
        assert [c.name for c in filter_companies(sample_companies, "amsterdam")] == ["Alpha Cloud", "Beta Pay"]

    def test_whitespace_term_is_matched_literally(self):
        """Should treat a single space as a substring, not as an empty filter."""
        spaced = Company(name="Alpha Cloud")
        solid = Company(name="Adyen", industry="Payments", locations=("Amsterdam",))
        assert filter_companies([spaced, solid], " ") == [spaced]

    def test_no_match(self, sample_companies):
        """Should return an empty list when nothing matches."""
        assert filter_companies(sample_companies, "berlin") == []

    def test_does_not_mutate_input(self, sample_companies):
        """Should leave the source list untouched."""
        before = list(sample_companies)
        filter_companies(sample_companies, "alpha")
        assert sample_companies == before


class TestAvailableJobs:
    def test_excludes_applied_and_keeps_order(self, sample_companies):
        """Should drop applied urls and keep the remaining order."""
        alpha = sample_companies[1]
        jobs = available_jobs(alpha, {"https://jobs.example.com/alpha-2"})
        assert [j.url for j in jobs] == [
            "https://jobs.example.com/alpha-1",
            "https://jobs.example.com/alpha-3",
        ]

    def test_nothing_applied(self, sample_companies):
        """Should return every job when nothing was applied to."""
        alpha = sample_companies[1]
        assert available_jobs(alpha, set()) == list(alpha.sre_jobs)


class TestCatalogStoreLoad:
    """Tests for CatalogStore.load."""

    def test_success_replaces_and_sorts(self, sample_companies):
        """Should install the sorted result and clear loading."""
        sources = (Source("IND register", "https://ind.nl"),)
        store = CatalogStore(StubFetcher(SearchResult(tuple(sample_companies), sources)))

        result = store.load()

        assert [c.name for c in result.companies] == ["Alpha Cloud", "Beta Pay", "Zeta Systems"]
        state = store.state
        assert state.loading is False
        assert state.error is None
        assert state.sources == sources

    def test_failure_keeps_previous_catalog(self, sample_companies):
        """Should keep the earlier catalog and expose the error."""
        store = CatalogStore(StubFetcher(
            SearchResult(tuple(sample_companies)),
            ConnectionError("service down"),
        ))
        store.load()
        assert store.load() is None

        state = store.state
        assert state.error == FETCH_ERROR_MESSAGE
        assert state.loading is False
        assert len(state.companies) == 3

    def test_failure_on_first_load(self):
        """Should report an error with no data on a failed first load."""
        store = CatalogStore(StubFetcher(RuntimeError("boom")))
        store.load()
        assert store.state.error == FETCH_ERROR_MESSAGE
        assert store.state.has_data is False

    def test_next_load_clears_error(self, sample_companies):
        """Should clear the error once a later load succeeds."""
        store = CatalogStore(StubFetcher(RuntimeError("boom"), SearchResult(tuple(sample_companies))))
        store.load()
        store.load()
        assert store.state.error is None

    def test_empty_result_is_not_an_error(self):
        """Should treat zero companies as data, not failure."""
        store = CatalogStore(StubFetcher(SearchResult()))
        store.load()
        assert store.state.has_data is True
        assert store.state.error is None
        assert store.filter("") == []

    def test_replaces_rather_than_merges(self):
        """Should drop companies missing from the newer fetch."""
        store = CatalogStore(StubFetcher(
            SearchResult((Company(name="Old"),)),
            SearchResult((Company(name="New"),)),
        ))
        store.load()
        store.load()
        assert [c.name for c in store.state.companies] == ["New"]

    def test_sort_failure_is_reported_like_a_fetch_failure(self, sample_companies, monkeypatch):
        """Should clear loading and keep the old catalog when ordering raises."""
        store = CatalogStore(StubFetcher(
            SearchResult(tuple(sample_companies)),
            SearchResult((Company(name="Unsortable"),)),
        ))
        store.load()

        def broken_sort(companies):
            raise ValueError("embedded null character")

        monkeypatch.setattr("visahub.catalog.sort_companies", broken_sort)

        assert store.load() is None
        state = store.state
        assert state.loading is False
        assert state.error == FETCH_ERROR_MESSAGE
        assert [c.name for c in state.companies] == ["Alpha Cloud", "Beta Pay", "Zeta Systems"]

    def test_null_character_names_load(self):
        """Should install a catalog whose names arrived with NUL characters."""
        store = CatalogStore(StubFetcher(SearchResult((Company(name="Bad\x00Co"), Company(name="Acme")))))
        assert store.load() is not None
        assert store.state.error is None
        assert [c.name for c in store.state.companies] == ["Acme", "Bad\x00Co"]


class TestRequestSupersession:
    """Tests for the latest-request-wins policy."""

    def test_stale_success_is_discarded(self):
        """Should ignore an older load finishing after a newer one began."""
        store = CatalogStore(MagicMock(spec=ListingFetcher))
        first = store.begin_load()
        second = store.begin_load()

        assert store.complete_load(first, SearchResult((Company(name="Stale"),))) is False
        assert store.state.loading is True
        assert store.state.has_data is False

        assert store.complete_load(second, SearchResult((Company(name="Fresh"),))) is True
        assert [c.name for c in store.state.companies] == ["Fresh"]
        assert store.state.loading is False

    def test_stale_failure_is_ignored(self):
        """Should not surface an error from a superseded load."""
        store = CatalogStore(MagicMock(spec=ListingFetcher))
        first = store.begin_load()
        second = store.begin_load()
        store.complete_load(second, SearchResult((Company(name="Fresh"),)))

        assert store.fail_load(first, RuntimeError("late")) is False
        assert store.state.error is None

    def test_loading_flag_during_fetch(self):
        """Should expose loading while the fetch is in flight."""
        seen = []

        class RecordingFetcher(ListingFetcher):
            def fetch_listings(self):
                seen.append(store.state.loading)
                return SearchResult()

        store = CatalogStore(RecordingFetcher())
        store.load()
        assert seen == [True]
        assert store.state.loading is False


class TestCatalogStoreFilter:
    def test_filter_uses_current_catalog(self, sample_companies):
        """Should filter the installed, sorted catalog."""
        store = CatalogStore(StubFetcher(SearchResult(tuple(sample_companies))))
        store.load()
        assert [c.name for c in store.filter("amsterdam")] == ["Alpha Cloud", "Beta Pay"]

    @pytest.mark.parametrize("term", ["", None])
    def test_empty_term_returns_everything(self, sample_companies, term):
        """Should return the whole catalog when no term is given."""
        store = CatalogStore(StubFetcher(SearchResult(tuple(sample_companies))))
        store.load()
        assert len(store.filter(term)) == 3

    def test_spaces_only_term_is_not_trimmed(self):
        """Should match only names containing the typed spaces."""
        store = CatalogStore(StubFetcher(SearchResult((Company(name="Alpha Cloud"), Company(name="Adyen")))))
        store.load()
        assert [c.name for c in store.filter("   ")] == []
        assert [c.name for c in store.filter(" ")] == ["Alpha Cloud"]
