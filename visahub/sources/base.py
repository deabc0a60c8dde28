from abc import ABC, abstractmethod

from visahub.models import SearchResult


class ListingFetcher(ABC):
    @abstractmethod
    def fetch_listings(self) -> SearchResult:
        """One round trip to the listing service; raises on failure."""
