from .base import ListingFetcher
from .mock import MockFetcher
from .openai_search import OpenAISearchFetcher, parse_search_result

from visahub.log import get_logger

log = get_logger(__name__)

__all__ = [
    "ListingFetcher", "MockFetcher", "OpenAISearchFetcher",
    "parse_search_result", "get_fetcher",
]


def get_fetcher(settings: dict, env_getter) -> ListingFetcher:
    if env_getter("OPENAI_API_KEY"):
        fetcher = OpenAISearchFetcher(settings, env_getter)
        log.info("Registered fetcher: %s", fetcher.model)
        return fetcher

    log.info("No OPENAI_API_KEY found — using MockFetcher")
    return MockFetcher(settings)
