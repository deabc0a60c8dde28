"""Mock listing source for demos and for running without an API key."""
from __future__ import annotations

from datetime import datetime, timezone

from visahub.log import get_logger
from visahub.models import Company, JobListing, SearchResult, Source
from visahub.sources.base import ListingFetcher

log = get_logger(__name__)


def _mock_url(slug: str) -> str:
    """Date-stamped URL so sample jobs look freshly posted each day."""
    return f"https://example.com/{datetime.now(timezone.utc).strftime('%Y-%m-%d')}/{slug}"


class MockFetcher(ListingFetcher):
    def __init__(self, settings: dict | None = None) -> None:
        self.settings = settings or {}

    def fetch_listings(self) -> SearchResult:
        log.info("MockFetcher generating sample companies")
        companies = (
            Company(
                name="Booking.com",
                website="https://careers.booking.com",
                industry="Travel Tech",
                locations=("Amsterdam",),
                visa_support=True,
                relocation_benefits="Relocation package, HSM visa handled in-house",
                description="Online travel platform headquartered in Amsterdam.",
                is_actively_hiring_today=True,
                sre_jobs=(
                    JobListing("Site Reliability Engineer II", _mock_url("booking-sre-2"), "Amsterdam", is_new=True),
                    JobListing("Senior DevOps Engineer", _mock_url("booking-devops"), "Amsterdam"),
                ),
            ),
            Company(
                name="Adyen",
                website="https://careers.adyen.com",
                industry="Fintech",
                locations=("Amsterdam",),
                visa_support=True,
                relocation_benefits="Flights, temporary housing and visa support",
                description="Global payments platform.",
                is_actively_hiring_today=False,
                sre_jobs=(
                    JobListing("Platform Reliability Engineer", _mock_url("adyen-pre"), "Amsterdam"),
                ),
            ),
            Company(
                name="Amazon",
                website="https://www.amazon.jobs",
                industry="Cloud & E-commerce",
                locations=("Luxembourg",),
                visa_support=True,
                relocation_benefits="Blue Card sponsorship and relocation allowance",
                description="European headquarters in Luxembourg City.",
                is_actively_hiring_today=True,
                sre_jobs=(
                    JobListing("Systems Development Engineer, SRE", _mock_url("amazon-sde-sre"), "Luxembourg", is_new=True),
                ),
            ),
        )
        sources = (
            Source(title="IND public register of recognised sponsors", uri="https://ind.nl/en/public-register-recognised-sponsors"),
        )
        return SearchResult(companies=companies, sources=sources)
