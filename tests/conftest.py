"""
Shared fixtures for unit tests.

Environment variables are isolated so no test can reach the real listing
service, and file logging is pointed at a temporary directory.
"""

from datetime import date

import pytest

from visahub.models import Company, JobListing
from visahub.storage import MemoryStore


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Strip credentials and keep logs out of the project tree."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("VISAHUB_MODEL", raising=False)
    monkeypatch.setenv("VISAHUB_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def fixed_today():
    return lambda: date(2026, 10, 19)


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def make_job():
    def _make(slug, title=None, location="Amsterdam", is_new=None):
        return JobListing(
            title=title or f"SRE {slug}",
            url=f"https://jobs.example.com/{slug}",
            location=location,
            is_new=is_new,
        )
    return _make


@pytest.fixture
def sample_companies(make_job):
    return [
        Company(
            name="Zeta Systems",
            industry="Observability",
            locations=("Luxembourg",),
            visa_support=True,
            is_actively_hiring_today=False,
            sre_jobs=(make_job("zeta-1"),),
        ),
        Company(
            name="Alpha Cloud",
            industry="Cloud Infrastructure",
            locations=("Amsterdam", "Rotterdam"),
            visa_support=True,
            is_actively_hiring_today=True,
            sre_jobs=(make_job("alpha-1"), make_job("alpha-2"), make_job("alpha-3")),
        ),
        Company(
            name="Beta Pay",
            industry="Fintech",
            locations=("Amsterdam",),
            visa_support=True,
            is_actively_hiring_today=True,
            sre_jobs=(),
        ),
    ]
