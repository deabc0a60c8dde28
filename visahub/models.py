"""Data models for companies, job listings and tracked applications.

Wire and storage dicts keep the camelCase keys used by the search schema and
by the stored tracker record; attributes are snake_case.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Any


def _printable(value: str) -> str:
    return "".join(ch for ch in value if unicodedata.category(ch) != "Cc")


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return _printable(value).strip() if isinstance(value, str) else ""


def _opt_bool(data: dict, key: str) -> bool | None:
    value = data.get(key)
    return value if isinstance(value, bool) else None


def _opt_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class JobListing:
    title: str
    url: str
    location: str = ""
    is_new: bool | None = None
    posted_date: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobListing | None:
        """None when the posting has no URL to identify it."""
        url = _str(data, "url")
        if not url:
            return None
        return cls(
            title=_str(data, "title") or "Untitled role",
            url=url,
            location=_str(data, "location"),
            is_new=_opt_bool(data, "isNew"),
            posted_date=_opt_str(data, "postedDate"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"title": self.title, "url": self.url, "location": self.location}
        if self.is_new is not None:
            out["isNew"] = self.is_new
        if self.posted_date:
            out["postedDate"] = self.posted_date
        return out


@dataclass(frozen=True)
class Company:
    name: str
    website: str = ""
    industry: str = ""
    locations: tuple[str, ...] = ()
    visa_support: bool = False
    relocation_benefits: str = ""
    description: str = ""
    is_actively_hiring_today: bool | None = None
    sre_jobs: tuple[JobListing, ...] = ()
    last_updated: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Company | None:
        name = _str(data, "name")
        if not name:
            return None

        locations: list[str] = []
        raw_locations = data.get("locations")
        if isinstance(raw_locations, list):
            locations = [loc.strip() for loc in raw_locations if isinstance(loc, str) and loc.strip()]

        raw_jobs = data.get("sreJobs")
        jobs: list[JobListing] = []
        if isinstance(raw_jobs, list):
            for item in raw_jobs:
                if isinstance(item, dict):
                    job = JobListing.from_dict(item)
                    if job is not None:
                        jobs.append(job)

        return cls(
            name=name,
            website=_str(data, "website"),
            industry=_str(data, "industry"),
            locations=tuple(locations),
            visa_support=data.get("visaSupport") is True,
            relocation_benefits=_str(data, "relocationBenefits"),
            description=_str(data, "description"),
            is_actively_hiring_today=_opt_bool(data, "isActivelyHiringToday"),
            sre_jobs=tuple(jobs),
            last_updated=_opt_str(data, "lastUpdated"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "website": self.website,
            "industry": self.industry,
            "locations": list(self.locations),
            "visaSupport": self.visa_support,
            "relocationBenefits": self.relocation_benefits,
            "description": self.description,
            "sreJobs": [j.to_dict() for j in self.sre_jobs],
        }
        if self.is_actively_hiring_today is not None:
            out["isActivelyHiringToday"] = self.is_actively_hiring_today
        if self.last_updated:
            out["lastUpdated"] = self.last_updated
        return out


@dataclass(frozen=True)
class Source:
    title: str
    uri: str


@dataclass(frozen=True)
class SearchResult:
    companies: tuple[Company, ...] = ()
    sources: tuple[Source, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.companies


@dataclass(frozen=True)
class TrackerEntry:
    job_title: str
    company_name: str
    date_applied: str
    url: str

    @classmethod
    def from_dict(cls, data: Any) -> TrackerEntry | None:
        if not isinstance(data, dict):
            return None
        url = data.get("url")
        if not isinstance(url, str) or not url:
            return None
        return cls(
            job_title=str(data.get("jobTitle") or ""),
            company_name=str(data.get("companyName") or ""),
            date_applied=str(data.get("dateApplied") or ""),
            url=url,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "jobTitle": self.job_title,
            "companyName": self.company_name,
            "dateApplied": self.date_applied,
            "url": self.url,
        }
