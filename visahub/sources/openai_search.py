"""Company listings from a search-grounded LLM (any OpenAI-compatible API).

The service does the hard part: finding sponsoring companies and their live
SRE postings. We send a fixed request plus a strict JSON schema and parse
whatever comes back, degrading to an empty catalog on malformed output.
"""
from __future__ import annotations

import json
from typing import Any, Iterable

from visahub.log import get_logger
from visahub.models import Company, SearchResult, Source
from visahub.sources.base import ListingFetcher

log = get_logger(__name__)

PLACEHOLDER_URI = "#"

_JOB_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "url": {"type": "string"},
        "location": {"type": "string"},
        "isNew": {"type": "boolean"},
    },
    "required": ["title", "url", "location", "isNew"],
    "additionalProperties": False,
}

_COMPANY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "website": {"type": "string"},
        "industry": {"type": "string"},
        "locations": {"type": "array", "items": {"type": "string"}},
        "visaSupport": {"type": "boolean"},
        "relocationBenefits": {"type": "string"},
        "isActivelyHiringToday": {"type": "boolean"},
        "sreJobs": {"type": "array", "items": _JOB_SCHEMA},
        "description": {"type": "string"},
    },
    "required": [
        "name", "website", "industry", "locations", "visaSupport",
        "relocationBenefits", "isActivelyHiringToday", "sreJobs", "description",
    ],
    "additionalProperties": False,
}

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "companies": {"type": "array", "items": _COMPANY_SCHEMA},
        "sources": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"title": {"type": "string"}, "uri": {"type": "string"}},
                "required": ["title", "uri"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["companies", "sources"],
    "additionalProperties": False,
}


def build_prompt(search: dict[str, Any]) -> str:
    role = search.get("role", "Site Reliability Engineer")
    short = search.get("role_short", "SRE")
    adjacent = " or ".join([short, *search.get("adjacent_roles", [])])
    regions = " and ".join(search.get("regions", []))
    visas = "/".join(search.get("visa_programs", []))
    origin = search.get("candidate_origin", "")

    return f"""Find all reputable tech companies in {regions} that provide work visa sponsorship ({visas}) and relocation benefits for {origin} {role}s ({short}).
For each company, list current open {adjacent} job positions that are in English.

Return JSON with a "companies" array. For each company provide:
- name
- website
- industry
- locations (array of strings)
- visaSupport (boolean)
- relocationBenefits (description string)
- isActivelyHiringToday (boolean, true only if a relevant role was posted or updated today)
- sreJobs (array of objects with 'title', 'url', 'location', 'isNew' where isNew marks postings from the last few days)
- description (short company summary)

Also return a "sources" array of the pages (title, uri) you relied on.
Focus on active hiring and specific {short} roles."""


def _source_from(title: Any, uri: Any) -> Source | None:
    if not isinstance(uri, str) or not uri.strip() or uri.strip() == PLACEHOLDER_URI:
        return None
    label = title.strip() if isinstance(title, str) and title.strip() else "Source"
    return Source(title=label, uri=uri.strip())


def _dedupe_sources(sources: Iterable[Source]) -> tuple[Source, ...]:
    seen: set[str] = set()
    out: list[Source] = []
    for s in sources:
        if s.uri not in seen:
            seen.add(s.uri)
            out.append(s)
    return tuple(out)


def parse_search_result(text: str | None, citations: Iterable[dict[str, Any]] = ()) -> SearchResult:
    """Lenient parse of the service's JSON answer.

    Never raises: anything unparseable becomes an empty catalog. Citations
    without a real URI are dropped.
    """
    try:
        data = json.loads(text or "{}")
    except (json.JSONDecodeError, TypeError) as exc:
        log.warning("Listing response is not valid JSON (%s); using empty catalog", exc)
        data = {}
    if not isinstance(data, dict):
        log.warning("Listing response is a %s, not an object; using empty catalog", type(data).__name__)
        data = {}

    companies: list[Company] = []
    raw_companies = data.get("companies")
    if isinstance(raw_companies, list):
        for item in raw_companies:
            company = Company.from_dict(item) if isinstance(item, dict) else None
            if company is None:
                log.debug("Skipping unusable company entry: %r", item)
                continue
            companies.append(company)

    sources: list[Source] = []
    for c in citations:
        s = _source_from(c.get("title"), c.get("uri"))
        if s:
            sources.append(s)
    raw_sources = data.get("sources")
    if isinstance(raw_sources, list):
        for item in raw_sources:
            if isinstance(item, dict):
                s = _source_from(item.get("title"), item.get("uri"))
                if s:
                    sources.append(s)

    return SearchResult(companies=tuple(companies), sources=_dedupe_sources(sources))


def _citations(message: Any) -> list[dict[str, Any]]:
    """``url_citation`` annotations attached to a chat completion message."""
    out: list[dict[str, Any]] = []
    for ann in getattr(message, "annotations", None) or []:
        if getattr(ann, "type", None) != "url_citation":
            continue
        cite = getattr(ann, "url_citation", None)
        if cite is not None:
            out.append({"title": getattr(cite, "title", None), "uri": getattr(cite, "url", None)})
    return out


class OpenAISearchFetcher(ListingFetcher):
    def __init__(self, settings: dict, env_getter, client: Any = None) -> None:
        self.search: dict[str, Any] = settings.get("search", {})
        self.model: str = self.search.get("model", "gpt-4o-search-preview")
        self._api_key: str = env_getter("OPENAI_API_KEY")
        self._base_url: str = env_getter("OPENAI_BASE_URL")
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self._api_key, base_url=self._base_url or None)
        return self._client

    def fetch_listings(self) -> SearchResult:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(self.search)}],
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": "company_listings", "strict": True, "schema": RESPONSE_SCHEMA},
            },
        }
        if self.search.get("web_search", True):
            kwargs["web_search_options"] = {}

        log.info("Querying %s for company listings", self.model)
        r = self._get_client().chat.completions.create(**kwargs)

        choices = getattr(r, "choices", None) or []
        if not choices:
            log.warning("Listing service returned no choices")
            return SearchResult()
        message = choices[0].message
        result = parse_search_result(getattr(message, "content", None), _citations(message))
        log.info("Listing service returned %d companies, %d sources", len(result.companies), len(result.sources))
        return result
