"""Streamlit-free helpers behind the dashboard's apply action."""
from __future__ import annotations

import html
from dataclasses import dataclass

from visahub.log import get_logger
from visahub.models import JobListing
from visahub.tracker import ApplicationTracker

log = get_logger(__name__)

SAVE_ERROR_MESSAGE = "Could not save this application to the local tracker. Check disk space and permissions."


@dataclass(frozen=True)
class ApplyOutcome:
    recorded: bool
    error: str | None = None


def apply_to_job(tracker: ApplicationTracker, job: JobListing, company_name: str) -> ApplyOutcome:
    """Record *job*; storage failures come back as a message, never raised."""
    try:
        return ApplyOutcome(recorded=tracker.record_application(job, company_name))
    except OSError as exc:
        log.error("Saving application for %s failed: %s", job.url, exc)
        return ApplyOutcome(recorded=False, error=SAVE_ERROR_MESSAGE)


def posting_link_html(url: str, label: str = "Open posting ↗") -> str:
    """Anchor the user clicks to open a posting in an isolated new tab."""
    return (
        f'<a href="{html.escape(url, quote=True)}" target="_blank" '
        f'rel="noopener noreferrer">{html.escape(label)}</a>'
    )
