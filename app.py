"""Streamlit UI for SRE Visa Hub."""
from __future__ import annotations

import html
import sys
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from visahub.catalog import CatalogStore, available_jobs, use_system_collation
from visahub.config import (
    STORAGE_DIR,
    ensure_dirs,
    get_env,
    load_settings,
    read_env_file,
    write_env_values,
)
from visahub.countdown import format_countdown, parse_refresh_time, time_until_refresh
from visahub.log import get_logger
from visahub.models import Company, JobListing
from visahub.sources import get_fetcher
from visahub.storage import JsonFileStore
from visahub.tracker import ApplicationTracker
from visahub.view import apply_to_job, posting_link_html

log = get_logger(__name__)

_CSS = """
<style>
[data-testid="stAppViewContainer"] {
    background: #f8fafc;
}
[data-testid="stVerticalBlockBorderWrapper"] {
    background: #ffffff;
    border-radius: 12px;
}
.company-industry {
    color: #4f46e5; font-weight: 600; font-size: 0.85rem;
}
.pill {
    display: inline-block; padding: 0.1rem 0.6rem; margin: 0 0.25rem 0.25rem 0;
    background: #f1f5f9; color: #475569; border-radius: 999px; font-size: 0.75rem;
}
.badge-new {
    background: #dcfce7; color: #166534; border-radius: 6px;
    padding: 0 0.4rem; font-size: 0.7rem; font-weight: 700;
}
.countdown {
    padding: 0.4rem 0.9rem; background: #1e1b4b; color: #e0e7ff;
    border-radius: 999px; font-size: 0.8rem; display: inline-block;
}
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


ENV_PATH = ROOT / ".env"
_SERVICE_KEYS: tuple[str, ...] = ("OPENAI_API_KEY", "OPENAI_BASE_URL", "VISAHUB_MODEL")


def _load_env() -> dict[str, str]:
    return read_env_file(ENV_PATH)


def _save_env(values: dict[str, str]) -> None:
    write_env_values(ENV_PATH, values)


def _remember_posting(url: str) -> None:
    """Tracker opener: the posting link is rendered for the user to click."""
    st.session_state["_last_posting"] = url


def _posting_notice() -> None:
    url = st.session_state.pop("_last_posting", None)
    if url:
        st.success("Application tracked. Open the posting to finish applying.", icon="✅")
        st.markdown(posting_link_html(url), unsafe_allow_html=True)
    error = st.session_state.pop("_apply_error", None)
    if error:
        st.error(error)


def _settings() -> dict:
    if "settings" not in st.session_state:
        st.session_state["settings"] = load_settings()
    return st.session_state["settings"]


def _catalog() -> CatalogStore:
    if "catalog" not in st.session_state:
        st.session_state["catalog"] = CatalogStore(get_fetcher(_settings(), get_env))
    return st.session_state["catalog"]


def _tracker() -> ApplicationTracker:
    if "tracker" not in st.session_state:
        ensure_dirs()
        tracker = ApplicationTracker(
            JsonFileStore(STORAGE_DIR),
            storage_key=_settings()["tracker"]["storage_key"],
            opener=_remember_posting,
        )
        tracker.initialize()
        st.session_state["tracker"] = tracker
    return st.session_state["tracker"]


def _load_catalog() -> None:
    with st.spinner("Scanning career portals for the latest SRE roles…"):
        _catalog().load()


def _apply(job: JobListing, company_name: str) -> None:
    outcome = apply_to_job(_tracker(), job, company_name)
    if outcome.error:
        st.session_state["_apply_error"] = outcome.error


def _request_clear() -> None:
    st.session_state["_confirm_clear"] = True


def _resolve_clear(confirmed: bool) -> None:
    _tracker().clear(confirm=lambda: confirmed)
    st.session_state["_confirm_clear"] = False


# ── Components ───────────────────────────────────────────────────────────


@st.fragment(run_every=1)
def _countdown() -> None:
    refresh = _settings()["refresh"]
    left = time_until_refresh(datetime.now(timezone.utc), parse_refresh_time(refresh["time_utc"]))
    st.markdown(
        f'<span class="countdown">⏱ Next refresh ({html.escape(refresh["label"])}): '
        f"<b>{format_countdown(left)}</b></span>",
        unsafe_allow_html=True,
    )


def _company_card(company: Company, idx: int, applied_urls: frozenset[str]) -> None:
    with st.container(border=True):
        head, link = st.columns([5, 1])
        with head:
            st.markdown(f"### {company.name}")
            if company.industry:
                st.markdown(
                    f'<span class="company-industry">{html.escape(company.industry)}</span>',
                    unsafe_allow_html=True,
                )
        with link:
            if company.website:
                st.link_button("↗", company.website, help="Company website")

        if company.is_actively_hiring_today:
            st.caption("🟢 Actively hiring today")
        if company.description:
            st.write(company.description)
        if company.locations:
            pills = "".join(f'<span class="pill">📍 {html.escape(loc)}</span>' for loc in company.locations)
            st.markdown(pills, unsafe_allow_html=True)

        c1, c2 = st.columns(2)
        c1.metric("Visa Sponsor", "Yes" if company.visa_support else "Unconfirmed")
        c2.metric("Relocation", "Available", help=company.relocation_benefits or None)
        if company.relocation_benefits:
            st.caption(company.relocation_benefits)

        st.markdown("**💼 Open SRE Roles**")
        jobs = available_jobs(company, applied_urls)
        if not company.sre_jobs:
            st.caption("_No specific SRE links found, check career site._")
        elif not jobs:
            st.caption("_You have applied to every listed role here._")
        for j_idx, job in enumerate(jobs):
            title_col, btn_col = st.columns([4, 1])
            with title_col:
                new = ' <span class="badge-new">NEW</span>' if job.is_new else ""
                st.markdown(f"{html.escape(job.title)}{new}", unsafe_allow_html=True)
                if job.location:
                    st.caption(job.location)
            with btn_col:
                st.button(
                    "Apply",
                    key=f"apply-{idx}-{j_idx}-{job.url}",
                    on_click=_apply,
                    args=(job, company.name),
                    use_container_width=True,
                )


def _tracker_table(tracker: ApplicationTracker) -> None:
    if not len(tracker):
        return

    st.divider()
    head, action = st.columns([4, 1])
    with head:
        st.subheader("Application Tracker")
        st.caption("Your personal progress report")
    with action:
        st.button("Clear History", on_click=_request_clear, use_container_width=True)

    if st.session_state.get("_confirm_clear"):
        st.warning(f"Delete all {len(tracker)} tracked application(s)? This cannot be undone.")
        yes, no = st.columns(2)
        yes.button("Yes, clear", type="primary", on_click=_resolve_clear, args=(True,), use_container_width=True)
        no.button("Cancel", on_click=_resolve_clear, args=(False,), use_container_width=True)

    df = pd.DataFrame([e.to_dict() for e in tracker.entries])
    st.dataframe(
        df[["jobTitle", "companyName", "dateApplied", "url"]],
        use_container_width=True,
        column_config={
            "jobTitle": "Job Title",
            "companyName": "Company",
            "dateApplied": "Applied Date",
            "url": st.column_config.LinkColumn("Posting"),
        },
        hide_index=True,
    )


# ── Page: Opportunities ──────────────────────────────────────────────────


def page_opportunities() -> None:
    catalog = _catalog()
    tracker = _tracker()
    _posting_notice()

    top_left, top_mid, top_right = st.columns([3, 2, 1])
    with top_left:
        st.header("Targeted Opportunities")
    with top_mid:
        _countdown()
    with top_right:
        refresh = st.button("🔄 Refresh", disabled=catalog.state.loading, use_container_width=True)

    regions = " and ".join(_settings()["search"]["regions"])
    st.write(
        f"Curated list of tech companies in {regions} offering visa sponsorship and "
        "relocation support for Site Reliability Engineers. Refreshed daily."
    )

    if refresh or not st.session_state.get("_initial_load_done"):
        st.session_state["_initial_load_done"] = True
        _load_catalog()

    search_term = st.text_input("Filter", placeholder="Filter by name, industry, location…")

    state = catalog.state
    if state.error:
        st.error(f"**Error loading jobs** — {state.error}")
        st.button("Try again", on_click=_load_catalog)

    companies = catalog.filter(search_term)
    if companies:
        applied = tracker.applied_urls
        cols = st.columns(3)
        for idx, company in enumerate(companies):
            with cols[idx % 3]:
                _company_card(company, idx, applied)
    elif state.has_data:
        st.info("**No companies found.** Try adjusting your filter or check back tomorrow.")

    if state.sources:
        st.divider()
        st.caption("VERIFIED SOURCES")
        st.markdown(
            " · ".join(f"[{s.title}]({s.uri})" for s in state.sources)
        )

    _tracker_table(tracker)


# ── Page: Settings ───────────────────────────────────────────────────────


def page_settings() -> None:
    st.header("Settings")

    env = _load_env()
    with st.form("service_creds"):
        st.subheader("Listing Service")
        st.caption("Any OpenAI-compatible endpoint with web search. Without a key the dashboard shows sample data.")
        api_key = st.text_input("API key", value=env.get("OPENAI_API_KEY", ""), type="password")
        base_url = st.text_input(
            "Base URL", value=env.get("OPENAI_BASE_URL", ""), placeholder="Default OpenAI endpoint",
        )
        model = st.text_input(
            "Model override", value=env.get("VISAHUB_MODEL", ""),
            placeholder=_settings()["search"]["model"],
        )
        if st.form_submit_button("Save", type="primary", use_container_width=True):
            _save_env(dict(zip(_SERVICE_KEYS, (api_key, base_url, model))))
            for key in ("settings", "catalog", "_initial_load_done"):
                st.session_state.pop(key, None)
            st.success("Settings saved. The catalog reloads on the next visit to Opportunities.")

    st.subheader("Local Data")
    st.caption(f"Tracked applications are stored in `{STORAGE_DIR}`.")
    st.json(_settings(), expanded=False)


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_CSS, unsafe_allow_html=True)


def _wrap_opportunities():
    _inject_css()
    page_opportunities()


def _wrap_settings():
    _inject_css()
    page_settings()


use_system_collation()
st.set_page_config(page_title="SRE Visa Hub", page_icon="🛰️", layout="wide")

pages = [
    st.Page(_wrap_opportunities, title="Opportunities", icon="🚀", url_path="opportunities", default=True),
    st.Page(_wrap_settings, title="Settings", icon="⚙️", url_path="settings"),
]

nav = st.navigation(pages)
nav.run()
