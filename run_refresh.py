#!/usr/bin/env python3
"""Command-line access to the catalog and the application tracker.

    python run_refresh.py refresh [TERM]   fetch companies, optionally filtered
    python run_refresh.py tracker          list tracked applications
    python run_refresh.py clear            empty the tracker (asks first)
"""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from visahub.catalog import CatalogStore, use_system_collation
from visahub.config import STORAGE_DIR, ensure_dirs, get_env, load_settings
from visahub.log import get_logger
from visahub.sources import get_fetcher
from visahub.storage import JsonFileStore
from visahub.tracker import ApplicationTracker

log = get_logger(__name__)


def _ask_yn(prompt: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    val = input(f"  {prompt} ({hint}): ").strip().lower()
    if not val:
        return default
    return val in ("y", "yes")


def _tracker(settings: dict) -> ApplicationTracker:
    ensure_dirs()
    tracker = ApplicationTracker(
        JsonFileStore(STORAGE_DIR),
        storage_key=settings["tracker"]["storage_key"],
    )
    tracker.initialize()
    return tracker


def cmd_refresh(settings: dict, term: str) -> int:
    catalog = CatalogStore(get_fetcher(settings, get_env))
    catalog.load()
    state = catalog.state
    if state.error:
        log.error(state.error)
        return 1

    applied = _tracker(settings).applied_urls
    companies = catalog.filter(term)
    if not companies:
        print("\n  No companies found.\n")
        return 0

    for c in companies:
        flag = "  [hiring today]" if c.is_actively_hiring_today else ""
        print(f"\n  {c.name} — {c.industry}{flag}")
        print(f"    {', '.join(c.locations) or 'Location n/a'} | {c.website}")
        for job in c.sre_jobs:
            mark = "✓" if job.url in applied else "•"
            print(f"    {mark} {job.title} ({job.location or 'n/a'})  {job.url}")
    if state.sources:
        print("\n  Sources:")
        for s in state.sources:
            print(f"    - {s.title}: {s.uri}")
    print()
    return 0


def cmd_tracker(settings: dict) -> int:
    tracker = _tracker(settings)
    if not len(tracker):
        print("\n  No applications tracked yet.\n")
        return 0
    print()
    for e in tracker:
        print(f"  {e.date_applied:<12} {e.company_name:<24} {e.job_title}")
        print(f"  {'':<12} {e.url}")
    print()
    return 0


def cmd_clear(settings: dict) -> int:
    tracker = _tracker(settings)
    if not len(tracker):
        print("\n  Nothing to clear.\n")
        return 0
    if tracker.clear(confirm=lambda: _ask_yn(f"Delete all {len(tracker)} tracked application(s)?")):
        print("  Application history cleared.")
    else:
        print("  Cancelled.")
    return 0


if __name__ == "__main__":
    args = sys.argv[1:]
    command = args[0] if args else "refresh"
    use_system_collation()
    settings = load_settings()

    if command == "refresh":
        sys.exit(cmd_refresh(settings, " ".join(args[1:])))
    elif command == "tracker":
        sys.exit(cmd_tracker(settings))
    elif command == "clear":
        sys.exit(cmd_clear(settings))
    else:
        print(__doc__)
        sys.exit(2)
