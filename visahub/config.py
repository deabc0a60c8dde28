"""Load dashboard settings and env configuration."""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values, load_dotenv, set_key

from visahub.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
STORAGE_DIR: Path = DATA_DIR / "local_storage"

DEFAULT_SETTINGS: dict[str, Any] = {
    "search": {
        "model": "gpt-4o-search-preview",
        "web_search": True,
        "role": "Site Reliability Engineer",
        "role_short": "SRE",
        "adjacent_roles": ["DevOps"],
        "regions": ["Amsterdam, Netherlands", "Luxembourg"],
        "candidate_origin": "Indian",
        "visa_programs": ["HSM", "Blue Card"],
    },
    "refresh": {
        # 9 PM IST
        "time_utc": "15:30",
        "label": "9 PM IST",
    },
    "tracker": {
        "storage_key": "sre_job_tracker",
    },
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Settings from ``config/settings.yaml`` layered over the defaults.

    A missing file is not an error; the defaults describe the stock
    Amsterdam/Luxembourg SRE search.
    """
    path = path or SETTINGS_PATH
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
        if isinstance(loaded, dict):
            data = loaded
        elif loaded is not None:
            log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(loaded).__name__)

    settings = _merge(DEFAULT_SETTINGS, data)

    model_override = get_env("VISAHUB_MODEL")
    if model_override:
        settings["search"]["model"] = model_override

    return settings


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    for d in (DATA_DIR, STORAGE_DIR):
        d.mkdir(parents=True, exist_ok=True)


def read_env_file(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    return {k: v or "" for k, v in dotenv_values(path).items()}


def write_env_values(path: Path, values: dict[str, str]) -> None:
    """Update keys in *path* in place and export them to this process."""
    path.touch(exist_ok=True)
    for key, value in values.items():
        set_key(str(path), key, value, quote_mode="never")
        os.environ[key] = value
