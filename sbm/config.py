from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from . import __version__
from .store import default_store_path


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


@dataclass
class Settings:
    # Store
    store_path: str = ""  # empty => default_store_path()

    # Title fetching
    fetch_titles: bool = True
    fetch_timeout_s: int = 15
    fetch_user_agent: str = f"sbm/{__version__}"
    fetch_max_bytes: int = 350_000

    # Opening
    opener: str = ""  # empty => platform launcher

    # Listing / prompts
    list_unique: bool = False
    assume_yes: bool = False

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False

    def resolved_store_path(self) -> Path:
        if self.store_path:
            return Path(self.store_path).expanduser()
        return default_store_path()

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.store_path = _env_str("SBM_STORE", s.store_path)

        s.fetch_titles = _env_bool("SBM_FETCH_TITLES", s.fetch_titles)
        s.fetch_timeout_s = _env_int("SBM_FETCH_TIMEOUT_S", s.fetch_timeout_s)
        s.fetch_user_agent = _env_str("SBM_FETCH_UA", s.fetch_user_agent)
        s.fetch_max_bytes = _env_int("SBM_FETCH_MAX_BYTES", s.fetch_max_bytes)

        s.opener = _env_str("SBM_OPENER", s.opener)

        s.list_unique = _env_bool("SBM_LIST_UNIQUE", s.list_unique)
        s.assume_yes = _env_bool("SBM_ASSUME_YES", s.assume_yes)

        s.log_level = _env_str("SBM_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("SBM_NO_COLOR", s.no_color)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if hasattr(s, k):
                setattr(s, k, v)
        return s


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()
