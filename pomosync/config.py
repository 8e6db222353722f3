# -*- coding: utf-8 -*-

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

APP_NAME = "pomosync"


def user_data_dir(app_name: str = APP_NAME) -> Path:
    """Return per-user data dir (Windows/macOS/Linux)."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~\\AppData\\Local"))
    elif os.name == "posix":
        base = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    else:
        base = os.path.expanduser("~")
    return Path(base) / app_name


@dataclass(frozen=True)
class AppConfig:
    db_path: str
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    auth_redirect_url: Optional[str] = None
    log_level: str = "INFO"

    @property
    def cloud_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """
    Read settings from the environment (and a .env file if present).
    Missing Supabase credentials just mean local-only mode.
    """
    load_dotenv(env_file)

    db_path = os.getenv("POMOSYNC_DB_PATH")
    if not db_path:
        data_dir = user_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        db_path = str(data_dir / "pomosync.db")

    return AppConfig(
        db_path=db_path,
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
        auth_redirect_url=os.getenv("POMOSYNC_AUTH_REDIRECT") or None,
        log_level=(os.getenv("POMOSYNC_LOG_LEVEL") or "INFO").upper(),
    )
