# --- Configuration --------------------------------------------------------------------------------

import logging
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

APP_NAME = "CyberAssess"
APP_TITLE = "Cybersecurity Compliance Self-Assessment"

# Fixed storage key for the assessment list; the local file is named after it.
ASSESSMENTS_KEY = "cybersecurity-assessments"
DATA_VERSION = "2.0.0"
EXPORT_VERSION = "2.0.0"

# Reports always measure against 75% (maturity level 3) in the CSV columns.
REPORT_TARGET_SCORE = 75
DEFAULT_TARGET_LEVEL = 3
DEFAULT_AUTOSAVE_SECONDS = 1.5

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def default_data_dir() -> Path:
    """Return a platform-appropriate per-user data directory for the app."""
    system = platform.system()
    home = Path.home()
    if system == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata) / APP_NAME
        return home / f".{APP_NAME}"
    if system == "Darwin":
        return home / "Library" / "Application Support" / APP_NAME
    xdg = os.getenv("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return home / ".local" / "share" / APP_NAME


@dataclass
class Settings:
    data_dir: Path = field(default_factory=default_data_dir)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    autosave_seconds: float = DEFAULT_AUTOSAVE_SECONDS
    target_level: int = DEFAULT_TARGET_LEVEL
    log_level: str = "INFO"

    @property
    def backend_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Build settings from environment variables, reading a ``.env`` file first.

        Malformed numeric values fall back to the defaults with a warning
        rather than stopping the app from starting.
        """
        if dotenv:
            load_dotenv()

        data_dir = os.getenv("CYBERASSESS_DATA_DIR")
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else default_data_dir(),
            supabase_url=os.getenv("SUPABASE_URL") or None,
            supabase_key=os.getenv("SUPABASE_ANON_KEY") or None,
            autosave_seconds=_env_number(
                "CYBERASSESS_AUTOSAVE_SECONDS", DEFAULT_AUTOSAVE_SECONDS, float
            ),
            target_level=_clamp_level(
                _env_number("CYBERASSESS_TARGET_LEVEL", DEFAULT_TARGET_LEVEL, int)
            ),
            log_level=(os.getenv("CYBERASSESS_LOG_LEVEL") or "INFO").upper(),
        )


def _env_number(name, default, cast):
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return cast(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring %s=%r (not a %s); using %s", name, raw, cast.__name__, default
        )
        return default


def _clamp_level(level: int) -> int:
    return min(4, max(1, int(level)))


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler used by the app entry point."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
