import logging
from pathlib import Path

import pytest

from cyberassess.config import (DEFAULT_AUTOSAVE_SECONDS, DEFAULT_TARGET_LEVEL, Settings,
                                configure_logging, default_data_dir)

ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "CYBERASSESS_DATA_DIR",
    "CYBERASSESS_AUTOSAVE_SECONDS",
    "CYBERASSESS_TARGET_LEVEL",
    "CYBERASSESS_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings.from_env(dotenv=False)
    assert s.data_dir == default_data_dir()
    assert s.autosave_seconds == DEFAULT_AUTOSAVE_SECONDS
    assert s.target_level == DEFAULT_TARGET_LEVEL
    assert s.log_level == "INFO"
    assert not s.backend_configured


def test_values_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("CYBERASSESS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CYBERASSESS_AUTOSAVE_SECONDS", "0.5")
    monkeypatch.setenv("CYBERASSESS_TARGET_LEVEL", "2")
    monkeypatch.setenv("CYBERASSESS_LOG_LEVEL", "debug")

    s = Settings.from_env(dotenv=False)
    assert s.data_dir == Path(tmp_path)
    assert s.backend_configured
    assert s.autosave_seconds == 0.5
    assert s.target_level == 2
    assert s.log_level == "DEBUG"


def test_bad_numbers_fall_back(monkeypatch, caplog):
    monkeypatch.setenv("CYBERASSESS_AUTOSAVE_SECONDS", "soon")
    monkeypatch.setenv("CYBERASSESS_TARGET_LEVEL", "9")
    s = Settings.from_env(dotenv=False)
    assert s.autosave_seconds == DEFAULT_AUTOSAVE_SECONDS
    assert s.target_level == 4
    assert "CYBERASSESS_AUTOSAVE_SECONDS" in caplog.text


def test_half_configured_backend_is_local_only(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "")
    assert not Settings.from_env(dotenv=False).backend_configured


def test_configure_logging_accepts_unknown_level():
    configure_logging("nonsense")
    configure_logging("warning")
    assert logging.getLogger("cyberassess").getEffectiveLevel() <= logging.CRITICAL
