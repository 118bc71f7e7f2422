# config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from autosave import DEBOUNCE_MS
from views import ROWS_PER_PAGE_OPTIONS

log = logging.getLogger(__name__)

_STATE_FILENAME = "ServiceLogbook_STATE.json"


def get_documents_path() -> str:
    home = os.environ.get("USERPROFILE") or os.path.expanduser("~")
    return os.path.join(home, "Documents")


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value.strip() == "" else value.strip()


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        log.warning("Ignoring %s=%r: not an integer", name, value)
        return default


@dataclass(frozen=True)
class Settings:
    state_path: str
    autosave_delay_ms: int = DEBOUNCE_MS
    rows_per_page: int = 10
    log_level: str = "INFO"


def load_settings() -> Settings:
    state_path = _getenv_str(
        "SERVICE_LOGBOOK_STATE_PATH",
        os.path.join(get_documents_path(), _STATE_FILENAME),
    )

    delay = _getenv_int("SERVICE_LOGBOOK_AUTOSAVE_MS", DEBOUNCE_MS)
    if delay < 0:
        delay = DEBOUNCE_MS

    rows = _getenv_int("SERVICE_LOGBOOK_ROWS_PER_PAGE", 10)
    if rows not in ROWS_PER_PAGE_OPTIONS:
        rows = 10

    level = _getenv_str("SERVICE_LOGBOOK_LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"

    return Settings(
        state_path=os.path.expanduser(state_path),
        autosave_delay_ms=delay,
        rows_per_page=rows,
        log_level=level,
    )
