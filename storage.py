# storage.py
from __future__ import annotations

import contextlib
import datetime as _dt
import json
import logging
import os
from typing import Any, Optional

log = logging.getLogger(__name__)

# -------------------------------
# Public constants
# -------------------------------

STATE_KEY = "persist:root"
SCHEMA_VERSION = 1

# Only these slices of application state are written to disk.
PERSISTED_SLICES = ("drafts", "service_logs")


# -------------------------------
# Time
# -------------------------------

def now_local_str() -> str:
    return _dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")


# -------------------------------
# Load / Save
# -------------------------------

def load_state(path: str) -> Optional[dict[str, Any]]:
    """
    Read the persisted state blob.

    Returns None when there is nothing usable on disk: missing file,
    unreadable file, bad JSON, or a blob without our root key.
    """
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            blob = json.load(f)
    except (OSError, ValueError) as ex:
        log.warning("Could not read saved state %s: %s", path, ex)
        return None

    state = blob.get(STATE_KEY) if isinstance(blob, dict) else None
    if not isinstance(state, dict):
        log.warning("Saved state %s has no %r entry; starting empty", path, STATE_KEY)
        return None

    return {k: state[k] for k in PERSISTED_SLICES if isinstance(state.get(k), dict)}


def save_state(path: str, state: dict[str, Any]) -> bool:
    """
    Write the state blob atomically. Failures are logged, not raised:
    the session carries on in memory.
    """
    blob = {
        STATE_KEY: {
            "schema_version": SCHEMA_VERSION,
            "saved_at": now_local_str(),
            **{k: state[k] for k in PERSISTED_SLICES if k in state},
        }
    }
    tmp = path + ".tmp"
    try:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(blob, f, indent=2)
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError) as ex:
        log.error("Could not save state to %s: %s", path, ex)
        with contextlib.suppress(OSError):
            if os.path.exists(tmp):
                os.remove(tmp)
        return False
    return True
