# autosave.py
"""
Debounced autosave of the active draft.

The controller watches form snapshots for the active draft and writes the
latest one into the draft store once no newer snapshot has arrived for
``delay_ms``. Intermediate keystrokes are coalesced; only the last value is
written. Switching to another draft drops a pending write instead of
redirecting it.
"""
from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from drafts import DraftStore

if TYPE_CHECKING:
    from scheduling import ScheduledCall, Scheduler

log = logging.getLogger(__name__)

DEBOUNCE_MS = 600


class AutoSaveState(str, Enum):
    CLEAN = "clean"
    PENDING = "pending"
    SAVING = "saving"


class AutoSaveController:
    def __init__(self, store: DraftStore, scheduler: "Scheduler", delay_ms: int = DEBOUNCE_MS):
        self._store = store
        self._scheduler = scheduler
        self.delay_ms = delay_ms

        self._session_id: Optional[str] = None
        self._baseline: Optional[dict[str, Any]] = None

        self._call: Optional["ScheduledCall"] = None
        self._pending_id: Optional[str] = None
        self._pending_values: Optional[dict[str, Any]] = None

        self._state = AutoSaveState.CLEAN

    @property
    def state(self) -> AutoSaveState:
        return self._state

    @property
    def pending_draft_id(self) -> Optional[str]:
        return self._pending_id

    @property
    def has_pending(self) -> bool:
        return self._call is not None

    # ---------------- Input ----------------

    def observe(self, values: dict[str, Any], active_draft_id: Optional[str]) -> None:
        if active_draft_id is None:
            self._drop_pending()
            self._state = AutoSaveState.CLEAN
            return

        if active_draft_id != self._session_id:
            # New session: the form was just loaded from this draft, nothing to save.
            self._drop_pending()
            self._session_id = active_draft_id
            self._baseline = copy.deepcopy(values)
            self._state = AutoSaveState.CLEAN
            return

        if values == self._baseline:
            if self._drop_pending():
                log.debug("Edits on draft %s reverted before autosave", active_draft_id)
            self._state = AutoSaveState.CLEAN
            return

        self._store.mark_draft_saving()
        self._cancel_timer()

        self._pending_id = active_draft_id
        self._pending_values = copy.deepcopy(values)
        self._call = self._scheduler.schedule(self.delay_ms, self._on_timer)
        self._state = AutoSaveState.PENDING

    def flush(self) -> bool:
        """Apply a pending write now. Returns True if something was written."""
        if self._call is None:
            return False
        self._cancel_timer()
        self._write()
        return True

    def cancel(self) -> None:
        """Stop observing; any pending write is discarded."""
        self._drop_pending()
        self._session_id = None
        self._baseline = None
        self._state = AutoSaveState.CLEAN

    # ---------------- Internals ----------------

    def _on_timer(self) -> None:
        self._call = None
        self._write()

    def _write(self) -> None:
        draft_id = self._pending_id
        values = self._pending_values
        self._pending_id = None
        self._pending_values = None
        if draft_id is None or values is None:
            self._state = AutoSaveState.CLEAN
            return

        self._state = AutoSaveState.SAVING
        self._store.update_draft(draft_id, values)
        self._store.set_draft_status(draft_id, "saved")
        if draft_id == self._session_id:
            self._baseline = values
        self._state = AutoSaveState.CLEAN
        log.debug("Autosaved draft %s", draft_id)

    def _cancel_timer(self) -> None:
        call, self._call = self._call, None
        self._scheduler.cancel(call)

    def _drop_pending(self) -> bool:
        if self._call is None:
            return False
        draft_id = self._pending_id
        self._cancel_timer()
        self._pending_id = None
        self._pending_values = None
        # Stored content is still the last saved snapshot.
        if draft_id is not None:
            self._store.set_draft_status(draft_id, "saved")
        return True
