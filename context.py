# context.py
"""
Application state: the draft store, the service log list, the autosave
controller and their persistence, passed around explicitly instead of
living in module globals.

Open with ``AppContext.open(settings, scheduler)`` (restores the saved state
or starts empty) and ``close()`` on exit (flushes pending autosave and
writes the state).
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import storage
from autosave import AutoSaveController
from config import Settings
from drafts import DraftStore
from models import ServiceLog, ValidationResult, new_id, utc_now_iso
from schema import validate_service_log
from service_logs import (
    ServiceLogsState,
    add_service_log,
    delete_service_log,
    get_service_log,
    update_service_log,
)

log = logging.getLogger(__name__)

Validator = Callable[[dict[str, Any]], ValidationResult]
Listener = Callable[[], None]


class AppContext:
    def __init__(
        self,
        settings: Settings,
        scheduler,
        *,
        validator: Validator = validate_service_log,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.settings = settings
        self._validator = validator
        self._clock = clock
        self._listeners: list[Listener] = []
        self._persisting = False
        self._closed = False

        self.drafts = DraftStore(id_factory=id_factory, on_change=self._changed)
        self.service_logs = ServiceLogsState()
        self.autosave = AutoSaveController(self.drafts, scheduler, settings.autosave_delay_ms)

    # ---------------- Lifecycle ----------------

    @classmethod
    def open(cls, settings: Settings, scheduler, **kwargs: Any) -> "AppContext":
        ctx = cls(settings, scheduler, **kwargs)
        ctx.restore()
        return ctx

    def restore(self) -> None:
        raw = storage.load_state(self.settings.state_path)
        if raw:
            try:
                logs = ServiceLogsState.from_dict(raw.get("service_logs") or {})
                self.drafts.load(raw.get("drafts") or {})
                self.service_logs = logs
                log.info(
                    "Restored %d draft(s) and %d service log(s)",
                    len(self.drafts),
                    len(self.service_logs),
                )
            except (KeyError, TypeError, ValueError, AttributeError) as ex:
                log.warning("Saved state is corrupt, starting empty: %s", ex)
                self.drafts.load({})
                self.service_logs = ServiceLogsState()
        self._persisting = True

    def close(self) -> None:
        if self._closed:
            return
        self.autosave.flush()
        self.autosave.cancel()
        self.persist()
        self._closed = True

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ---------------- Change tracking ----------------

    def snapshot(self) -> dict[str, Any]:
        return {
            "drafts": self.drafts.to_dict(),
            "service_logs": self.service_logs.to_dict(),
        }

    def persist(self) -> bool:
        return storage.save_state(self.settings.state_path, self.snapshot())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        if self._persisting:
            self.persist()
        for listener in list(self._listeners):
            listener()

    # ---------------- Drafts ----------------

    def observe_form(self, values: dict[str, Any]) -> None:
        self.autosave.observe(values, self.drafts.active_draft_id)

    def create_draft(self, initial: Optional[dict[str, Any]] = None) -> str:
        self.autosave.cancel()
        return self.drafts.create_draft(initial)

    def set_active_draft(self, draft_id: str) -> None:
        if draft_id == self.drafts.active_draft_id or draft_id not in self.drafts:
            return
        self.autosave.cancel()
        self.drafts.set_active_draft(draft_id)

    def delete_draft(self, draft_id: str) -> None:
        if draft_id == self.drafts.active_draft_id or draft_id == self.autosave.pending_draft_id:
            self.autosave.cancel()
        self.drafts.delete_draft(draft_id)

    def clear_all_drafts(self) -> None:
        self.autosave.cancel()
        self.drafts.clear_all_drafts()

    def save_active_draft(self, values: dict[str, Any]) -> bool:
        """Explicit save of the form values into the active draft."""
        draft_id = self.drafts.active_draft_id
        if draft_id is None:
            return False
        self.autosave.cancel()
        self.drafts.update_draft(draft_id, values)
        self.drafts.mark_draft_saved()
        # what was just written becomes the autosave baseline
        self.autosave.observe(values, draft_id)
        return True

    def promote_active_draft(self, values: Optional[dict[str, Any]] = None) -> ValidationResult:
        """
        Turn the active draft into a service log.

        A pending autosave is applied first so the draft holds the latest
        edits. On validation failure nothing changes.
        """
        draft_id = self.drafts.active_draft_id
        if draft_id is None:
            return ValidationResult(errors={"draft": "No active draft"})

        self.autosave.flush()
        if values is None:
            draft = self.drafts.get_draft(draft_id)
            values = draft.fields_dict() if draft is not None else {}

        result = self._validator(values)
        if not result.ok:
            return result

        now = self._clock()
        record = ServiceLog(id=draft_id, created_at=now, updated_at=now, **result.value)

        self.autosave.cancel()
        self.service_logs = add_service_log(self.service_logs, record)
        # deleting the draft notifies listeners and persists both stores at once
        self.drafts.delete_draft(draft_id)
        log.info("Promoted draft %s to a service log", draft_id)
        return result

    # ---------------- Service logs ----------------

    def update_service_log(self, log_id: str, values: dict[str, Any]) -> ValidationResult:
        result = self._validator(values)
        if not result.ok:
            return result

        existing = get_service_log(self.service_logs, log_id)
        if existing is None:
            return result

        updated = ServiceLog(
            id=existing.id,
            created_at=existing.created_at,
            updated_at=self._clock(),
            **result.value,
        )
        self._set_service_logs(update_service_log(self.service_logs, updated))
        return result

    def delete_service_log(self, log_id: str) -> None:
        self._set_service_logs(delete_service_log(self.service_logs, log_id))

    def _set_service_logs(self, state: ServiceLogsState) -> None:
        if state is self.service_logs:
            return
        self.service_logs = state
        self._changed()
