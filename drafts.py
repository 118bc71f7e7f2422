# drafts.py
from __future__ import annotations

import dataclasses
from typing import Any, Callable, Optional

from models import DRAFT_FIELDS, Draft, DraftListItem, DraftStatus, ServiceType, new_id

LABEL_SEPARATOR = " • "

_STATUSES = ("idle", "saving", "saved")


def _clean_changes(changes: Optional[dict[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in (changes or {}).items():
        if k not in DRAFT_FIELDS:
            continue
        if k == "type":
            v = ServiceType(v) if v else None
        out[k] = v
    return out


class DraftStore:
    """
    In-progress drafts keyed by id, one active pointer, and a save-status
    side table kept in lockstep with the drafts mapping.

    Updates and deletes that reference a missing id are silent no-ops:
    autosave timers can fire after a draft was removed.
    """

    def __init__(
        self,
        *,
        id_factory: Callable[[], str] = new_id,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._id_factory = id_factory
        self.on_change = on_change

        self._drafts: dict[str, Draft] = {}
        self._status: dict[str, DraftStatus] = {}
        self._active_id: Optional[str] = None

    # ---------------- Queries ----------------

    def __len__(self) -> int:
        return len(self._drafts)

    def __contains__(self, draft_id: object) -> bool:
        return draft_id in self._drafts

    @property
    def active_draft_id(self) -> Optional[str]:
        return self._active_id

    def get_draft(self, draft_id: str) -> Optional[Draft]:
        d = self._drafts.get(draft_id)
        return dataclasses.replace(d) if d is not None else None

    def active_draft(self) -> Optional[Draft]:
        if self._active_id is None:
            return None
        return self.get_draft(self._active_id)

    def status_of(self, draft_id: str) -> DraftStatus:
        return self._status.get(draft_id, "idle")

    def active_status(self) -> DraftStatus:
        if self._active_id is None:
            return "idle"
        return self.status_of(self._active_id)

    def list_drafts(self) -> list[DraftListItem]:
        items: list[DraftListItem] = []
        empty_counter = 0
        for draft_id, d in self._drafts.items():
            parts = [p for p in (d.provider_id, d.service_order, d.car_id) if p]
            if parts:
                label = LABEL_SEPARATOR.join(parts)
            else:
                empty_counter += 1
                label = f"Empty draft #{empty_counter}"
            items.append(DraftListItem(id=draft_id, label=label))
        return items

    # ---------------- Mutations ----------------

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def set_draft_status(self, draft_id: str, status: DraftStatus) -> None:
        if status not in _STATUSES:
            raise ValueError(f"Unknown draft status: {status!r}")
        if draft_id not in self._drafts:
            return
        if self._status.get(draft_id) == status:
            return
        self._status[draft_id] = status
        self._changed()

    def create_draft(self, initial: Optional[dict[str, Any]] = None) -> str:
        draft_id = self._id_factory()
        while not draft_id or draft_id in self._drafts:
            draft_id = self._id_factory()

        self._drafts[draft_id] = Draft(id=draft_id, **_clean_changes(initial))
        self._status[draft_id] = "saved"
        self._active_id = draft_id
        self._changed()
        return draft_id

    def update_draft(self, draft_id: str, changes: dict[str, Any]) -> None:
        existing = self._drafts.get(draft_id)
        if existing is None:
            return
        self._drafts[draft_id] = dataclasses.replace(existing, **_clean_changes(changes))
        self._changed()

    def delete_draft(self, draft_id: str) -> None:
        if draft_id not in self._drafts:
            return
        del self._drafts[draft_id]
        self._status.pop(draft_id, None)
        if self._active_id == draft_id:
            self._active_id = None
        self._changed()

    def clear_all_drafts(self) -> None:
        self._drafts = {}
        self._status = {}
        self._active_id = None
        self._changed()

    def set_active_draft(self, draft_id: str) -> None:
        if draft_id not in self._drafts or self._active_id == draft_id:
            return
        self._active_id = draft_id
        self._changed()

    def mark_draft_saving(self) -> None:
        if self._active_id is not None:
            self.set_draft_status(self._active_id, "saving")

    def mark_draft_saved(self) -> None:
        if self._active_id is not None:
            self.set_draft_status(self._active_id, "saved")

    # ---------------- Persistence ----------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "drafts": {k: d.to_dict() for k, d in self._drafts.items()},
            "active_draft_id": self._active_id,
            "saving_status_by_id": {k: self.status_of(k) for k in self._drafts},
        }

    def load(self, raw: dict[str, Any]) -> None:
        """Replace the whole state with a previously serialized one."""
        drafts = {str(k): Draft.from_dict(v) for k, v in (raw.get("drafts") or {}).items()}
        raw_status = raw.get("saving_status_by_id") or {}
        status: dict[str, DraftStatus] = {}
        for k in drafts:
            s = raw_status.get(k, "idle")
            # no write can still be in flight after a restart
            if s == "saving":
                s = "saved"
            status[k] = s if s in _STATUSES else "idle"

        active = raw.get("active_draft_id")
        self._drafts = drafts
        self._status = status
        self._active_id = active if active in drafts else None

    @classmethod
    def from_dict(cls, raw: dict[str, Any], **kwargs: Any) -> "DraftStore":
        store = cls(**kwargs)
        store.load(raw)
        return store
