# models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, asdict, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional


class ServiceType(str, Enum):
    PLANNED = "planned"
    UNPLANNED = "unplanned"
    EMERGENCY = "emergency"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ServiceType"]:
        # accept display names such as "Planned"
        wanted = str(value).strip().lower()
        for member in cls:
            if member.value == wanted:
                return member
        return None

    @property
    def label(self) -> str:
        return self.value.title()


DraftStatus = Literal["idle", "saving", "saved"]

# Fields a draft may carry; everything a record has except identity and timestamps.
DRAFT_FIELDS = (
    "provider_id",
    "service_order",
    "car_id",
    "odometer",
    "engine_hours",
    "start_date",
    "end_date",
    "type",
    "service_description",
)


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _coerce_type(value: Any) -> Optional[ServiceType]:
    if value is None or value == "":
        return None
    return ServiceType(value)


@dataclass(frozen=True)
class ServiceLog:
    id: str
    provider_id: str
    service_order: str
    car_id: str
    odometer: float
    engine_hours: float
    start_date: str
    end_date: str
    type: ServiceType
    service_description: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["type"] = self.type.value
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ServiceLog":
        return cls(
            id=str(raw["id"]),
            provider_id=str(raw.get("provider_id", "")),
            service_order=str(raw.get("service_order", "")),
            car_id=str(raw.get("car_id", "")),
            odometer=float(raw.get("odometer", 0)),
            engine_hours=float(raw.get("engine_hours", 0)),
            start_date=str(raw.get("start_date", "")),
            end_date=str(raw.get("end_date", "")),
            type=ServiceType(raw["type"]),
            service_description=str(raw.get("service_description", "")),
            created_at=str(raw["created_at"]),
            updated_at=str(raw.get("updated_at") or raw["created_at"]),
        )


@dataclass
class Draft:
    """A partially filled service log. Every field except ``id`` may be unset."""

    id: str
    provider_id: Optional[str] = None
    service_order: Optional[str] = None
    car_id: Optional[str] = None
    odometer: Optional[float] = None
    engine_hours: Optional[float] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    type: Optional[ServiceType] = None
    service_description: Optional[str] = None

    def fields_dict(self) -> dict[str, Any]:
        """Set fields only, keyed by name (``id`` excluded)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "id" and getattr(self, f.name) is not None
        }

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.type is not None:
            d["type"] = self.type.value
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Draft":
        known = {k: raw[k] for k in DRAFT_FIELDS if raw.get(k) is not None}
        if "type" in known:
            known["type"] = _coerce_type(known["type"])
        return cls(id=str(raw["id"]), **known)


@dataclass(frozen=True)
class DraftListItem:
    id: str
    label: str


@dataclass
class ValidationResult:
    """Outcome of validating candidate service log fields.

    Exactly one of ``value`` / ``errors`` is meaningful: ``value`` holds the
    normalized fields on success, ``errors`` maps field name to message.
    """

    value: Optional[dict[str, Any]] = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors
