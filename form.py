# form.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Callable, Optional, Union

from models import DRAFT_FIELDS, Draft, ServiceType


def today_str() -> str:
    return date.today().isoformat()


def add_one_day(date_str: str) -> str:
    return (date.fromisoformat(date_str) + timedelta(days=1)).isoformat()


def parse_number(text: Any) -> Union[float, str]:
    """Form number inputs: blank means 0, anything unparsable is kept for validation."""
    if text is None:
        return 0
    if isinstance(text, (int, float)):
        return text
    s = str(text).strip()
    if not s:
        return 0
    try:
        return float(s)
    except ValueError:
        return s


def default_values(draft: Optional[Draft]) -> dict[str, Any]:
    """Form values for a draft, falling back to defaults for unset fields."""
    today = today_str()
    d = draft.fields_dict() if draft is not None else {}

    end_date = d.get("end_date")
    if not end_date:
        start = d.get("start_date")
        end_date = add_one_day(start) if start else add_one_day(today)

    return {
        "provider_id": d.get("provider_id", ""),
        "service_order": d.get("service_order", ""),
        "car_id": d.get("car_id", ""),
        "odometer": d.get("odometer", 0),
        "engine_hours": d.get("engine_hours", 0),
        "start_date": d.get("start_date", today),
        "end_date": end_date,
        "type": d.get("type", ServiceType.PLANNED),
        "service_description": d.get("service_description", ""),
    }


class ServiceLogFormModel:
    """
    Headless state of the draft form.

    Every change is reported to ``on_change`` with a full snapshot; the
    window wires this to the autosave controller.
    """

    def __init__(self, on_change: Optional[Callable[[dict[str, Any]], None]] = None):
        self.on_change = on_change
        self._values = default_values(None)

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    def get(self, name: str) -> Any:
        return self._values[name]

    def reset(self, draft: Optional[Draft]) -> None:
        self._values = default_values(draft)
        self._notify()

    def set_value(self, name: str, value: Any) -> None:
        if name not in DRAFT_FIELDS:
            raise KeyError(name)
        if name in ("odometer", "engine_hours"):
            value = parse_number(value)
        if name == "type" and value:
            value = ServiceType(value)
        if self._values.get(name) == value:
            return

        self._values[name] = value
        # changing the start date moves the end date to the following day
        if name == "start_date" and value:
            try:
                self._values["end_date"] = add_one_day(value)
            except ValueError:
                pass  # half-typed date, leave end date as is
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.values)
