# schema.py
from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from models import ServiceType, ValidationResult

REQUIRED_MESSAGES = {
    "provider_id": "Provider ID is required",
    "service_order": "Service order is required",
    "car_id": "Car ID is required",
    "odometer": "Odometer is required",
    "engine_hours": "Engine hours is required",
    "start_date": "Start date is required",
    "end_date": "End date is required",
    "type": "Service type is required",
}

INVALID_MESSAGES = {
    "odometer": "Odometer must be a number",
    "engine_hours": "Engine hours must be a number",
    "start_date": "Start date must be a YYYY-MM-DD date",
    "end_date": "End date must be a YYYY-MM-DD date",
    "type": "Invalid service type",
}

_VALUE_ERROR_PREFIX = "Value error, "


class ServiceLogInput(BaseModel):
    """Fields of a valid service log, as entered in the form."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    provider_id: str
    service_order: str
    car_id: str
    odometer: float
    engine_hours: float
    start_date: str
    end_date: str
    type: ServiceType
    service_description: str = ""

    @field_validator("provider_id", "service_order", "car_id", "start_date", "end_date")
    @classmethod
    def _not_blank(cls, v: str, info) -> str:
        if not v:
            raise ValueError(REQUIRED_MESSAGES[info.field_name])
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def _iso_date(cls, v: str, info) -> str:
        try:
            date.fromisoformat(v)
        except ValueError:
            raise ValueError(INVALID_MESSAGES[info.field_name]) from None
        return v

    @field_validator("odometer")
    @classmethod
    def _odometer_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Odometer must be 0 or greater")
        return v

    @field_validator("engine_hours")
    @classmethod
    def _engine_hours_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Engine hours must be 0 or greater")
        return v

    @field_validator("service_description", mode="before")
    @classmethod
    def _description_default(cls, v: Any) -> Any:
        return "" if v is None else v

    @model_validator(mode="after")
    def _end_after_start(self) -> "ServiceLogInput":
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


def _error_message(field: str, err: dict[str, Any]) -> str:
    kind = err.get("type", "")
    if kind == "missing" or (kind != "value_error" and err.get("input") in (None, "")):
        return REQUIRED_MESSAGES.get(field, "This field is required")
    if kind == "value_error":
        msg = str(err.get("msg", ""))
        return msg[len(_VALUE_ERROR_PREFIX):] if msg.startswith(_VALUE_ERROR_PREFIX) else msg
    return INVALID_MESSAGES.get(field, str(err.get("msg", "Invalid value")))


def validate_service_log(values: dict[str, Any]) -> ValidationResult:
    """Validate candidate service log fields; never raises for bad input."""
    try:
        parsed = ServiceLogInput.model_validate(values)
    except ValidationError as ex:
        errors: dict[str, str] = {}
        for err in ex.errors():
            loc = err.get("loc") or ()
            # model-level errors (cross-field) belong to the end date
            field = str(loc[0]) if loc else "end_date"
            errors.setdefault(field, _error_message(field, err))
        return ValidationResult(errors=errors)

    return ValidationResult(value=parsed.model_dump(mode="python"))
