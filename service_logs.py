# service_logs.py
"""Finalized service logs.

The store is an immutable snapshot; each operation returns a new one.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from models import ServiceLog


@dataclass(frozen=True)
class ServiceLogsState:
    logs: tuple[ServiceLog, ...] = ()

    def __len__(self) -> int:
        return len(self.logs)

    def to_dict(self) -> dict[str, Any]:
        return {"logs": [log.to_dict() for log in self.logs]}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ServiceLogsState":
        state = cls()
        for item in raw.get("logs") or []:
            state = add_service_log(state, ServiceLog.from_dict(item))
        return state


def get_service_log(state: ServiceLogsState, log_id: str) -> Optional[ServiceLog]:
    return next((log for log in state.logs if log.id == log_id), None)


def add_service_log(state: ServiceLogsState, log: ServiceLog) -> ServiceLogsState:
    # ids are unique; a second add with a known id is ignored
    if get_service_log(state, log.id) is not None:
        return state
    return ServiceLogsState(logs=state.logs + (log,))


def update_service_log(state: ServiceLogsState, log: ServiceLog) -> ServiceLogsState:
    existing = get_service_log(state, log.id)
    if existing is None:
        return state
    if log.created_at != existing.created_at:
        log = replace(log, created_at=existing.created_at)
    return ServiceLogsState(logs=tuple(log if x.id == log.id else x for x in state.logs))


def delete_service_log(state: ServiceLogsState, log_id: str) -> ServiceLogsState:
    kept = tuple(x for x in state.logs if x.id != log_id)
    if len(kept) == len(state.logs):
        return state
    return ServiceLogsState(logs=kept)
