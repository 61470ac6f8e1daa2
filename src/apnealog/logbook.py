"""Logging dive sessions into the record store."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .disciplines import (
    DISCIPLINES,
    Discipline,
    lookup_discipline,
    lookup_environment,
)
from .models import Dive, Measurement, Metric, Session
from .storage import RecordStore

logger = logging.getLogger("apnealog")


class LogbookError(ValueError):
    """Raised when session or dive input cannot be logged."""


def _required_discipline(session_type: Optional[str], discipline: Optional[str]) -> Discipline:
    if not session_type or not discipline:
        raise LogbookError("Select a session type and discipline first.")
    environment = lookup_environment(session_type)
    if environment is None:
        raise LogbookError(f"Unknown session type: {session_type}")
    code = lookup_discipline(discipline)
    if code is None:
        raise LogbookError(f"Unknown discipline: {discipline}")
    if DISCIPLINES[code].environment != environment:
        raise LogbookError(f"{code.value} is not a {environment.value} discipline.")
    return code


def build_measurement(
    session_type: Optional[str], discipline: Optional[str], raw_value: Any
) -> Measurement:
    """Turn a raw dive entry into the measurement its discipline calls for."""
    code = _required_discipline(session_type, discipline)
    metric = DISCIPLINES[code].metric
    if raw_value is None or raw_value == "":
        raise LogbookError(f"Enter the dive {metric.value} for {code.value}.")
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        raise LogbookError(f"Invalid {metric.value}: {raw_value!r}")
    if value < 0:
        raise LogbookError(f"{metric.value.capitalize()} must not be negative.")
    if value.is_integer():
        value = int(value)
    return Measurement(metric, value)


def _dive_payload(session_id: int, measurement: Measurement, timestamp: str) -> Dict[str, Any]:
    return {
        "sessionId": session_id,
        "depth": measurement.value if measurement.metric == Metric.DEPTH else None,
        "distance": measurement.value if measurement.metric == Metric.DISTANCE else None,
        "time": measurement.value if measurement.metric == Metric.TIME else None,
        "timestamp": timestamp,
    }


def log_session(
    store: RecordStore,
    session_data: Dict[str, Any],
    dive_values: Iterable[Any],
) -> Tuple[Session, List[Dive]]:
    """
    Validate and store a session together with its dives.

    Every dive value is checked before anything is written, so a bad entry
    leaves the store untouched.
    """
    session_type = session_data.get("type")
    discipline = session_data.get("discipline")
    _required_discipline(session_type, discipline)
    measurements = [
        build_measurement(session_type, discipline, value) for value in dive_values
    ]
    if not measurements:
        raise LogbookError("Add at least one dive to the session.")

    session = store.create_session({"date": date.today().isoformat(), **session_data})
    dives = []
    for measurement in measurements:
        timestamp = datetime.now(timezone.utc).isoformat()
        dives.append(store.create_dive(_dive_payload(session.id, measurement, timestamp)))
    logger.info(
        "Logged session %s with %s dive(s) (%s)", session.id, len(dives), discipline
    )
    return session, dives


def delete_session_with_dives(store: RecordStore, session_id: int) -> int:
    """Delete a session and its dives, dives first. Returns the dive count."""
    store.get_session(session_id)
    dives = store.get_dives_by_session_id(session_id)
    for dive in dives:
        store.delete_dive(dive.id)
    store.delete_session(session_id)
    return len(dives)
