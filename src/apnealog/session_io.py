"""Session, dive and user persistence.

Fixture files hold the wire shape used by the web front end: camelCase keys
and three nullable measurement fields (``depth``, ``distance``, ``time``) on
each dive. Everything past this module works with the model classes.

User passwords are written back to the users file but left out of
``user_to_dict`` unless asked for.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .models import Dive, Measurement, Metric, Role, Session, User

logger = logging.getLogger("apnealog")

SESSION_REQUIRED_FIELDS = {"date", "type", "discipline"}
DIVE_REQUIRED_FIELDS = {"sessionId"}

# wire key -> Session attribute, for the carried-through fields
_SESSION_FIELDS = {
    "location": "location",
    "buddyName": "buddy_name",
    "moodLog": "mood_log",
    "instructorId": "instructor_id",
    "userId": "user_id",
    "safetyNotes": "safety_notes",
    "diveDuration": "dive_duration",
    "weather": "weather",
    "waveCondition": "wave_condition",
    "currentStrength": "current_strength",
    "waterVisibility": "water_visibility",
}


def _record_id(entry: Dict[str, Any]) -> int:
    raw = entry.get("id", entry.get("Id"))
    if raw is None:
        raise ValueError("Missing required field: id")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid id {raw!r}")
    if value <= 0:
        raise ValueError(f"Id must be positive, got {value}")
    return value


def _parse_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        # tolerate full ISO timestamps, only the calendar day matters
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        raise ValueError(f"Invalid date {raw!r}, expected YYYY-MM-DD")


def _optional_number(raw: Any, name: str) -> Optional[float]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValueError(f"Invalid {name} {raw!r}")
    if isinstance(raw, (int, float)):
        return raw
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {name} {raw!r}")


def session_from_dict(entry: Dict[str, Any]) -> Session:
    missing = SESSION_REQUIRED_FIELDS - set(entry.keys())
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(sorted(missing))}")
    kwargs = {attr: entry.get(key) for key, attr in _SESSION_FIELDS.items()}
    kwargs["dive_duration"] = _optional_number(entry.get("diveDuration"), "diveDuration")
    kwargs["water_visibility"] = _optional_number(
        entry.get("waterVisibility"), "waterVisibility"
    )
    return Session(
        id=_record_id(entry),
        date=_parse_date(entry["date"]),
        type=str(entry["type"]),
        discipline=str(entry["discipline"]),
        photos=list(entry.get("photos") or []),
        **kwargs,
    )


def session_to_dict(session: Session) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": session.id,
        "date": session.date.isoformat(),
        "type": session.type,
        "discipline": session.discipline,
    }
    for key, attr in _SESSION_FIELDS.items():
        payload[key] = getattr(session, attr)
    payload["photos"] = list(session.photos)
    return payload


def measurement_from_fields(
    depth: Any = None, distance: Any = None, time: Any = None
) -> Optional[Measurement]:
    values = {
        Metric.DEPTH: _optional_number(depth, "depth"),
        Metric.DISTANCE: _optional_number(distance, "distance"),
        Metric.TIME: _optional_number(time, "time"),
    }
    present = [(metric, value) for metric, value in values.items() if value is not None]
    if len(present) > 1:
        names = ", ".join(metric.value for metric, _ in present)
        raise ValueError(f"Only one of depth, distance, time may be set, got {names}")
    if not present:
        return None
    metric, value = present[0]
    return Measurement(metric, value)


def dive_from_dict(entry: Dict[str, Any]) -> Dive:
    missing = DIVE_REQUIRED_FIELDS - set(entry.keys())
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(sorted(missing))}")
    try:
        session_id = int(entry["sessionId"])
    except (TypeError, ValueError):
        raise ValueError(f"Invalid sessionId {entry['sessionId']!r}")
    return Dive(
        id=_record_id(entry),
        session_id=session_id,
        measurement=measurement_from_fields(
            entry.get("depth"), entry.get("distance"), entry.get("time")
        ),
        timestamp=entry.get("timestamp"),
    )


def dive_to_dict(dive: Dive) -> Dict[str, Any]:
    return {
        "id": dive.id,
        "sessionId": dive.session_id,
        "depth": dive.value_for(Metric.DEPTH),
        "distance": dive.value_for(Metric.DISTANCE),
        "time": dive.value_for(Metric.TIME),
        "timestamp": dive.timestamp,
    }


_USER_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "bio": "bio",
    "location": "location",
    "phone": "phone",
    "profileImage": "profile_image",
    "createdAt": "created_at",
    "password": "password",
}


def _certification_from_dict(entry: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"Invalid certification {entry!r}")
    cert = {key: value for key, value in entry.items() if key != "Id"}
    cert["id"] = _record_id(entry)
    return cert


def user_from_dict(entry: Dict[str, Any]) -> User:
    if not entry.get("email"):
        raise ValueError("Missing required fields: email")
    role = entry.get("role") or Role.STUDENT.value
    if role not in {r.value for r in Role}:
        raise ValueError(f"Unknown role {role!r}")
    kwargs = {attr: entry.get(key) for key, attr in _USER_FIELDS.items()}
    kwargs["first_name"] = kwargs["first_name"] or ""
    kwargs["last_name"] = kwargs["last_name"] or ""
    return User(
        id=_record_id(entry),
        email=str(entry["email"]),
        role=role,
        is_active=bool(entry.get("isActive", True)),
        profile_complete=bool(entry.get("profileComplete", False)),
        emergency_contact=dict(entry.get("emergencyContact") or {}),
        certifications=[
            _certification_from_dict(cert) for cert in entry.get("certifications") or []
        ],
        **kwargs,
    )


def user_to_dict(user: User, include_password: bool = False) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "isActive": user.is_active,
        "profileComplete": user.profile_complete,
        "emergencyContact": dict(user.emergency_contact),
        "certifications": [dict(cert) for cert in user.certifications],
    }
    for key, attr in _USER_FIELDS.items():
        payload[key] = getattr(user, attr)
    if not include_password:
        del payload["password"]
    return payload


def _read_records(path: str, label: str) -> List[Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        raise FileNotFoundError(f"{label} file not found: {path}")
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {label} file: {exc}")

    if isinstance(data, dict):
        if "records" not in data:
            raise ValueError(f"{label} JSON object must contain a 'records' key")
        data = data["records"]
    if not isinstance(data, list):
        raise ValueError(f"{label} records must be a list, got {type(data).__name__}")
    return data


def _load(path: str, label: str, parse) -> list:
    records = []
    skipped = []
    seen = set()
    for idx, entry in enumerate(_read_records(path, label)):
        try:
            if not isinstance(entry, dict):
                raise ValueError(f"Expected an object, got {type(entry).__name__}")
            record = parse(entry)
            # first record with an id wins
            if record.id in seen:
                raise ValueError(f"Duplicate id {record.id}")
            seen.add(record.id)
            records.append(record)
        except (KeyError, ValueError, TypeError) as exc:
            skipped.append((idx, str(exc)))

    for idx, error in skipped:
        logger.warning("Skipped invalid %s record %s: %s", label, idx, error)
    return records


def load_sessions(path: str) -> List[Session]:
    return _load(path, "session", session_from_dict)


def load_dives(path: str) -> List[Dive]:
    return _load(path, "dive", dive_from_dict)


def save_sessions(path: str, sessions: List[Session]) -> None:
    payload = [session_to_dict(session) for session in sessions]
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def save_dives(path: str, dives: List[Dive]) -> None:
    payload = [dive_to_dict(dive) for dive in dives]
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def load_users(path: str) -> List[User]:
    return _load(path, "user", user_from_dict)


def save_users(path: str, users: List[User]) -> None:
    payload = [user_to_dict(user, include_password=True) for user in users]
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
