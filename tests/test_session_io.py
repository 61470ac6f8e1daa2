import json
import logging
import os
import tempfile
from datetime import date, datetime

import pytest

from apnealog.models import Measurement, Metric
from apnealog.session_io import (
    dive_from_dict,
    dive_to_dict,
    load_dives,
    load_sessions,
    measurement_from_fields,
    load_users,
    save_sessions,
    session_from_dict,
    user_from_dict,
    user_to_dict,
)


def _write(tmp, name, payload):
    path = os.path.join(tmp, name)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle)
    return path


def test_measurement_has_one_variant():
    assert measurement_from_fields(depth=42) == Measurement(Metric.DEPTH, 42)
    assert measurement_from_fields(distance="75") == Measurement(Metric.DISTANCE, 75.0)
    assert measurement_from_fields(time=120) == Measurement.time(120)
    assert measurement_from_fields() is None
    with pytest.raises(ValueError):
        measurement_from_fields(depth=10, time=60)


def test_dive_wire_shape_uses_three_nullable_fields():
    dive = dive_from_dict({"Id": 3, "sessionId": "2", "time": 95, "timestamp": "t"})

    assert dive.id == 3
    assert dive.session_id == 2
    assert dive_to_dict(dive) == {
        "id": 3,
        "sessionId": 2,
        "depth": None,
        "distance": None,
        "time": 95,
        "timestamp": "t",
    }


def test_session_roundtrip_through_file():
    session = session_from_dict(
        {
            "id": 1,
            "date": "2024-05-04",
            "type": "open_water",
            "discipline": "FIM",
            "buddyName": "Maya",
            "moodLog": "pleasant",
            "waterVisibility": "12",
        }
    )
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "sessions.json")
        save_sessions(path, [session])
        loaded = load_sessions(path)

    assert loaded == [session]
    assert loaded[0].water_visibility == 12.0
    assert loaded[0].buddy_name == "Maya"


def test_load_skips_invalid_records(caplog):
    records = [
        {"Id": 1, "date": "2024-01-01", "type": "pool", "discipline": "STA"},
        {"id": 2, "date": "not-a-date", "type": "pool", "discipline": "STA"},
        {"id": 3, "type": "pool"},
        "garbage",
        {"id": 5, "date": "2024-01-05T08:00:00Z", "type": "pool", "discipline": "DYN"},
    ]
    with tempfile.TemporaryDirectory() as tmp:
        path = _write(tmp, "sessions.json", {"records": records})
        with caplog.at_level(logging.WARNING, logger="apnealog"):
            sessions = load_sessions(path)

    assert [s.id for s in sessions] == [1, 5]
    assert sessions[1].date.isoformat() == "2024-01-05"
    assert len([r for r in caplog.records if "Skipped invalid" in r.getMessage()]) == 3


def test_load_dives_rejects_two_measurements():
    records = [
        {"id": 1, "sessionId": 1, "depth": 10, "distance": None, "time": None},
        {"id": 2, "sessionId": 1, "depth": 10, "distance": None, "time": 30},
        {"id": 3, "depth": 5},
    ]
    with tempfile.TemporaryDirectory() as tmp:
        path = _write(tmp, "dives.json", records)
        dives = load_dives(path)

    assert [d.id for d in dives] == [1]


def test_bad_files_raise():
    with tempfile.TemporaryDirectory() as tmp:
        broken = os.path.join(tmp, "broken.json")
        with open(broken, "w", encoding="utf-8") as handle:
            handle.write("{not json")
        with pytest.raises(ValueError):
            load_sessions(broken)
        with pytest.raises(ValueError):
            load_dives(_write(tmp, "obj.json", {"dives": []}))
        with pytest.raises(FileNotFoundError):
            load_dives(os.path.join(tmp, "missing.json"))


def test_load_skips_duplicate_ids(caplog):
    records = [
        {"id": 1, "date": "2024-01-01", "type": "open_water", "discipline": "CWT"},
        {"id": 1, "date": "2024-01-02", "type": "open_water", "discipline": "FIM"},
        {"id": 2, "date": "2024-01-03", "type": "pool", "discipline": "STA"},
    ]
    with tempfile.TemporaryDirectory() as tmp:
        path = _write(tmp, "sessions.json", records)
        with caplog.at_level(logging.WARNING, logger="apnealog"):
            sessions = load_sessions(path)

    assert [(s.id, s.discipline) for s in sessions] == [(1, "CWT"), (2, "STA")]
    assert any("Duplicate id 1" in r.getMessage() for r in caplog.records)


def test_datetime_session_date_becomes_calendar_date():
    session = session_from_dict(
        {"id": 1, "date": datetime(2024, 1, 2, 9, 30), "type": "pool", "discipline": "DYN"}
    )

    assert session.date == date(2024, 1, 2)
    assert not isinstance(session.date, datetime)


def test_user_wire_shape_hides_password():
    user = user_from_dict(
        {
            "Id": 4,
            "email": "coach@example.com",
            "firstName": "Tomas",
            "role": "instructor",
            "password": "s3cret",
            "certifications": [{"Id": 7, "organization": "AIDA"}],
        }
    )

    assert user.password == "s3cret"
    assert user.certifications == [{"id": 7, "organization": "AIDA"}]
    assert "password" not in user_to_dict(user)
    assert user_to_dict(user, include_password=True)["password"] == "s3cret"
    assert "s3cret" not in repr(user)
    with pytest.raises(ValueError):
        user_from_dict({"id": 5, "email": "x@example.com", "role": "captain"})


def test_load_users_skips_records_without_email():
    records = [{"id": 1, "email": "a@example.com"}, {"id": 2, "firstName": "NoMail"}]
    with tempfile.TemporaryDirectory() as tmp:
        users = load_users(_write(tmp, "users.json", records))

    assert [u.id for u in users] == [1]
    assert users[0].role == "student"
    assert users[0].is_active is True
