from datetime import date

from apnealog.aggregator import compute_summary
from apnealog.history import session_rows
from apnealog.models import Dive, Measurement, Session, User, Viewer
from apnealog.renderer import (
    format_measurement,
    format_time,
    render_dashboard,
    render_session_detail,
    render_session_rows,
    render_user_rows,
)


def _logbook():
    sessions = [
        Session(
            id=1,
            date=date(2024, 1, 1),
            type="open_water",
            discipline="CWT",
            location="Blue Hole",
            buddy_name="Maya",
            mood_log="pleasant",
        ),
        Session(id=2, date=date(2024, 1, 8), type="pool", discipline="STA"),
    ]
    dives = [
        Dive(id=1, session_id=1, measurement=Measurement.depth(42)),
        Dive(id=2, session_id=2, measurement=Measurement.time(125)),
    ]
    return sessions, dives


def test_format_helpers():
    assert format_time(195) == "3:15"
    assert format_time(60) == "1:00"
    assert format_time(0) == "0:00"
    assert format_measurement(Measurement.depth(42)) == "-42m"
    assert format_measurement(Measurement.depth(42), depth_below_surface=False) == "42m"
    assert format_measurement(Measurement.distance(75.5)) == "75.5m"
    assert format_measurement(None) == "-"


def test_render_dashboard_includes_tiles_and_highlights():
    sessions, dives = _logbook()
    note = render_dashboard(compute_summary(sessions, dives), Viewer(name="Matt"))

    assert "# Dive Dashboard" in note
    assert "Welcome back, Matt." in note
    assert "- Total dives: 2" in note
    assert "- Max depth: -42m" in note
    assert "- Max STA time: 2:05" in note
    assert "- Open water: 1 dives (50.0%)" in note
    assert "- Favorite dive buddy: Maya (1 sessions)" in note
    assert "- Top mood: Pleasant (100%)" in note
    assert "### Constant Weight (CWT)" in note
    assert "- 2024-01-01: -42m" in note
    assert "- 2024-01-08 Static Apnea (STA)" in note


def test_render_dashboard_empty():
    note = render_dashboard(compute_summary([], []))

    assert "No dives recorded yet." in note
    assert "No mood data recorded yet." in note
    assert "No dive sessions recorded yet." in note
    assert "## Progress" not in note


def test_render_session_views():
    sessions, dives = _logbook()

    table = render_session_rows(session_rows(sessions, dives))
    assert "| 2 | 2024-01-08 | Pool | STA |  | 1 | 2:05 |" in table

    detail = render_session_detail(sessions[0], dives[:1])
    assert "# Session 1: Monday, January 01, 2024" in detail
    assert "- Best: -42m" in detail
    assert "1. -42m" in detail
    assert render_session_rows([]) == "No dive sessions found."


def test_session_detail_names_instructor_and_user_table():
    sessions, dives = _logbook()
    coach = User(
        id=2,
        email="coach@example.com",
        first_name="Tomas",
        last_name="Reyes",
        role="instructor",
    )

    detail = render_session_detail(sessions[0], dives[:1], instructor=coach)
    assert "- Instructor: Tomas Reyes (instructor)" in detail
    assert "Instructor" not in render_session_detail(sessions[0], dives[:1])

    nameless = User(id=3, email="anon@example.com", is_active=False)
    table = render_user_rows([coach, nameless])
    assert "| 3 | anon@example.com | anon@example.com | student | no | 0 |" in table
    assert render_user_rows([]) == "No users found."
