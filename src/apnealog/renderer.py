"""Markdown dashboard rendering."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .disciplines import DISCIPLINES, lookup_discipline
from .history import SessionRow, best_measurement
from .models import Dive, Measurement, Metric, Mood, Session, User, Viewer
from .summary import StatisticsSummary

MOOD_LABELS = {
    Mood.VERY_PLEASANT: "Very Pleasant",
    Mood.PLEASANT: "Pleasant",
    Mood.SLIGHTLY_PLEASANT: "Slightly Pleasant",
    Mood.NEUTRAL: "Neutral",
    Mood.SLIGHTLY_UNPLEASANT: "Slightly Unpleasant",
    Mood.UNPLEASANT: "Unpleasant",
    Mood.VERY_UNPLEASANT: "Very Unpleasant",
}

TYPE_LABELS = {
    "open_water": "Open Water",
    "pool": "Pool",
}


def _clean_text(value: str) -> str:
    return " ".join(value.split())


def _number(value: float) -> str:
    return f"{value:g}"


def _percent(count: int, total: int) -> str:
    return f"{count / total * 100:.1f}%" if total else "0.0%"


def format_time(seconds: float) -> str:
    total = int(seconds)
    mins, secs = divmod(total, 60)
    return f"{mins}:{secs:02d}"


def format_depth(value: float, below_surface: bool = True) -> str:
    if below_surface and value:
        return f"-{_number(value)}m"
    return f"{_number(value)}m"


def format_measurement(
    measurement: Optional[Measurement], depth_below_surface: bool = True
) -> str:
    if measurement is None:
        return "-"
    if measurement.metric == Metric.DEPTH:
        return format_depth(measurement.value, depth_below_surface)
    if measurement.metric == Metric.TIME:
        return format_time(measurement.value)
    return f"{_number(measurement.value)}m"


def mood_label(mood: Optional[str]) -> str:
    try:
        return MOOD_LABELS[Mood(mood)]
    except ValueError:
        return "No Data"


def discipline_title(code: str) -> str:
    discipline = lookup_discipline(code)
    return DISCIPLINES[discipline].title if discipline else code


def _session_line(session: Session) -> str:
    line = f"- {session.date.isoformat()} {discipline_title(session.discipline)}"
    if session.location:
        line = f"{line} @ {_clean_text(session.location)}"
    if session.buddy_name:
        line = f"{line} with {_clean_text(session.buddy_name)}"
    return line


def render_dashboard(
    summary: StatisticsSummary,
    viewer: Optional[Viewer] = None,
    depth_below_surface: bool = True,
) -> str:
    lines: List[str] = []
    lines.append("# Dive Dashboard")
    lines.append("")
    if viewer:
        lines.append(f"Welcome back, {_clean_text(viewer.name)}.")
        lines.append("")

    lines.append("## Overview")
    lines.append("")
    lines.append(f"- Total dives: {summary.total_dives}")
    lines.append(f"- Max depth: {format_depth(summary.max_depth, depth_below_surface)}")
    lines.append(f"- Max distance: {_number(summary.max_distance)}m")
    lines.append(f"- Max STA time: {format_time(summary.max_time)}")
    lines.append("")

    comparison = summary.dive_type_comparison
    total = comparison.open_water + comparison.pool
    lines.append("## Dive Type Distribution")
    lines.append("")
    if total:
        lines.append(
            f"- Open water: {comparison.open_water} dives "
            f"({_percent(comparison.open_water, total)})"
        )
        lines.append(f"- Pool: {comparison.pool} dives ({_percent(comparison.pool, total)})")
    else:
        lines.append("No dives recorded yet.")
    lines.append("")

    lines.append("## Dives per Discipline")
    lines.append("")
    lines.append("| Discipline | Environment | Dives |")
    lines.append("| --- | --- | --- |")
    for code, count in summary.discipline_stats.open_water.items():
        lines.append(f"| {code.value} | Open Water | {count} |")
    for code, count in summary.discipline_stats.pool.items():
        lines.append(f"| {code.value} | Pool | {count} |")
    lines.append("")

    lines.append("## Highlights")
    lines.append("")
    most = summary.most_recorded_discipline
    if most.name:
        lines.append(
            f"- Most recorded discipline: {most.name} ({most.type}, {most.count} dives)"
        )
    buddy = summary.favorite_dive_buddy
    if buddy.name:
        lines.append(f"- Favorite dive buddy: {buddy.name} ({buddy.count} sessions)")
    site = summary.favorite_dive_site
    if site.name:
        lines.append(f"- Favorite dive site: {site.name} ({site.count} sessions)")
    top = summary.top_mood
    if top.mood:
        lines.append(f"- Top mood: {mood_label(top.mood)} ({top.percentage}%)")
    if not (most.name or buddy.name or site.name or top.mood):
        lines.append("Nothing to highlight yet.")
    lines.append("")

    lines.append("## Dive Moods")
    lines.append("")
    mood_total = sum(summary.mood_stats.values())
    if mood_total:
        for mood, count in summary.mood_stats.items():
            if count:
                lines.append(
                    f"- {MOOD_LABELS[mood]}: {count} sessions ({_percent(count, mood_total)})"
                )
    else:
        lines.append("No mood data recorded yet.")
    lines.append("")

    series = [(code, points) for code, points in summary.progress_data.items() if points]
    if series:
        lines.append("## Progress")
        lines.append("")
        for code, points in series:
            lines.append(f"### {DISCIPLINES[code].title}")
            lines.append("")
            for point in points:
                value = format_measurement(
                    Measurement(point.metric, point.value), depth_below_surface
                )
                lines.append(f"- {point.date.isoformat()}: {value}")
            lines.append("")

    lines.append("## Recent Sessions")
    lines.append("")
    if summary.recent_sessions:
        for session in summary.recent_sessions:
            lines.append(_session_line(session))
    else:
        lines.append("No dive sessions recorded yet.")
    lines.append("")
    return "\n".join(lines)


def render_session_rows(rows: Sequence[SessionRow], depth_below_surface: bool = True) -> str:
    if not rows:
        return "No dive sessions found."
    lines = [
        "| Id | Date | Type | Discipline | Location | Dives | Best |",
        "| --- | --- | --- | --- | --- | --- | --- |",
    ]
    for row in rows:
        session = row.session
        lines.append(
            f"| {session.id} | {session.date.isoformat()} "
            f"| {TYPE_LABELS.get(session.type, session.type)} | {session.discipline} "
            f"| {_clean_text(session.location or '')} | {row.dive_count} "
            f"| {format_measurement(row.best, depth_below_surface)} |"
        )
    return "\n".join(lines)


def render_user_rows(users: Sequence[User]) -> str:
    if not users:
        return "No users found."
    lines = [
        "| Id | Name | Email | Role | Active | Certifications |",
        "| --- | --- | --- | --- | --- | --- |",
    ]
    for user in users:
        lines.append(
            f"| {user.id} | {_clean_text(user.full_name)} | {user.email} | {user.role} "
            f"| {'yes' if user.is_active else 'no'} | {len(user.certifications)} |"
        )
    return "\n".join(lines)


def render_session_detail(
    session: Session,
    dives: Sequence[Dive],
    depth_below_surface: bool = True,
    instructor: Optional[User] = None,
) -> str:
    lines: List[str] = []
    lines.append(f"# Session {session.id}: {session.date.strftime('%A, %B %d, %Y')}")
    lines.append("")
    lines.append(f"- Type: {TYPE_LABELS.get(session.type, session.type)}")
    lines.append(f"- Discipline: {discipline_title(session.discipline)}")
    if session.location:
        lines.append(f"- Location: {_clean_text(session.location)}")
    if session.buddy_name:
        lines.append(f"- Buddy: {_clean_text(session.buddy_name)}")
    if instructor is not None:
        lines.append(f"- Instructor: {_clean_text(instructor.full_name)} ({instructor.role})")
    if session.mood_log:
        lines.append(f"- Mood: {mood_label(session.mood_log)}")
    if session.weather:
        lines.append(f"- Weather: {_clean_text(session.weather)}")
    if session.water_visibility is not None:
        lines.append(f"- Visibility: {_number(session.water_visibility)}m")
    best = best_measurement(session, dives)
    lines.append(f"- Best: {format_measurement(best, depth_below_surface)}")
    lines.append("")
    lines.append(f"## Dives ({len(dives)})")
    lines.append("")
    for index, dive in enumerate(dives, start=1):
        lines.append(
            f"{index}. {format_measurement(dive.measurement, depth_below_surface)}"
        )
    if session.safety_notes:
        lines.append("")
        lines.append("## Safety Notes")
        lines.append("")
        lines.append(session.safety_notes.strip())
    lines.append("")
    return "\n".join(lines)
