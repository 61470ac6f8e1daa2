"""Session history listing and filtering."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .aggregator import group_dives_by_session, max_value
from .disciplines import DISCIPLINES, lookup_discipline
from .models import Dive, Measurement, Session


@dataclass
class SessionFilter:
    type: Optional[str] = None
    discipline: Optional[str] = None
    location: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def matches(self, session: Session) -> bool:
        if self.type and session.type != self.type:
            return False
        if self.discipline and session.discipline != self.discipline:
            return False
        if self.location:
            if self.location.lower() not in (session.location or "").lower():
                return False
        if self.date_from and session.date < self.date_from:
            return False
        if self.date_to and session.date > self.date_to:
            return False
        return True


@dataclass
class SessionRow:
    session: Session
    dive_count: int
    best: Optional[Measurement] = None


def best_measurement(session: Session, dives: Sequence[Dive]) -> Optional[Measurement]:
    """Best dive of a session in the metric its discipline is scored on."""
    code = lookup_discipline(session.discipline)
    if code is None or not dives:
        return None
    metric = DISCIPLINES[code].metric
    value = max_value(dives, metric)
    if value is None:
        return None
    return Measurement(metric, value)


def session_rows(
    sessions: Iterable[Session],
    dives: Iterable[Dive],
    session_filter: Optional[SessionFilter] = None,
) -> List[SessionRow]:
    dives_by_session = group_dives_by_session(dives)
    rows = []
    for session in sessions:
        if session_filter and not session_filter.matches(session):
            continue
        session_dives = dives_by_session.get(session.id, [])
        rows.append(
            SessionRow(
                session=session,
                dive_count=len(session_dives),
                best=best_measurement(session, session_dives),
            )
        )
    rows.sort(key=lambda row: row.session.id)
    rows.sort(key=lambda row: row.session.date, reverse=True)
    return rows


def location_options(sessions: Iterable[Session]) -> List[str]:
    locations = {
        session.location.strip()
        for session in sessions
        if session.location and session.location.strip()
    }
    return sorted(locations)
