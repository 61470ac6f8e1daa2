"""
Session and dive aggregation.

This module turns the raw logbook into a StatisticsSummary:
- Global maxima per measurement kind
- Most recent sessions
- Per-discipline progress series (best value per session)
- Dive counts per discipline and per environment
- Favourite buddy and site, mood distribution

Everything here is pure: inputs are only read, every call builds a new
summary.
"""

from __future__ import annotations

import copy
import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .disciplines import (
    DISCIPLINES,
    ENVIRONMENT_LABELS,
    Discipline,
    resolve_session_discipline,
)
from .models import Dive, Metric, Mood, Session
from .summary import (
    DisciplineHighlight,
    DisciplineStats,
    DiveTypeComparison,
    Favorite,
    ProgressPoint,
    StatisticsSummary,
    TopMood,
)

logger = logging.getLogger("apnealog")

RECENT_SESSIONS_LIMIT = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def group_dives_by_session(dives: Iterable[Dive]) -> Dict[int, List[Dive]]:
    grouped: Dict[int, List[Dive]] = defaultdict(list)
    for dive in dives:
        grouped[dive.session_id].append(dive)
    return dict(grouped)


def max_value(dives: Iterable[Dive], metric: Metric) -> Optional[float]:
    """Largest value among dives measured in ``metric``, None if there are none."""
    values = [dive.value_for(metric) for dive in dives]
    present = [value for value in values if value is not None]
    return max(present) if present else None


def recent_sessions(
    sessions: Iterable[Session], limit: int = RECENT_SESSIONS_LIMIT
) -> List[Session]:
    # newest first, equal dates by ascending id
    ordered = sorted(sessions, key=lambda s: s.id)
    ordered.sort(key=lambda s: s.date, reverse=True)
    return [copy.deepcopy(s) for s in ordered[:limit]]


def _chronological(sessions: Iterable[Session]) -> List[Session]:
    return sorted(sessions, key=lambda s: (s.date, s.id))


def _pick_max(counts: Iterable[Tuple[str, int]]) -> Tuple[str, int]:
    # strict > keeps the first key that reached the maximum
    best_name, best_count = "", 0
    for name, count in counts:
        if count > best_count:
            best_name, best_count = name, count
    return best_name, best_count


def discipline_breakdown(
    sessions: Iterable[Session], dives_by_session: Dict[int, List[Dive]]
) -> Tuple[Dict[Discipline, List[ProgressPoint]], DisciplineStats, DiveTypeComparison]:
    progress: Dict[Discipline, List[ProgressPoint]] = {code: [] for code in DISCIPLINES}
    stats = DisciplineStats()
    comparison = DiveTypeComparison()

    for session in _chronological(sessions):
        discipline = resolve_session_discipline(session.type, session.discipline)
        if discipline is None:
            logger.debug(
                "Session %s skipped for discipline stats (type=%r, discipline=%r)",
                session.id,
                session.type,
                session.discipline,
            )
            continue

        info = DISCIPLINES[discipline]
        session_dives = dives_by_session.get(session.id, [])
        stats.add(discipline, len(session_dives))
        comparison.add(info.environment, len(session_dives))

        best = max_value(session_dives, info.metric)
        if best is not None:
            progress[discipline].append(
                ProgressPoint(
                    date=session.date,
                    value=best,
                    metric=info.metric,
                    discipline=discipline,
                )
            )

    return progress, stats, comparison


def most_recorded_discipline(stats: DisciplineStats) -> DisciplineHighlight:
    name, count = _pick_max(
        (code.value, value) for code, value in stats.all_counts().items()
    )
    if not name:
        return DisciplineHighlight()
    environment = DISCIPLINES[Discipline(name)].environment
    return DisciplineHighlight(
        name=name, count=count, type=ENVIRONMENT_LABELS[environment]
    )


def _count_names(values: Iterable[Optional[str]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for value in values:
        name = value.strip() if isinstance(value, str) else ""
        if name:
            counts[name] = counts.get(name, 0) + 1
    return counts


def favorite_buddy(sessions: Iterable[Session]) -> Favorite:
    name, count = _pick_max(_count_names(s.buddy_name for s in sessions).items())
    return Favorite(name=name, count=count)


def favorite_site(sessions: Iterable[Session]) -> Favorite:
    name, count = _pick_max(_count_names(s.location for s in sessions).items())
    return Favorite(name=name, count=count)


def mood_statistics(sessions: Iterable[Session]) -> Tuple[Dict[Mood, int], TopMood]:
    mood_stats = {mood: 0 for mood in Mood}
    total_with_mood = 0
    for session in sessions:
        try:
            mood = Mood(session.mood_log)
        except ValueError:
            continue
        mood_stats[mood] += 1
        total_with_mood += 1

    name, count = _pick_max((mood.value, value) for mood, value in mood_stats.items())
    if not name:
        return mood_stats, TopMood()
    percentage = round_half_up(count / total_with_mood * 100)
    return mood_stats, TopMood(mood=name, count=count, percentage=percentage)


def compute_summary(
    sessions: Sequence[Session],
    dives: Sequence[Dive],
    recent_limit: int = RECENT_SESSIONS_LIMIT,
) -> StatisticsSummary:
    """
    Build the dashboard statistics for a full logbook.

    Maxima look at every dive regardless of its session's discipline, so a
    depth logged under a pool session still counts towards max depth.
    Discipline-keyed figures only use sessions whose discipline is known and
    belongs to the session's type; anything else is skipped, never raised.
    """
    dives_by_session = group_dives_by_session(dives)
    progress, stats, comparison = discipline_breakdown(sessions, dives_by_session)
    mood_stats, top_mood = mood_statistics(sessions)

    summary = StatisticsSummary(
        total_dives=len(dives),
        max_depth=max_value(dives, Metric.DEPTH) or 0,
        max_distance=max_value(dives, Metric.DISTANCE) or 0,
        max_time=max_value(dives, Metric.TIME) or 0,
        recent_sessions=recent_sessions(sessions, recent_limit),
        progress_data=progress,
        dive_type_comparison=comparison,
        discipline_stats=stats,
        most_recorded_discipline=most_recorded_discipline(stats),
        favorite_dive_buddy=favorite_buddy(sessions),
        favorite_dive_site=favorite_site(sessions),
        mood_stats=mood_stats,
        top_mood=top_mood,
    )
    logger.debug(
        "Aggregated %s sessions and %s dives", len(sessions), len(dives)
    )
    return summary
