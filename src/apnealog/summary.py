"""Statistics summary returned by the aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from .disciplines import DISCIPLINES, Discipline, disciplines_for
from .models import Environment, Metric, Mood, Session
from .session_io import session_to_dict


def _empty_series() -> Dict[Discipline, List["ProgressPoint"]]:
    return {code: [] for code in DISCIPLINES}


def _empty_counts(environment: Environment) -> Dict[Discipline, int]:
    return {code: 0 for code in disciplines_for(environment)}


def _empty_moods() -> Dict[Mood, int]:
    return {mood: 0 for mood in Mood}


@dataclass(frozen=True)
class ProgressPoint:
    date: date
    value: float
    metric: Metric
    discipline: Discipline

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "value": self.value,
            "metric": self.metric.value,
            "discipline": self.discipline.value,
        }


@dataclass
class DiveTypeComparison:
    open_water: int = 0
    pool: int = 0

    def add(self, environment: Environment, count: int) -> None:
        if environment == Environment.OPEN_WATER:
            self.open_water += count
        else:
            self.pool += count

    def to_dict(self) -> Dict[str, int]:
        return {"openWater": self.open_water, "pool": self.pool}


@dataclass
class DisciplineStats:
    open_water: Dict[Discipline, int] = field(
        default_factory=lambda: _empty_counts(Environment.OPEN_WATER)
    )
    pool: Dict[Discipline, int] = field(
        default_factory=lambda: _empty_counts(Environment.POOL)
    )

    def add(self, discipline: Discipline, count: int) -> None:
        if DISCIPLINES[discipline].environment == Environment.OPEN_WATER:
            self.open_water[discipline] += count
        else:
            self.pool[discipline] += count

    def all_counts(self) -> Dict[Discipline, int]:
        return {**self.open_water, **self.pool}

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            "openWater": {code.value: count for code, count in self.open_water.items()},
            "pool": {code.value: count for code, count in self.pool.items()},
        }


@dataclass(frozen=True)
class DisciplineHighlight:
    name: str = ""
    count: int = 0
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count, "type": self.type}


@dataclass(frozen=True)
class Favorite:
    name: str = ""
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True)
class TopMood:
    mood: str = ""
    count: int = 0
    percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"mood": self.mood, "count": self.count, "percentage": self.percentage}


@dataclass
class StatisticsSummary:
    total_dives: int = 0
    max_depth: float = 0
    max_distance: float = 0
    max_time: float = 0
    recent_sessions: List[Session] = field(default_factory=list)
    progress_data: Dict[Discipline, List[ProgressPoint]] = field(
        default_factory=_empty_series
    )
    dive_type_comparison: DiveTypeComparison = field(default_factory=DiveTypeComparison)
    discipline_stats: DisciplineStats = field(default_factory=DisciplineStats)
    most_recorded_discipline: DisciplineHighlight = field(
        default_factory=DisciplineHighlight
    )
    favorite_dive_buddy: Favorite = field(default_factory=Favorite)
    favorite_dive_site: Favorite = field(default_factory=Favorite)
    mood_stats: Dict[Mood, int] = field(default_factory=_empty_moods)
    top_mood: TopMood = field(default_factory=TopMood)

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape consumed by the dashboard front end."""
        return {
            "totalDives": self.total_dives,
            "maxDepth": self.max_depth,
            "maxDistance": self.max_distance,
            "maxTime": self.max_time,
            "recentSessions": [session_to_dict(s) for s in self.recent_sessions],
            "progressData": {
                code.value: [point.to_dict() for point in points]
                for code, points in self.progress_data.items()
            },
            "diveTypeComparison": self.dive_type_comparison.to_dict(),
            "disciplineStats": self.discipline_stats.to_dict(),
            "mostRecordedDiscipline": self.most_recorded_discipline.to_dict(),
            "favoriteDiveBuddy": self.favorite_dive_buddy.to_dict(),
            "favoriteDiveSite": self.favorite_dive_site.to_dict(),
            "moodStats": {mood.value: count for mood, count in self.mood_stats.items()},
            "topMood": self.top_mood.to_dict(),
        }
