"""Data models for apnealog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class Environment(str, Enum):
    OPEN_WATER = "open_water"
    POOL = "pool"


class Metric(str, Enum):
    DEPTH = "depth"
    DISTANCE = "distance"
    TIME = "time"


class Mood(str, Enum):
    VERY_PLEASANT = "very_pleasant"
    PLEASANT = "pleasant"
    SLIGHTLY_PLEASANT = "slightly_pleasant"
    NEUTRAL = "neutral"
    SLIGHTLY_UNPLEASANT = "slightly_unpleasant"
    UNPLEASANT = "unpleasant"
    VERY_UNPLEASANT = "very_unpleasant"


@dataclass(frozen=True)
class Measurement:
    """A single dive result: depth or distance in metres, time in seconds."""

    metric: Metric
    value: float

    @classmethod
    def depth(cls, value: float) -> "Measurement":
        return cls(Metric.DEPTH, value)

    @classmethod
    def distance(cls, value: float) -> "Measurement":
        return cls(Metric.DISTANCE, value)

    @classmethod
    def time(cls, value: float) -> "Measurement":
        return cls(Metric.TIME, value)


@dataclass
class Session:
    id: int
    date: date
    type: str
    discipline: str
    location: Optional[str] = None
    buddy_name: Optional[str] = None
    mood_log: Optional[str] = None
    instructor_id: Optional[int] = None
    user_id: Optional[int] = None
    safety_notes: Optional[str] = None
    dive_duration: Optional[float] = None
    weather: Optional[str] = None
    wave_condition: Optional[str] = None
    current_strength: Optional[str] = None
    water_visibility: Optional[float] = None
    photos: List[str] = field(default_factory=list)


@dataclass
class Dive:
    id: int
    session_id: int
    measurement: Optional[Measurement] = None
    timestamp: Optional[str] = None

    def value_for(self, metric: Metric) -> Optional[float]:
        if self.measurement is not None and self.measurement.metric == metric:
            return self.measurement.value
        return None


@dataclass
class Viewer:
    """Whoever is looking at a rendered view; passed in explicitly."""

    name: str
    role: str = "student"


class Role(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


@dataclass
class User:
    """A logbook account. ``password`` is only ever read from and written to
    the users file; the store hands out copies without it."""

    id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = Role.STUDENT.value
    is_active: bool = True
    profile_complete: bool = False
    bio: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact: Dict[str, Any] = field(default_factory=dict)
    certifications: List[Dict[str, Any]] = field(default_factory=list)
    profile_image: Optional[str] = None
    created_at: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def is_profile_complete(self) -> bool:
        contact = self.emergency_contact or {}
        return bool(
            self.first_name
            and self.last_name
            and self.bio
            and self.location
            and contact.get("name")
            and contact.get("phone")
        )
