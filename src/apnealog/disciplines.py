"""Freediving discipline table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .models import Environment, Metric


class Discipline(str, Enum):
    CWT = "CWT"
    CWTB = "CWTB"
    CNF = "CNF"
    FIM = "FIM"
    DYN = "DYN"
    DYNB = "DYNB"
    DNF = "DNF"
    STA = "STA"


@dataclass(frozen=True)
class DisciplineInfo:
    environment: Environment
    metric: Metric
    title: str
    unit: str


DISCIPLINES: Dict[Discipline, DisciplineInfo] = {
    Discipline.CWT: DisciplineInfo(
        Environment.OPEN_WATER, Metric.DEPTH, "Constant Weight (CWT)", "m"
    ),
    Discipline.CWTB: DisciplineInfo(
        Environment.OPEN_WATER, Metric.DEPTH, "Constant Weight Bifins (CWTB)", "m"
    ),
    Discipline.CNF: DisciplineInfo(
        Environment.OPEN_WATER, Metric.DEPTH, "Constant No Fins (CNF)", "m"
    ),
    Discipline.FIM: DisciplineInfo(
        Environment.OPEN_WATER, Metric.DEPTH, "Free Immersion (FIM)", "m"
    ),
    Discipline.DYN: DisciplineInfo(
        Environment.POOL, Metric.DISTANCE, "Dynamic Apnea (DYN)", "m"
    ),
    Discipline.DYNB: DisciplineInfo(
        Environment.POOL, Metric.DISTANCE, "Dynamic Bifins (DYNB)", "m"
    ),
    Discipline.DNF: DisciplineInfo(
        Environment.POOL, Metric.DISTANCE, "Dynamic No Fins (DNF)", "m"
    ),
    Discipline.STA: DisciplineInfo(
        Environment.POOL, Metric.TIME, "Static Apnea (STA)", "s"
    ),
}

ENVIRONMENT_LABELS = {
    Environment.OPEN_WATER: "Open Water",
    Environment.POOL: "Pool",
}


def lookup_discipline(code: Optional[str]) -> Optional[Discipline]:
    """Return the Discipline for a code, or None for anything unknown."""
    if not code:
        return None
    try:
        return Discipline(code)
    except ValueError:
        return None


def lookup_environment(value: Optional[str]) -> Optional[Environment]:
    if not value:
        return None
    try:
        return Environment(value)
    except ValueError:
        return None


def disciplines_for(environment: Environment) -> list[Discipline]:
    return [code for code, info in DISCIPLINES.items() if info.environment == environment]


def resolve_session_discipline(
    session_type: Optional[str], discipline: Optional[str]
) -> Optional[Discipline]:
    """Discipline of a session, or None when unknown or not valid for its type."""
    code = lookup_discipline(discipline)
    if code is None:
        return None
    if lookup_environment(session_type) != DISCIPLINES[code].environment:
        return None
    return code
