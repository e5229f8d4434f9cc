"""
Central data model definitions used across the project.

Both source adapters (transcript and portal) return these records, so:
- all modules share the same field names
- the two back-ends end up in exactly the same normalized shape
- every record is immutable once an extraction call has produced it
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union


class Quarter(str, Enum):
    ANNUAL = "A"
    FIRST = "1C"
    SECOND = "2C"


class Branch(str, Enum):
    CAMPUS = "CAMPUS"
    MEDRANO = "MEDRANO"
    AULA_VIRTUAL = "AULA_VIRTUAL"
    PINERO = "PIÑERO"


class Day(str, Enum):
    # There is no Sunday: classes are never scheduled on Sundays.
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"


class Turn(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"


class HistoryType(str, Enum):
    SIGNED = "SIGNED"
    PASSED = "PASSED"


class SurveyKind(str, Enum):
    DOCENTE = "DOCENTE"
    AUXILIAR = "AUXILIAR"


class AnswerType(str, Enum):
    TEXT = "TEXT"
    PERCENTAGE = "PERCENTAGE"


@dataclass(frozen=True)
class ScheduleSlot:
    """
    One weekly class meeting: a day, a turn and an inclusive slot range.
    """

    day: Day
    turn: Turn
    start_slot: int
    end_slot: int


@dataclass(frozen=True)
class ClassSchedule:
    """
    Represents one class the student is enrolled in.

    ``schedules`` is None only when the source explicitly says the schedule
    is unknown (e.g. "Sin definir" or a Sunday placeholder).
    """

    year: int
    quarter: Quarter
    course_code: str
    course_name: str
    class_code: str
    branch: Optional[Branch]
    schedules: Optional[Tuple[ScheduleSlot, ...]]


@dataclass(frozen=True)
class AcademicHistoryEntry:
    """
    One approved line of the student's academic history.
    """

    course_code: str
    type: HistoryType
    date: date


@dataclass(frozen=True)
class PassedCourses:
    signed: FrozenSet[str]
    passed: FrozenSet[str]


@dataclass(frozen=True)
class SurveyMetadata:
    """
    One professor row of a survey group (class + course + professor).
    """

    survey_kind: SurveyKind
    year: int
    quarter: Quarter
    class_code: str
    course_code: str
    professor_name: str
    professor_role: str


@dataclass(frozen=True)
class SurveyAnswer:
    question: str
    type: AnswerType
    value: Union[str, int, None]


@dataclass(frozen=True)
class TakenSurvey:
    metadata: SurveyMetadata
    answers: Tuple[SurveyAnswer, ...]


@dataclass(frozen=True)
class Professor:
    name: str
    kind: SurveyKind
    role: str


@dataclass(frozen=True)
class ProfessorClass:
    year: int
    quarter: Quarter
    class_code: str
    course_code: str
    professors: Tuple[Professor, ...]


@dataclass(frozen=True)
class StudentPlan:
    plan_id: str
    plan_code: str
