"""
Field grammars.

Every field the adapters read is validated by one small named function
here, so each accepted shape can be unit-tested on its own without building
a whole document around it.

All parsers raise MalformedContentError when the value does not match.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Dict, List, NamedTuple, Optional, Tuple

from academicsync.errors import MalformedContentError
from academicsync.model import Branch, HistoryType, Quarter, SurveyKind


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

COURSE_CODE_RE = re.compile(r"^\d{6}$")
DATE_RE = re.compile(r"\d{2}/\d{2}/\d{4}")


def parse_course_code(value: str) -> str:
    """
    Course codes are always six digits, e.g. 950701.
    """
    if not COURSE_CODE_RE.match(value):
        raise MalformedContentError(f"courseCode couldn't be parsed: {value!r}", actual=value)
    return value


def parse_date(value: str) -> date:
    """
    Parse a dd/mm/yyyy date.
    """
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        raise MalformedContentError(f"Date couldn't be parsed: {value!r}", actual=value) from None


def parse_branch(value: str) -> Optional[Branch]:
    """
    Map an upper-cased, underscore-joined branch literal to a Branch.

    "SIN_DESIGNAR" means the class has no branch yet.
    """
    if value == "SIN_DESIGNAR":
        return None
    try:
        return Branch(value)
    except ValueError:
        raise MalformedContentError(f"Unknown branch: {value!r}", actual=value) from None


# ---------------------------------------------------------------------------
# Transcript (PDF) fields
# ---------------------------------------------------------------------------

# The check digit is optional: the PDF sometimes renders "123.456-"
STUDENT_ID_AND_NAME_RE = re.compile(r"^(\d{2,3}\.\d{3}-\d?) (.*)$")
YEAR_AND_QUARTER_RE = re.compile(r"^((1|2)(?:er|do) Cuat|Anual) (\d{4})$")


def parse_student_id_and_name(value: str) -> Tuple[str, str]:
    groups = STUDENT_ID_AND_NAME_RE.match(value)
    if not groups:
        raise MalformedContentError(f"Couldn't parse studentIdAndName: {value!r}", actual=value)
    return groups.group(1), groups.group(2)


def match_year_and_quarter(value: str) -> Optional[Tuple[int, Quarter]]:
    """
    Parse "1er Cuat 2021", "2do Cuat 2021" or "Anual 2021".

    Returns None (instead of raising) so callers can try the next fragment
    when a long course name was wrapped.
    """
    groups = YEAR_AND_QUARTER_RE.match(value)
    if not groups:
        return None
    quarter = Quarter.ANNUAL if groups.group(1) == "Anual" else Quarter(groups.group(2) + "C")
    return int(groups.group(3)), quarter


def normalize_transcript_branch(value: str) -> str:
    """
    Upper-case the branch and join words with "_" (CAMPUS VIRTUAL -> AULA_VIRTUAL).

    The result may still be "ESCUELA", which the caller has to complete.
    """
    branch = value.upper().replace(" ", "_")
    if branch == "CAMPUS_VIRTUAL":
        branch = "AULA_VIRTUAL"
    return branch


def format_student_id(value: str) -> str:
    """
    Split the check digit, group thousands the es-AR way and join again.

    "1234567" -> "123.456-7"
    """
    raw = value.strip()
    if len(raw) < 2 or not raw.isdigit():
        raise MalformedContentError(f"Couldn't parse studentId: {value!r}", actual=value)
    grouped = f"{int(raw[:-1]):,}".replace(",", ".")
    return f"{grouped}-{raw[-1]}"


PLAN_CODE_RE = re.compile(r"^Plan: \((\w+)\)")


def parse_plan_code(value: str) -> str:
    groups = PLAN_CODE_RE.match(value)
    if not groups:
        raise MalformedContentError(f"planText couldn't be parsed: {value!r}", actual=value)
    return groups.group(1)


# ---------------------------------------------------------------------------
# Academic history rows
# ---------------------------------------------------------------------------

HISTORY_TYPES: Dict[str, HistoryType] = {
    "En curso": HistoryType.SIGNED,
    "Regularidad": HistoryType.SIGNED,
    "Promoción": HistoryType.PASSED,
    "Examen": HistoryType.PASSED,
    "Equivalencia Parcial": HistoryType.SIGNED,
    "Equivalencia Total": HistoryType.PASSED,
}

GRADE_PATTERNS: List[str] = [
    r"Inicio de dictado",
    r"\d{1,2} \(\w+\) (?:Promocionado|Aprobado|Reprobado)",
    r"Aprobada \(Aprobada\) Aprobado",
    r"No aprobad \(No aprobada\) Reprobado",
    r"No aprobad \(No aprobada\) Ausente",
    r"Aprobado",
    r"Reprobado",
    r"Ausente",
]

HISTORY_ROW_RE = re.compile(
    rf"^({'|'.join(HISTORY_TYPES)}) {{1,2}}- ({'|'.join(GRADE_PATTERNS)}) ({DATE_RE.pattern}) - .*Detalle$"
)
HISTORY_COURSE_RE = re.compile(r"\((\d{6})\)")


class HistoryRow(NamedTuple):
    type: HistoryType
    grade: str
    date: date


def parse_history_course_code(value: str) -> str:
    """
    The course header reads like "Física I (950701)".
    """
    groups = HISTORY_COURSE_RE.search(value)
    if not groups:
        raise MalformedContentError(f"courseText couldn't be parsed: {value!r}", actual=value)
    return groups.group(1)


def parse_history_row(value: str) -> HistoryRow:
    groups = HISTORY_ROW_RE.match(value)
    if not groups:
        raise MalformedContentError(f"historyRow couldn't be parsed: {value!r}", actual=value)
    return HistoryRow(
        type=HISTORY_TYPES[groups.group(1)],
        grade=groups.group(2),
        date=parse_date(groups.group(3)),
    )


def is_approved_grade(grade: str) -> bool:
    return ("Promocionado" in grade or "Aprobado" in grade) and "No aprobad" not in grade


# ---------------------------------------------------------------------------
# Portal (HTML) fields
# ---------------------------------------------------------------------------

# Possible values:
# - "2019 Cuat 2/2"
# - "2019 Anual"
# - "2019      1/1"
# ("Opcional" rows are dropped before getting here)
CLASS_TIME_RE = re.compile(r"^(\d{4}) (Cuat (1|2)/2|Anual|     1/1)$")


def parse_class_time(value: str) -> Tuple[int, Quarter]:
    groups = CLASS_TIME_RE.match(value)
    if not groups:
        raise MalformedContentError(f"Class time couldn't be parsed: {value!r}", actual=value)
    if groups.group(2) in ("Anual", "     1/1"):
        quarter = Quarter.ANNUAL
    else:
        quarter = Quarter(groups.group(3) + "C")
    return int(groups.group(1)), quarter


def normalize_portal_branch(value: str) -> str:
    return value.strip().upper().replace(" ", "_")


SURVEY_LABEL_RE = re.compile(r"^(docente|auxiliares) (\d{4}) (a|1|2)(nual|er c|do c)$")


class SurveyLabel(NamedTuple):
    kind: SurveyKind
    year: int
    quarter: Quarter


def clean_survey_label(value: str) -> str:
    return value.lower().replace("encuesta", "").replace("_", " ", 1).strip()


def parse_survey_label(value: str) -> SurveyLabel:
    """
    Parse a survey group header, e.g. "Encuesta Docente 2019 1er C".
    """
    label = clean_survey_label(value)
    groups = SURVEY_LABEL_RE.match(label)
    if not groups:
        raise MalformedContentError(f"Type couldn't be parsed: {label!r}", actual=value)

    # DOCENTE, AUXILIARES -> AUXILIAR
    kind = SurveyKind(groups.group(1).upper().replace("ARES", "AR"))
    quarter = Quarter.ANNUAL if groups.group(3) == "a" else Quarter(groups.group(3) + "C")
    return SurveyLabel(kind=kind, year=int(groups.group(2)), quarter=quarter)


# onclick looks like:
# if(fn_encuesta(51,36218,52143,'Z3574 [950309] Economía','[JEFE DE TP] GALLONI GUILLEN, ROLANDO')){return jslib_submit(...
SURVEY_ONCLICK_RE = re.compile(r"^if\(fn_encuesta\((\d+),(\d+),(\d+),'(.*)','(.*)'\)\)\{return jslib_submit")


class SurveyFormParams(NamedTuple):
    iden: int
    idcu: int
    iddo: int
    course_name: str
    professor_name: str

    def as_form_data(self) -> Dict[str, object]:
        return {
            "form_submit": 0,
            "form_iden": self.iden,
            "form_idcu": self.idcu,
            "form_iddo": self.iddo,
            "form_curnom": self.course_name,
            "form_docnom": self.professor_name,
        }


def parse_survey_onclick(value: Optional[str]) -> SurveyFormParams:
    groups = SURVEY_ONCLICK_RE.match(value or "")
    if not groups:
        raise MalformedContentError(f"Survey link couldn't be parsed: {value!r}", actual=value)
    return SurveyFormParams(
        iden=int(groups.group(1)),
        idcu=int(groups.group(2)),
        iddo=int(groups.group(3)),
        course_name=groups.group(4),
        professor_name=groups.group(5),
    )
