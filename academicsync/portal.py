"""
Student portal source adapter (HTML tables).

Every page keeps its data inside the ".std-canvas" container. Rows are read
by fixed cell offsets; a row that does not fit the expected grammar fails
the whole call instead of producing a half-filled record.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from academicsync import grammar
from academicsync.errors import MalformedContentError, SessionExpiredError
from academicsync.fetch import PageFetcher
from academicsync.model import (
    ClassSchedule,
    PassedCourses,
    Professor,
    ProfessorClass,
    StudentPlan,
    SurveyMetadata,
    TakenSurvey,
)
from academicsync.reporting import ErrorReporter, reported
from academicsync.schedules import decode_schedules
from academicsync.surveys import parse_survey_answers


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Endpoints & sentinel literals
# ---------------------------------------------------------------------------

GRADES_BOOK_PATH = "/alu/libreta.do"
ENROLLMENTS_PATH = "/alu/inscurcomp.do"
PLANS_PATH = "/alu/mat.do"
HISTORY_PATH = "/alu/hist.do"
SURVEYS_PATH = "/alu/encdoc.do"
SURVEY_ANSWERS_PATH = "/alu/encdocpop.do"

SESSION_EXPIRED_TEXT = "La sesión ha expirado"

REJECTED_CLASS_CODE = "RECH"
REJECTED_SCHEDULE = "INSCRIPCIÓN RECHAZADA"
# We don't know yet when this one happens, so these rows are ignored too
ACCEPTED_SCHEDULE = "INSCRIPCIÓN ACEPTADA"
OPTIONAL_TIME = "Opcional"

NO_PLAN = "-nada-"

HISTORY_FINAL = "Final"
HISTORY_COURSEWORK = "Cursada"
HISTORY_APPROVED = "Aprob"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _canvas_table(soup: BeautifulSoup, index: int, html: str) -> Tag:
    tables = soup.select(".std-canvas table")
    if len(tables) <= index:
        raise MalformedContentError(
            f"Expected at least {index + 1} tables, found {len(tables)}",
            expected=index + 1,
            actual=len(tables),
            content=html,
        )
    return tables[index]


def _cells(row: Tag, count: int, html: str) -> List[Tag]:
    cells = row.find_all("td", recursive=False)
    if len(cells) < count:
        raise MalformedContentError(
            f"Expected at least {count} cells, found {len(cells)}",
            expected=count,
            actual=len(cells),
            content=html,
        )
    return cells


def _text(tag: Tag) -> str:
    return tag.get_text().strip()


# ---------------------------------------------------------------------------
# Page parsing
# ---------------------------------------------------------------------------


def parse_start_year(html: str) -> int:
    """
    The first cell of the last row of the grades book holds the oldest date.
    """
    rows = _canvas_table(_soup(html), 0, html).find_all("tr")
    if not rows:
        raise MalformedContentError("Grades book table has no rows", content=html)
    first_cell = rows[-1].find("td")
    return grammar.parse_date(_text(first_cell) if first_cell else "").year


def parse_student_id(html: str) -> str:
    soup = _soup(html)
    span = soup.select_one("div.center p.mask1 span")
    student_id = _text(span) if span is not None else ""
    if student_id:
        return student_id

    # Check if the user has been logged out
    for div in soup.select("div.std-canvas div"):
        if _text(div) == SESSION_EXPIRED_TEXT:
            raise SessionExpiredError("Couldn't get studentId because the user has been logged out.")
    raise MalformedContentError("Couldn't get studentId", content=html)


def parse_student_plans(html: str) -> List[StudentPlan]:
    plans: List[StudentPlan] = []
    for option in _soup(html).select(".std-canvas > div select option"):
        plan_id = (option.get("value") or "").strip()
        plan_code = _text(option)
        if not plan_id or plan_code == NO_PLAN:
            continue
        plans.append(StudentPlan(plan_id=plan_id, plan_code=plan_code))
    return plans


def parse_passed_courses(html: str) -> PassedCourses:
    """
    Final + Aprob -> passed; Cursada or Final + Aprob -> signed.
    """
    table = _canvas_table(_soup(html), 0, html)

    passed = set()
    signed = set()
    for row in table.find_all("tr")[1:]:
        cells = row.find_all("td", recursive=False)
        # Summary and separator rows have fewer cells and no course
        if len(cells) < 2:
            continue
        kind = _text(cells[0])
        if kind not in (HISTORY_FINAL, HISTORY_COURSEWORK) or _text(cells[1]) != HISTORY_APPROVED:
            continue
        course_code = _text(_cells(row, 4, html)[3])
        signed.add(course_code)
        if kind == HISTORY_FINAL:
            passed.add(course_code)

    return PassedCourses(signed=frozenset(signed), passed=frozenset(passed))


def _course_name(cell: Tag, html: str) -> str:
    # The name is the leading text node, the time is inside a <span>
    first = cell.contents[0] if cell.contents else None
    if not isinstance(first, NavigableString):
        raise MalformedContentError("Couldn't find course name", actual=str(cell), content=html)
    return str(first).strip()


def _parse_class_row(row: Tag, html: str) -> Optional[ClassSchedule]:
    cells = _cells(row, 6, html)

    class_code = _text(cells[2])
    schedules_str = _text(cells[5])
    if class_code == REJECTED_CLASS_CODE or schedules_str in (REJECTED_SCHEDULE, ACCEPTED_SCHEDULE):
        return None

    span = cells[1].find("span")
    time = (span.get_text() if span else "").replace("(", "").replace(")", "").strip()
    if time == OPTIONAL_TIME:
        return None
    year, quarter = grammar.parse_class_time(time)

    return ClassSchedule(
        year=year,
        quarter=quarter,
        course_code=_text(cells[0]),
        course_name=_course_name(cells[1], html),
        class_code=class_code,
        branch=grammar.parse_branch(grammar.normalize_portal_branch(cells[3].get_text())),
        schedules=decode_schedules(schedules_str),
    )


def parse_class_schedules(html: str) -> List[ClassSchedule]:
    table = _canvas_table(_soup(html), 1, html)
    class_schedules: List[ClassSchedule] = []
    for row in table.find_all("tr")[1:]:
        class_schedule = _parse_class_row(row, html)
        if class_schedule:
            class_schedules.append(class_schedule)
    return class_schedules


@dataclass(frozen=True)
class _SurveyRow:
    """
    Survey metadata plus the table row it came from.

    The row is only needed to find the answers link and never leaves this module.
    """

    metadata: SurveyMetadata
    row: Tag


SURVEY_COMPLETED_CELL = 4
SURVEY_LINK_CELL = 3


def parse_survey_rows(html: str, only_completed: bool = False) -> List[_SurveyRow]:
    rows: List[_SurveyRow] = []

    for group in _soup(html).select(".std-canvas .tab"):
        label = group.find_previous_sibling("p")
        survey = grammar.parse_survey_label(label.get_text() if label else "")

        class_taken = group.find("p")
        parts = (class_taken.get_text() if class_taken else "").split(" ")
        if len(parts) < 2:
            raise MalformedContentError("Couldn't parse survey class", actual=" ".join(parts), content=html)
        class_code, course_code = parts[0], parts[1]

        for tr in group.select("table tr"):
            cells = tr.find_all("td", recursive=False)
            # Header rows only have <th> cells
            if not cells:
                continue
            is_completed = len(cells) > SURVEY_COMPLETED_CELL and cells[SURVEY_COMPLETED_CELL].find("img") is not None
            if only_completed and not is_completed:
                continue
            cells = _cells(tr, 2, html)

            # One row per professor, sharing the class and course
            metadata = SurveyMetadata(
                survey_kind=survey.kind,
                year=survey.year,
                quarter=survey.quarter,
                class_code=class_code,
                course_code=course_code,
                professor_name=_text(cells[0]),
                professor_role=_text(cells[1]),
            )
            rows.append(_SurveyRow(metadata=metadata, row=tr))

    return rows


def professor_class_from_survey(metadata: SurveyMetadata) -> ProfessorClass:
    return ProfessorClass(
        year=metadata.year,
        quarter=metadata.quarter,
        class_code=metadata.class_code,
        course_code=metadata.course_code,
        professors=(
            Professor(
                name=metadata.professor_name,
                kind=metadata.survey_kind,
                role=metadata.professor_role,
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class PortalExtractor:
    """
    Source adapter for the classic student portal.
    """

    def __init__(self, fetcher: PageFetcher, reporter: Optional[ErrorReporter] = None) -> None:
        self.fetcher = fetcher
        self.reporter = reporter or ErrorReporter()

    @reported
    async def get_start_year(self) -> int:
        return parse_start_year(await self.fetcher.fetch_text(GRADES_BOOK_PATH))

    @reported
    async def get_student_id(self) -> str:
        return parse_student_id(await self.fetcher.fetch_text(ENROLLMENTS_PATH))

    @reported
    async def get_student_plans(self) -> List[StudentPlan]:
        return parse_student_plans(await self.fetcher.fetch_text(PLANS_PATH))

    @reported
    async def get_passed_courses(self) -> PassedCourses:
        return parse_passed_courses(await self.fetcher.fetch_text(HISTORY_PATH))

    @reported
    async def get_class_schedules(self) -> List[ClassSchedule]:
        class_schedules = parse_class_schedules(await self.fetcher.fetch_text(ENROLLMENTS_PATH))
        logger.info("Parsed %d class schedules", len(class_schedules))
        return class_schedules

    @reported
    async def get_survey_metadata(self, only_completed: bool = False) -> List[SurveyMetadata]:
        rows = parse_survey_rows(await self.fetcher.fetch_text(SURVEYS_PATH), only_completed)
        return [row.metadata for row in rows]

    @reported
    async def get_professor_classes_from_surveys(self) -> List[ProfessorClass]:
        rows = parse_survey_rows(await self.fetcher.fetch_text(SURVEYS_PATH))
        return [professor_class_from_survey(row.metadata) for row in rows]

    async def _fetch_answers(self, survey_row: _SurveyRow) -> TakenSurvey:
        cells = survey_row.row.find_all("td", recursive=False)
        link = cells[SURVEY_LINK_CELL].find("a") if len(cells) > SURVEY_LINK_CELL else None
        params = grammar.parse_survey_onclick(link.get("onclick") if link is not None else None)

        html = await self.fetcher.post_text(SURVEY_ANSWERS_PATH, params.as_form_data())
        return TakenSurvey(metadata=survey_row.metadata, answers=tuple(parse_survey_answers(html)))

    @reported
    async def get_taken_surveys(self) -> List[TakenSurvey]:
        rows = parse_survey_rows(await self.fetcher.fetch_text(SURVEYS_PATH), only_completed=True)
        # gather keeps the input order; when one fetch fails the rest still finish in their threads
        return list(await asyncio.gather(*(self._fetch_answers(row) for row in rows)))
