"""
Transcript source adapter (PDF receipts + ajax pages).

The class schedules and the student id come from PDFs. Their text is
flattened into fragments and walked with a TokenCursor, validating the
fixed headers on the way.

The academic history and the plan code come from "ajax" pages: a JSON
envelope whose HTML contains <script> tags like

    kernel.renderer.on_arrival({"info": {"id": "info_historia"}, "content": "<div>..."});

and only the payload with the requested info id is relevant.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from academicsync import grammar
from academicsync.cursor import TokenCursor
from academicsync.errors import MalformedContentError
from academicsync.fetch import PageFetcher
from academicsync.model import (
    AcademicHistoryEntry,
    Branch,
    ClassSchedule,
    HistoryType,
    PassedCourses,
    ProfessorClass,
    TakenSurvey,
)
from academicsync.reporting import ErrorReporter, reported
from academicsync.schedules import decode_schedules


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Endpoints & fixed document literals
# ---------------------------------------------------------------------------

RECEIPT_PDF_PATH = "/autogestion/grado/calendario/descargar_comprobante"
STUDY_PLAN_PDF_PATH = "/autogestion/grado/plan_estudio/generar_pdf"
STUDY_PLAN_PATH = "/autogestion/grado/plan_estudio"
HISTORY_PATH = (
    "/autogestion/grado/historia_academica/"
    "?checks=PromocionA,RegularidadA,RegularidadR,RegularidadU,EnCurso,ExamenA,ExamenR,ExamenU,"
    "EquivalenciaA,EquivalenciaR,AprobResA,CreditosA,&modo=anio&param_modo=&e_cu=A&e_ex=A&e_re=A"
)

RECEIPT_HEADER = ["", "COMPROBANTE DE INSCRIPCIÓN A CURSADA"]
RECEIPT_COLUMNS = ["Código", "Actividad", "Período", "Comisión", "Ubicación", "Aula", "Horario"]
# Text that follows the last class row
RECEIPT_FOOTER = "Firma y Sello Departamento"
# "Escuela Técnica" is rendered as two fragments
SCHOOL_BRANCH = "ESCUELA"
SCHOOL_BRANCH_CONTINUATION = "Técnica -"

STUDENT_ID_LABEL = "Legajo:"

AJAX_SCRIPT_PREFIX = "kernel.renderer.on_arrival("


# ---------------------------------------------------------------------------
# Document parsing
# ---------------------------------------------------------------------------


def _read_branch(cursor: TokenCursor) -> Optional[Branch]:
    branch = grammar.normalize_transcript_branch(cursor.consume())
    if branch == SCHOOL_BRANCH:
        cursor.expect([SCHOOL_BRANCH_CONTINUATION])
        return Branch.PINERO
    return grammar.parse_branch(branch)


def _read_class_schedule(cursor: TokenCursor) -> ClassSchedule:
    """
    Read one class row, starting at its course code.
    """
    course_code = grammar.parse_course_code(cursor.consume())  # e.g. 950701
    course_name = cursor.consume()  # e.g. Fisica I

    year_and_quarter = cursor.consume()  # e.g. 1er Cuat 2021
    parsed = grammar.match_year_and_quarter(year_and_quarter)
    if parsed is None:
        # Long course names get split into two fragments
        course_name = f"{course_name} {year_and_quarter}"
        year_and_quarter = cursor.consume()
        parsed = grammar.match_year_and_quarter(year_and_quarter)
    if parsed is None:
        raise MalformedContentError(
            f"Class time couldn't be parsed: {year_and_quarter!r}",
            index=cursor.position - 1,
            actual=year_and_quarter,
        )
    year, quarter = parsed

    class_code = cursor.consume().upper()  # e.g. Z1154
    branch = _read_branch(cursor)

    cursor.consume()  # classroom, e.g. "2" or "Sin definir"

    schedules = decode_schedules(cursor.consume())  # e.g. Lu(n)1:5 Mi(n)0:2

    return ClassSchedule(
        year=year,
        quarter=quarter,
        course_code=course_code,
        course_name=course_name,
        class_code=class_code,
        branch=branch,
        schedules=schedules,
    )


def parse_class_schedules(tokens: List[str], header: Sequence[str] = RECEIPT_HEADER) -> List[ClassSchedule]:
    """
    Parse the enrollment receipt PDF fragments.

    ``header`` is the fixed title block the document has to start with.
    """
    # An empty PDF means the student has no current classes
    if not tokens or list(tokens) == [""]:
        return []

    cursor = TokenCursor(tokens)
    try:
        cursor.expect(header)

        # Not used, but validates the document format
        grammar.parse_student_id_and_name(cursor.consume())

        cursor.expect(RECEIPT_COLUMNS)

        class_schedules: List[ClassSchedule] = []
        while cursor.peek() != RECEIPT_FOOTER:
            class_schedules.append(_read_class_schedule(cursor))
        return class_schedules
    except MalformedContentError as e:
        if e.content is None:
            e.content = cursor.tokens
        raise


def parse_student_id(tokens: List[str]) -> str:
    """
    Find the "Legajo:" label and format the fragment after it.
    """
    try:
        index = list(tokens).index(STUDENT_ID_LABEL)
    except ValueError:
        raise MalformedContentError("Couldn't find studentId in pdf contents", content=tokens) from None

    cursor = TokenCursor(tokens[index + 1:])
    try:
        return grammar.format_student_id(cursor.consume())
    except MalformedContentError as e:
        e.content = tokens
        raise


def unwrap_ajax_contents(response_text: str, info_id: str) -> str:
    """
    Return the HTML content of the ajax payload with the given info id.
    """
    try:
        response = json.loads(response_text)
    except ValueError:
        raise MalformedContentError("Invalid ajax contents", content=response_text) from None
    if not isinstance(response, dict) or response.get("cod") != "1":
        raise MalformedContentError("Invalid ajax contents", content=response_text)

    soup = BeautifulSoup(response.get("cont") or "", "html.parser")
    contents = []
    for script in soup.find_all("script"):
        source = (script.string or "").strip()
        if not source.startswith(AJAX_SCRIPT_PREFIX):
            continue
        body = source[len(AJAX_SCRIPT_PREFIX):]
        if body.endswith(");"):
            body = body[:-2]
        try:
            payload = json.loads(body)
        except ValueError:
            raise MalformedContentError("Invalid ajax script payload", content=source) from None
        if not isinstance(payload, dict):
            raise MalformedContentError("Invalid ajax script payload", content=source)
        if (payload.get("info") or {}).get("id") == info_id:
            contents.append(payload.get("content", ""))

    if len(contents) != 1:
        raise MalformedContentError(
            f"Found unexpected number of page contents: {len(contents)}",
            expected=1,
            actual=len(contents),
            content=response_text,
        )
    return contents[0]


def parse_academic_history(html: str) -> List[AcademicHistoryEntry]:
    """
    Parse the history page, keeping only approved rows.
    """
    soup = BeautifulSoup(html, "html.parser")
    entries: List[AcademicHistoryEntry] = []

    for item in soup.select(".catedra_nombre"):
        h4 = item.find("h4")
        course_code = grammar.parse_history_course_code(h4.get_text() if h4 else "")

        span = item.find("span")
        row = grammar.parse_history_row(span.get_text().strip() if span else "")

        # Failed or absent grades never enter the model
        if not grammar.is_approved_grade(row.grade):
            continue

        entries.append(AcademicHistoryEntry(course_code=course_code, type=row.type, date=row.date))

    return entries


def parse_plan_code(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    header = soup.find(class_="encabezado", recursive=False)
    cells = header.find_all("td") if header is not None else []
    if len(cells) < 2:
        raise MalformedContentError("Couldn't find plan header", content=html)
    return grammar.parse_plan_code(cells[1].get_text())


def passed_courses_from_history(history: List[AcademicHistoryEntry]) -> PassedCourses:
    # Signed includes every approved row, so passed courses are counted as signed too
    return PassedCourses(
        signed=frozenset(entry.course_code for entry in history),
        passed=frozenset(entry.course_code for entry in history if entry.type is HistoryType.PASSED),
    )


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class TranscriptExtractor:
    """
    Source adapter for the transcript/self-service back-end.
    """

    def __init__(self, fetcher: PageFetcher, reporter: Optional[ErrorReporter] = None) -> None:
        self.fetcher = fetcher
        self.reporter = reporter or ErrorReporter()

    async def _fetch_ajax(self, path: str, info_id: str) -> str:
        return unwrap_ajax_contents(await self.fetcher.fetch_text(path), info_id)

    @reported
    async def get_student_id(self) -> str:
        return parse_student_id(await self.fetcher.fetch_pdf_tokens(STUDY_PLAN_PDF_PATH))

    @reported
    async def get_class_schedules(self) -> List[ClassSchedule]:
        tokens = await self.fetcher.fetch_pdf_tokens(RECEIPT_PDF_PATH)
        class_schedules = parse_class_schedules(tokens)
        logger.info("Parsed %d class schedules", len(class_schedules))
        return class_schedules

    @reported
    async def get_student_plan_code(self) -> str:
        return parse_plan_code(await self._fetch_ajax(STUDY_PLAN_PATH, "info_plan"))

    @reported
    async def get_academic_history(self) -> List[AcademicHistoryEntry]:
        return parse_academic_history(await self._fetch_ajax(HISTORY_PATH, "info_historia"))

    @reported
    async def get_start_year(self) -> int:
        history = parse_academic_history(await self._fetch_ajax(HISTORY_PATH, "info_historia"))
        if not history:
            raise MalformedContentError("Couldn't resolve start year from an empty academic history")
        return min(entry.date for entry in history).year

    @reported
    async def get_passed_courses(self) -> PassedCourses:
        history = parse_academic_history(await self._fetch_ajax(HISTORY_PATH, "info_historia"))
        return passed_courses_from_history(history)

    # The transcript back-end does not publish surveys
    @reported
    async def get_professor_classes_from_surveys(self) -> List[ProfessorClass]:
        return []

    @reported
    async def get_taken_surveys(self) -> List[TakenSurvey]:
        return []
