"""
The operation set shared by both source adapters.

The two adapters have nothing in common but this contract: each one owns
its own endpoints, grammars and cell offsets.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Type, Union

from academicsync.fetch import PageFetcher
from academicsync.model import ClassSchedule, PassedCourses, ProfessorClass, TakenSurvey
from academicsync.portal import PortalExtractor
from academicsync.reporting import ErrorReporter
from academicsync.transcript import TranscriptExtractor


class SourceAdapter(Protocol):
    async def get_start_year(self) -> int: ...

    async def get_student_id(self) -> str: ...

    async def get_class_schedules(self) -> List[ClassSchedule]: ...

    async def get_passed_courses(self) -> PassedCourses: ...

    async def get_professor_classes_from_surveys(self) -> List[ProfessorClass]: ...

    async def get_taken_surveys(self) -> List[TakenSurvey]: ...


ADAPTERS: Dict[str, Type[Union[TranscriptExtractor, PortalExtractor]]] = {
    "transcript": TranscriptExtractor,
    "guarani": TranscriptExtractor,
    "portal": PortalExtractor,
    "siga": PortalExtractor,
}


def create_adapter(
    source: str,
    fetcher: PageFetcher,
    reporter: Optional[ErrorReporter] = None,
) -> SourceAdapter:
    """
    Build the adapter for a source system name.
    """
    key = source.strip().lower()
    if key not in ADAPTERS:
        raise ValueError(f"Unknown source: {source!r} (expected one of {sorted(ADAPTERS)})")
    return ADAPTERS[key](fetcher, reporter)
