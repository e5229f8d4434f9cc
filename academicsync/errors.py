"""
Error taxonomy shared by both source adapters.

- MalformedContentError: the page/document did not look the way we expect.
  Always fatal for the current call and always reported.
- UnsupportedSchemaError: a survey field whose options match no known shape.
- SessionExpiredError: the user was logged out. Callers branch on this one
  (e.g. to ask for a new login) and it is never reported as a bug.
"""

from __future__ import annotations

from typing import Any, Optional


class AcademicSyncError(Exception):
    """Base class for every error raised by academicsync."""


class MalformedContentError(AcademicSyncError):
    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        expected: Any = None,
        actual: Any = None,
        content: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.index = index
        self.expected = expected
        self.actual = actual
        self.content = content
        # Filled in by the reporter once the error leaves an adapter operation
        self.operation: Optional[str] = None

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class UnsupportedSchemaError(MalformedContentError):
    pass


class SessionExpiredError(AcademicSyncError):
    pass
