"""
Error reporting for adapter operations.

Every public adapter operation is wrapped with ``reported``: when it fails,
the error gets the operation name attached, is logged and forwarded to the
optional log sink as ``(operation_name, is_error, serialized_detail)``, and
is then re-raised unchanged.

SessionExpiredError is expected (the user simply got logged out), so it is
never forwarded to the sink.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from academicsync.errors import MalformedContentError, SessionExpiredError


logger = logging.getLogger(__name__)

LogSink = Callable[[str, bool, str], Any]

# Raw content can be a whole page, only keep the beginning
MAX_CONTENT_CHARS = 2000

T = TypeVar("T")


def _content_fragment(content: Any) -> Optional[str]:
    if content is None:
        return None
    if isinstance(content, str):
        text = content
    else:
        text = json.dumps(list(content) if isinstance(content, tuple) else content, ensure_ascii=False, default=str)
    return text[:MAX_CONTENT_CHARS]


def serialize_error(error: BaseException) -> str:
    """
    Serialize an error into the JSON detail sent to the log sink.
    """
    data: dict[str, Any] = {
        "type": type(error).__name__,
        "message": getattr(error, "message", None) or str(error),
        "operation": getattr(error, "operation", None),
    }
    if isinstance(error, MalformedContentError):
        data["index"] = error.index
        data["expected"] = error.expected
        data["actual"] = error.actual
        data["content"] = _content_fragment(error.content)
    return json.dumps(data, ensure_ascii=False, default=str)


class ErrorReporter:
    def __init__(self, log_sink: Optional[LogSink] = None) -> None:
        self.log_sink = log_sink

    def report(self, operation: str, error: BaseException) -> None:
        if isinstance(error, MalformedContentError) and error.operation is None:
            error.operation = operation

        if isinstance(error, SessionExpiredError):
            logger.info("Session expired during %s", operation)
            return

        logger.error("Error at %s: %s", operation, error)
        if self.log_sink is not None:
            self.log_sink(operation, True, serialize_error(error))


def reported(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Decorate an async adapter method so failures go through ``self.reporter``.
    """

    @functools.wraps(func)
    async def wrapper(self, *args: Any, **kwargs: Any) -> T:
        try:
            return await func(self, *args, **kwargs)
        except Exception as e:
            self.reporter.report(func.__name__, e)
            raise

    return wrapper
