"""Root of the RAG router exception tree."""

import inspect
import os
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

_EXCEPTIONS_DIR = os.path.dirname(os.path.abspath(__file__))


@dataclass(frozen=True)
class RaiseLocation:
    """Where a ``RagRouterError`` was constructed."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def capture(cls) -> "RaiseLocation":
        # First frame outside this package is the raise site, however deep
        # the subclass __init__ chain is
        frame = inspect.currentframe()
        while frame is not None:
            path = os.path.abspath(frame.f_code.co_filename)
            if os.path.dirname(path) != _EXCEPTIONS_DIR:
                owner = frame.f_locals.get("self")
                return cls(
                    class_name=type(owner).__name__ if owner is not None else "<module>",
                    method_name=frame.f_code.co_name,
                    file_name=os.path.basename(path),
                    line_number=frame.f_lineno,
                )
            frame = frame.f_back
        return cls("<unknown>", "<unknown>", "<unknown>", 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


class RagRouterError(Exception):
    """Base exception for the package.

    Subclasses set ``error_code``. ``cause`` is the wrapped lower-level
    exception and ``context`` holds debugging key-value pairs; both end up in
    ``to_dict()`` for structured logs.
    """

    error_code: str = "RR_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = context or {}
        self.location = RaiseLocation.capture()
        self.stack_trace = (
            "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
            if cause is not None
            else None
        )

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
            },
            "location": self.location.to_dict(),
        }
        if self.extra_context:
            result["context"] = self.extra_context
        if self.cause is not None:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        if include_trace and self.stack_trace:
            result["stack_trace"] = [line for line in self.stack_trace.splitlines() if line.strip()]
        return result
