from __future__ import annotations

"""
Error types shared by the planner, the generation client and the orchestrator.

Only ValidationError is allowed to escape a generation run. Everything raised
while a single job is in flight is a GenerationError (or gets classified into
one) and ends up as a failure entry in the outcome.
"""

import enum
from typing import Optional

import httpx
from google.genai import errors as genai_errors


QUOTA_EXCEEDED_MESSAGE = (
    "API quota exceeded. Please check your plan and billing details with Google AI."
)


class ValidationError(ValueError):
    """The campaign configuration cannot be turned into a job plan."""


class ErrorKind(str, enum.Enum):
    QUOTA = "quota"
    INVALID_INPUT = "invalid_input"
    CONTENT_POLICY = "content_policy"
    TRANSIENT = "transient"
    MISSING_RESULT = "missing_result"
    UNKNOWN = "unknown"


class GenerationError(RuntimeError):
    """A classified failure reported by the creative generation backend."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def user_message(self) -> str:
        if self.kind is ErrorKind.QUOTA:
            return QUOTA_EXCEEDED_MESSAGE
        return str(self) or "An unknown API error occurred."


_QUOTA_STATUSES = {"RESOURCE_EXHAUSTED"}
_INVALID_STATUSES = {"INVALID_ARGUMENT", "FAILED_PRECONDITION", "OUT_OF_RANGE"}


def _kind_from_status(code: Optional[int], status: Optional[str], text: str) -> ErrorKind:
    status = (status or "").upper()
    if code == 429 or status in _QUOTA_STATUSES or "RESOURCE_EXHAUSTED" in text:
        return ErrorKind.QUOTA
    if code == 400 or status in _INVALID_STATUSES:
        return ErrorKind.INVALID_INPUT
    if code is not None and code >= 500:
        return ErrorKind.TRANSIENT
    return ErrorKind.UNKNOWN


def classify_exception(exc: BaseException) -> GenerationError:
    """
    Map an arbitrary exception raised while talking to the backend onto a
    GenerationError.

    - google.genai APIError: classified by HTTP code and RPC status.
    - httpx transport errors and timeouts: TRANSIENT.
    - httpx HTTP status errors: classified by response status code.
    - Anything else: UNKNOWN, unless the text mentions RESOURCE_EXHAUSTED.
    """
    if isinstance(exc, GenerationError):
        return exc

    text = str(exc)

    if isinstance(exc, genai_errors.APIError):
        code = getattr(exc, "code", None)
        status = getattr(exc, "status", None)
        message = getattr(exc, "message", None) or text
        return GenerationError(message, _kind_from_status(code, status, text))

    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return GenerationError(text, _kind_from_status(code, None, text))

    if isinstance(exc, httpx.TransportError):
        return GenerationError(f"Network error: {text}", ErrorKind.TRANSIENT)

    return GenerationError(text, _kind_from_status(None, None, text))
