from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ValidationError(ValueError):
    pass


class SubmissionError(RuntimeError):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Success(RequestOutcome):
    payload: Any = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Timeout(RequestOutcome):
    pass


@dataclass(frozen=True, slots=True)
class TransportError(RequestOutcome):
    message: str = ""


@dataclass(frozen=True, slots=True)
class InvalidContentType(RequestOutcome):
    message: str = ""


@dataclass(frozen=True, slots=True)
class HttpError(RequestOutcome):
    status: int = 0


TIMEOUT_MESSAGE = "Request timed out. The server may be starting up, please try again."
CONTENT_TYPE_MESSAGE = (
    "Search API returned non-JSON response. "
    "Check the configured base URL and ensure it points to the backend."
)
NO_FILTER_MESSAGE = "Please select at least one filter before searching."
INVALID_PAGE_MESSAGE = "Page number must be 1 or greater."


def message_for(outcome: RequestOutcome) -> str:
    if isinstance(outcome, Timeout):
        return TIMEOUT_MESSAGE
    if isinstance(outcome, InvalidContentType):
        return CONTENT_TYPE_MESSAGE
    if isinstance(outcome, HttpError):
        return f"Failed to fetch results (HTTP {outcome.status})."
    if isinstance(outcome, TransportError):
        return f"Search request failed: {outcome.message or 'unknown error'}"
    return "An error occurred during search"
