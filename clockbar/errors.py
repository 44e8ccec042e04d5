"""
Error taxonomy shared by the entry points.

Every clockbar exception carries a ``kind`` so callers can branch on it
instead of chaining isinstance checks.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, List, Optional


class ErrorKind(str, Enum):
    CONFIG = "config"
    API = "api"
    NETWORK = "network"
    UNEXPECTED = "unexpected"


class ClockbarError(Exception):
    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigValidationError(ClockbarError):
    """Missing or invalid settings."""
    kind = ErrorKind.CONFIG

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class ClockifyAPIError(ClockbarError):
    """Non-success response from Clockify, or a precondition the API would reject."""
    kind = ErrorKind.API

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        response: Any = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.response = response


class ClockifyNetworkError(ClockbarError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""
    kind = ErrorKind.NETWORK

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def classify(exc: BaseException) -> ErrorKind:
    if isinstance(exc, ClockbarError):
        return exc.kind
    return ErrorKind.UNEXPECTED
