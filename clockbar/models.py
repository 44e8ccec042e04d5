from pydantic import BaseModel, Field
from typing import Any, List, Optional

from clockbar.errors import (
    ClockifyAPIError,
    ConfigValidationError,
    ErrorKind,
    classify,
)


class ActionError(BaseModel):
    """Structured failure of an entry-point operation."""
    kind: ErrorKind
    message: str
    code: Optional[str] = None
    status_code: Optional[int] = None
    missing: List[str] = Field(default_factory=list)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ActionError":
        kind = classify(exc)
        error = cls(kind=kind, message=getattr(exc, "message", None) or str(exc) or type(exc).__name__)
        if isinstance(exc, ClockifyAPIError):
            error.code = exc.code
            error.status_code = exc.status_code
        if isinstance(exc, ConfigValidationError):
            error.missing = exc.missing
        return error

    @property
    def headline(self) -> str:
        return self.message.split("\n")[0]


class ActionResult(BaseModel):
    """Result envelope: either data or an error, never an exception."""
    ok: bool
    data: Optional[Any] = None
    error: Optional[ActionError] = None

    @classmethod
    def success(cls, data: Any = None) -> "ActionResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, exc: BaseException) -> "ActionResult":
        return cls(ok=False, error=ActionError.from_exception(exc))
