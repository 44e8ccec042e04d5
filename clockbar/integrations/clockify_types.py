"""
Pydantic models for Clockify API types.
Minimal subset used by the time-entry endpoints.
"""
from datetime import datetime, timedelta
from pydantic import BaseModel
from typing import Optional, List, Dict

from clockbar.utils.timefmt import parse_instant


class TimeInterval(BaseModel):
    """Time interval for time entries."""
    start: str  # ISO 8601
    end: Optional[str] = None  # ISO 8601, null if timer is running
    duration: Optional[str] = None  # ISO 8601 duration

    @property
    def is_open(self) -> bool:
        return not self.end

    def started_at(self) -> datetime:
        return parse_instant(self.start)

    def ended_at(self) -> Optional[datetime]:
        return parse_instant(self.end) if self.end else None

    def elapsed(self, now: datetime) -> timedelta:
        """Worked time; an open interval runs until now."""
        return (self.ended_at() or now) - self.started_at()


class Tag(BaseModel):
    id: str
    name: str


class CustomFieldValue(BaseModel):
    customFieldId: str
    value: Optional[str] = None


class TimeEntry(BaseModel):
    """Time entry model."""
    id: str
    description: Optional[str] = None
    userId: str
    billable: bool = False
    projectId: Optional[str] = None
    timeInterval: TimeInterval
    workspaceId: str
    isLocked: bool = False
    tags: Optional[List[Tag]] = None
    customFields: Optional[List[CustomFieldValue]] = None


class TimeEntryCreate(BaseModel):
    """Request body for starting a time entry."""
    start: str  # ISO 8601
    projectId: Optional[str] = None


class TimeEntryClose(BaseModel):
    """Request body for stopping a running time entry."""
    end: str  # ISO 8601


class ClockifyErrorResponse(BaseModel):
    """Error body returned by Clockify on non-success responses."""
    message: Optional[str] = None
    code: Optional[int] = None
    errors: Optional[Dict[str, List[str]]] = None
