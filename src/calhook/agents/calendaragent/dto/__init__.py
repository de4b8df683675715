"""
Calendar Data Models

- EventDescriptor: a validated event before provider encoding
- CalendarEvent: an upcoming event as reported back to callers
- FieldError / DescriptorValidation: result of descriptor validation
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class EventDescriptor(BaseModel):
    """Logical event representation, independent of the calendar provider."""
    title: str
    start: datetime
    end: datetime
    description: Optional[str] = None
    attendees: List[str] = []


class CalendarEvent(BaseModel):
    """Upcoming event entry returned by list operations."""
    id: str
    title: str
    start: str
    end: str
    description: Optional[str] = None
    link: Optional[str] = None


@dataclass
class FieldError:
    field: str
    message: str


@dataclass
class DescriptorValidation:
    """Either a usable descriptor or the list of field errors that prevented one."""
    descriptor: Optional[EventDescriptor] = None
    errors: List[FieldError] = field(default_factory=list)
    # Fields parsed in partial mode (updates), keyed by descriptor field name
    values: dict = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_message(self) -> str:
        return "; ".join(error.message for error in self.errors)
