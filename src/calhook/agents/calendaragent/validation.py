"""
Event descriptor validation shared by every calendar write operation.
"""

from typing import Any, Dict

from calhook.agents.calendaragent.dto import (
    DescriptorValidation,
    EventDescriptor,
    FieldError,
)
from calhook.agents.calendaragent.utils.datetime_utils import parse_timestamp

_TIMESTAMP_LABELS = {"start": "start time", "end": "end time"}


def validate_event_descriptor(
    data: Dict[str, Any],
    tz_name: str,
    partial: bool = False,
    enforce_ordering: bool = True,
) -> DescriptorValidation:
    """
    Validate raw event fields (title, start, end, description, attendees).

    In full mode a title, start and end are required and a complete
    EventDescriptor is returned. In partial mode (updates) only the supplied
    fields are checked and the parsed values are returned in `values`.
    """
    errors = []
    values: Dict[str, Any] = {}

    title = data.get("title")
    if title is not None:
        if not isinstance(title, str) or not title.strip():
            errors.append(FieldError("title", "Title must be a non-empty string"))
        else:
            values["title"] = title
    elif not partial:
        errors.append(FieldError("title", "Missing required field: title"))

    for field_name, label in _TIMESTAMP_LABELS.items():
        raw = data.get(field_name)
        if raw is None:
            if not partial:
                errors.append(FieldError(field_name, f"Missing required field: {label}"))
            continue
        parsed = parse_timestamp(raw, tz_name)
        if parsed is None:
            errors.append(FieldError(field_name, f"Invalid {label}: {raw}"))
        else:
            values[field_name] = parsed

    description = data.get("description")
    if description is not None:
        values["description"] = str(description)

    attendees = data.get("attendees")
    if attendees is not None:
        if not isinstance(attendees, list) or not all(isinstance(a, str) for a in attendees):
            errors.append(FieldError("attendees", "Attendees must be a list of email addresses"))
        else:
            values["attendees"] = [a.strip() for a in attendees if a.strip()]

    if enforce_ordering and "start" in values and "end" in values:
        if values["end"] <= values["start"]:
            errors.append(FieldError("end", "End time must be after start time"))

    if errors:
        return DescriptorValidation(errors=errors, values=values)

    if partial:
        return DescriptorValidation(values=values)

    return DescriptorValidation(
        descriptor=EventDescriptor(
            title=values["title"],
            start=values["start"],
            end=values["end"],
            description=values.get("description"),
            attendees=values.get("attendees", []),
        ),
        values=values,
    )
