"""
Google Calendar Client
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import pytz
from googleapiclient.discovery import build

from calhook.agents.calendaragent.dto import CalendarEvent, EventDescriptor
from calhook.agents.calendaragent.utils.datetime_utils import (
    duration_minutes,
    format_time_range,
    parse_timestamp,
    read_provider_datetime,
    to_provider_datetime,
)
from calhook.agents.calendaragent.validation import validate_event_descriptor
from calhook.auth.session import TokenStore
from calhook.config import Settings
from calhook.constants import (
    CALENDAR_SETTINGS,
    CONFIRMATION_PROMPT,
    DEFAULT_USER_ID,
    GOOGLE_CALENDAR_SETTINGS,
)

# Set up logging
logger = logging.getLogger(__name__)


def build_calendar_service(credentials):
    """Build a Calendar v3 service object bound to the given credentials."""
    return build(
        "calendar",
        GOOGLE_CALENDAR_SETTINGS.API_VERSION,
        credentials=credentials,
        cache_discovery=False,
    )


def _failure(error: Any) -> Dict[str, Any]:
    return {"success": False, "error": str(error)}


class GoogleCalendarClient:
    """
    Thin wrapper around the Google Calendar events API.

    Every operation returns an envelope: {"success": True, ...data} or
    {"success": False, "error": message}. Provider errors are not classified,
    their message is passed through as is. The only exception that escapes is
    NotAuthenticatedError, raised before any provider call when the token
    store holds nothing for the caller.
    """

    def __init__(
        self,
        token_store: TokenStore,
        settings: Settings,
        service_builder: Callable = build_calendar_service,
        calendar_id: str = CALENDAR_SETTINGS.PRIMARY_CALENDAR_ID,
    ):
        """
        Initialize the Google Calendar client.

        Args:
            token_store: Source of OAuth token sets, read lazily per call
            settings: Application settings (timezone, ordering policy)
            service_builder: Callable turning credentials into a service object
            calendar_id: Calendar to operate on
        """
        self.token_store = token_store
        self.tz_name = settings.CALENDAR_TIMEZONE
        self.enforce_ordering = settings.ENFORCE_EVENT_ORDERING
        self.service_builder = service_builder
        self.calendar_id = calendar_id

    def _service(self, user_id: str):
        credentials = self.token_store.require_token(user_id)
        return self.service_builder(credentials)

    def _to_provider_event(self, descriptor: EventDescriptor) -> Dict[str, Any]:
        event = {
            "summary": descriptor.title,
            "start": to_provider_datetime(descriptor.start, self.tz_name),
            "end": to_provider_datetime(descriptor.end, self.tz_name),
            "attendees": [{"email": email} for email in descriptor.attendees],
        }
        if descriptor.description is not None:
            event["description"] = descriptor.description
        return event

    def create_event(self, data: Dict[str, Any], user_id: str = DEFAULT_USER_ID) -> Dict[str, Any]:
        """
        Create an event on the calendar.

        Args:
            data: Raw descriptor fields (title, start, end, description, attendees)
            user_id: Identity whose token set is used

        Returns:
            Envelope with event_id and html_link on success
        """
        service = self._service(user_id)

        validation = validate_event_descriptor(
            data, self.tz_name, enforce_ordering=self.enforce_ordering
        )
        if not validation.is_valid:
            return _failure(validation.error_message())

        descriptor = validation.descriptor
        event = self._to_provider_event(descriptor)
        logger.info(
            "Creating event '%s' from %s to %s",
            descriptor.title,
            event["start"]["dateTime"],
            event["end"]["dateTime"],
        )

        try:
            created = service.events().insert(
                calendarId=self.calendar_id,
                body=event,
            ).execute()
        except Exception as e:
            logger.error(f"Error creating event: {str(e)}")
            return _failure(e)

        return {
            "success": True,
            "event_id": created.get("id"),
            "html_link": created.get("htmlLink"),
            "message": f'Event "{descriptor.title}" created successfully',
        }

    def list_events(
        self,
        max_count: Any = CALENDAR_SETTINGS.DEFAULT_MAX_RESULTS,
        user_id: str = DEFAULT_USER_ID,
    ) -> Dict[str, Any]:
        """
        List upcoming events, earliest first.

        Only events starting at or after the request time are returned, with
        recurring events expanded into single occurrences.
        """
        service = self._service(user_id)

        requested = max_count
        if isinstance(requested, float) and requested.is_integer():
            requested = int(requested)
        if isinstance(requested, bool) or not isinstance(requested, (int, str)):
            return _failure(f"Invalid max_count: {max_count}")
        try:
            max_count = int(requested)
        except ValueError:
            return _failure(f"Invalid max_count: {max_count}")
        if max_count < 1:
            return _failure(f"Invalid max_count: {max_count}")
        max_count = min(max_count, CALENDAR_SETTINGS.MAX_RESULTS_LIMIT)

        now = datetime.now(pytz.UTC)
        upcoming = []
        page_token = None
        while True:
            try:
                events_result = service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=now.isoformat().replace("+00:00", "Z"),
                    maxResults=max_count,
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                ).execute()
            except Exception as e:
                logger.error(f"Error fetching events: {str(e)}")
                return _failure(e)

            for item in events_result.get("items", []):
                start_text = read_provider_datetime(item.get("start"))
                start = parse_timestamp(start_text, self.tz_name)
                # timeMin filters on end time, so events already under way come back too
                if start is None or start < now:
                    continue
                upcoming.append((start, self._to_calendar_event(item)))

            page_token = events_result.get("nextPageToken")
            if len(upcoming) >= max_count or not page_token:
                break

        upcoming.sort(key=lambda pair: pair[0])
        events = [event.model_dump() for _start, event in upcoming[:max_count]]

        return {
            "success": True,
            "events": events,
            "message": f"Found {len(events)} upcoming events",
        }

    def _to_calendar_event(self, google_event: Dict[str, Any]) -> CalendarEvent:
        return CalendarEvent(
            id=google_event.get("id", ""),
            title=google_event.get("summary", "Untitled Event"),
            start=read_provider_datetime(google_event.get("start")),
            end=read_provider_datetime(google_event.get("end")),
            description=google_event.get("description"),
            link=google_event.get("htmlLink"),
        )

    def update_event(
        self,
        event_id: Optional[str],
        updates: Dict[str, Any],
        user_id: str = DEFAULT_USER_ID,
    ) -> Dict[str, Any]:
        """
        Overlay the supplied fields on an existing event and write it back.

        Only title, description, start and end are considered; fields that
        are absent or None leave the stored value untouched.
        """
        service = self._service(user_id)

        if not event_id:
            return _failure("Missing required field: event_id")

        supplied = {
            key: updates.get(key)
            for key in ("title", "description", "start", "end")
            if updates.get(key) is not None
        }
        validation = validate_event_descriptor(
            supplied, self.tz_name, partial=True, enforce_ordering=self.enforce_ordering
        )
        if not validation.is_valid:
            return _failure(validation.error_message())
        values = validation.values

        try:
            existing = service.events().get(
                calendarId=self.calendar_id,
                eventId=event_id,
            ).execute()

            updated_event = dict(existing)
            if "title" in values:
                updated_event["summary"] = values["title"]
            if "description" in values:
                updated_event["description"] = values["description"]
            if "start" in values:
                updated_event["start"] = to_provider_datetime(values["start"], self.tz_name)
            if "end" in values:
                updated_event["end"] = to_provider_datetime(values["end"], self.tz_name)

            if self.enforce_ordering and ("start" in values or "end" in values):
                merged_start = parse_timestamp(
                    read_provider_datetime(updated_event.get("start")), self.tz_name
                )
                merged_end = parse_timestamp(
                    read_provider_datetime(updated_event.get("end")), self.tz_name
                )
                if merged_start and merged_end and merged_end <= merged_start:
                    return _failure("End time must be after start time")

            response = service.events().update(
                calendarId=self.calendar_id,
                eventId=event_id,
                body=updated_event,
            ).execute()
        except Exception as e:
            logger.error(f"Error updating event {event_id}: {str(e)}")
            return _failure(e)

        return {
            "success": True,
            "event_id": response.get("id", event_id),
            "html_link": response.get("htmlLink"),
            "message": "Event updated successfully",
        }

    def delete_event(self, event_id: Optional[str], user_id: str = DEFAULT_USER_ID) -> Dict[str, Any]:
        service = self._service(user_id)

        if not event_id:
            return _failure("Missing required field: event_id")

        try:
            service.events().delete(
                calendarId=self.calendar_id,
                eventId=event_id,
            ).execute()
        except Exception as e:
            logger.error(f"Error deleting event {event_id}: {str(e)}")
            return _failure(e)

        return {
            "success": True,
            "event_id": event_id,
            "message": "Event deleted successfully",
        }

    def confirm_event(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Build a preview of the event that create_event would make.

        Makes no provider call and needs no token set; identical input
        always yields an identical preview.
        """
        validation = validate_event_descriptor(
            data, self.tz_name, enforce_ordering=self.enforce_ordering
        )
        if not validation.is_valid:
            return _failure(validation.error_message())

        descriptor = validation.descriptor
        attendees = ", ".join(descriptor.attendees) if descriptor.attendees else "No attendees"

        return {
            "success": True,
            "preview": {
                "title": descriptor.title,
                "time_range": format_time_range(descriptor.start, descriptor.end, self.tz_name),
                "duration_minutes": duration_minutes(descriptor.start, descriptor.end),
                "description": descriptor.description or "",
                "attendees": attendees,
            },
            "confirmation_prompt": CONFIRMATION_PROMPT,
        }
