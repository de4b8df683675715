"""Tests for calhook/agents/calendaragent/calendar_client.py

Covers the five calendar operations against the in-memory service fake:
- create_event: validation, provider payload, envelope
- list_events: upcoming-only, ordering, max_count cap
- update_event: partial overlay
- delete_event
- confirm_event: preview without any provider call
"""

from datetime import datetime, timedelta, timezone

import pytest

from calhook.agents.calendaragent.calendar_client import GoogleCalendarClient
from calhook.auth.session import TokenStore
from calhook.constants import CONFIRMATION_PROMPT
from calhook.errors import NotAuthenticatedError

from conftest import make_settings


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# ─────────────────────────────────────────────────────────────────────────────
# create_event
# ─────────────────────────────────────────────────────────────────────────────


class TestCreateEvent:
    def test_well_formed_descriptor_creates_event(self, calendar_client, fake_service):
        result = calendar_client.create_event({
            "title": "Team Sync",
            "start": "2030-12-15T14:00:00",
            "end": "2030-12-15T15:00:00",
            "description": "Weekly sync",
            "attendees": ["ana@example.com"],
        })

        assert result["success"] is True
        assert result["event_id"]
        assert result["html_link"].startswith("https://calendar.google.com/")
        assert result["message"] == 'Event "Team Sync" created successfully'

        name, kwargs = fake_service.calls[-1]
        assert name == "insert"
        assert kwargs["calendarId"] == "primary"
        body = kwargs["body"]
        assert body["summary"] == "Team Sync"
        assert body["description"] == "Weekly sync"
        assert body["attendees"] == [{"email": "ana@example.com"}]
        # Naive input is read in the calendar timezone (PST is UTC-8 in December)
        assert body["start"] == {"dateTime": "2030-12-15T22:00:00Z", "timeZone": "America/Los_Angeles"}
        assert body["end"]["dateTime"] == "2030-12-15T23:00:00Z"

    def test_offset_timestamps_are_respected(self, calendar_client, fake_service):
        result = calendar_client.create_event({
            "title": "Standup",
            "start": "2030-06-01T09:00:00Z",
            "end": "2030-06-01T09:15:00+00:00",
        })

        assert result["success"] is True
        body = fake_service.calls[-1][1]["body"]
        assert body["start"]["dateTime"] == "2030-06-01T09:00:00Z"
        assert body["end"]["dateTime"] == "2030-06-01T09:15:00Z"

    def test_invalid_start_names_the_field(self, calendar_client, fake_service):
        result = calendar_client.create_event({
            "title": "Broken",
            "start": "next tuesday-ish",
            "end": "2030-12-15T15:00:00",
        })

        assert result == {"success": False, "error": "Invalid start time: next tuesday-ish"}
        assert fake_service.calls == []

    def test_invalid_end_names_the_field(self, calendar_client):
        result = calendar_client.create_event({
            "title": "Broken",
            "start": "2030-12-15T14:00:00",
            "end": "not a time",
        })

        assert result["success"] is False
        assert "Invalid end time: not a time" in result["error"]

    def test_inverted_range_is_rejected_by_default(self, calendar_client, fake_service):
        result = calendar_client.create_event({
            "title": "Backwards",
            "start": "2030-12-15T15:00:00",
            "end": "2030-12-15T14:00:00",
        })

        assert result["success"] is False
        assert result["error"] == "End time must be after start time"
        assert fake_service.calls == []

    def test_inverted_range_passes_through_when_ordering_not_enforced(self, token_store, fake_service):
        client = GoogleCalendarClient(
            token_store,
            make_settings(ENFORCE_EVENT_ORDERING=False),
            service_builder=lambda credentials: fake_service,
        )

        result = client.create_event({
            "title": "Backwards",
            "start": "2030-12-15T15:00:00",
            "end": "2030-12-15T14:00:00",
        })

        assert result["success"] is True

    def test_provider_error_is_passed_through(self, calendar_client, fake_service):
        fake_service.fail_with = RuntimeError("Rate Limit Exceeded")

        result = calendar_client.create_event({
            "title": "Team Sync",
            "start": "2030-12-15T14:00:00",
            "end": "2030-12-15T15:00:00",
        })

        assert result == {"success": False, "error": "Rate Limit Exceeded"}

    def test_without_token_fails_before_any_provider_call(self, settings, fake_service):
        built = []
        client = GoogleCalendarClient(
            TokenStore(),
            settings,
            service_builder=lambda credentials: built.append(credentials) or fake_service,
        )

        with pytest.raises(NotAuthenticatedError):
            client.create_event({
                "title": "Team Sync",
                "start": "2030-12-15T14:00:00",
                "end": "2030-12-15T15:00:00",
            })

        assert built == []
        assert fake_service.calls == []


# ─────────────────────────────────────────────────────────────────────────────
# list_events
# ─────────────────────────────────────────────────────────────────────────────


class TestListEvents:
    def test_returns_upcoming_events_in_start_order(self, calendar_client, fake_service):
        now = datetime.now(timezone.utc)
        later = fake_service.add_event("Later", _iso(now + timedelta(days=2)), _iso(now + timedelta(days=2, hours=1)))
        sooner = fake_service.add_event(
            "Sooner", _iso(now + timedelta(hours=3)), _iso(now + timedelta(hours=4)), description="prep"
        )

        result = calendar_client.list_events(10)

        assert result["success"] is True
        assert [event["id"] for event in result["events"]] == [sooner, later]
        assert result["events"][0] == {
            "id": sooner,
            "title": "Sooner",
            "start": _iso(now + timedelta(hours=3)),
            "end": _iso(now + timedelta(hours=4)),
            "description": "prep",
            "link": f"https://calendar.google.com/event?eid={sooner}",
        }
        assert result["message"] == "Found 2 upcoming events"

        _name, kwargs = fake_service.calls[-1]
        assert kwargs["singleEvents"] is True
        assert kwargs["orderBy"] == "startTime"
        assert kwargs["maxResults"] == 10

    def test_events_already_under_way_are_excluded(self, calendar_client, fake_service):
        now = datetime.now(timezone.utc)
        fake_service.add_event("Ongoing", _iso(now - timedelta(minutes=30)), _iso(now + timedelta(minutes=30)))
        upcoming = fake_service.add_event("Upcoming", _iso(now + timedelta(hours=1)), _iso(now + timedelta(hours=2)))

        result = calendar_client.list_events(10)

        assert [event["id"] for event in result["events"]] == [upcoming]

    def test_ongoing_events_do_not_use_up_max_count(self, calendar_client, fake_service):
        now = datetime.now(timezone.utc)
        fake_service.add_event("Ongoing", _iso(now - timedelta(hours=1)), _iso(now + timedelta(hours=1)))
        tomorrow = fake_service.add_event("Tomorrow", _iso(now + timedelta(days=1)), _iso(now + timedelta(days=1, hours=1)))

        result = calendar_client.list_events(1)

        assert [event["id"] for event in result["events"]] == [tomorrow]
        assert result["message"] == "Found 1 upcoming events"
        assert fake_service.calls[-1][1]["pageToken"] == "1"

    def test_never_returns_more_than_max_count(self, calendar_client, fake_service):
        now = datetime.now(timezone.utc)
        for offset in range(5):
            fake_service.add_event(
                f"Event {offset}",
                _iso(now + timedelta(days=offset + 1)),
                _iso(now + timedelta(days=offset + 1, hours=1)),
            )

        result = calendar_client.list_events(3)

        assert len(result["events"]) == 3
        starts = [event["start"] for event in result["events"]]
        assert starts == sorted(starts)

    def test_all_day_events_fall_back_to_date(self, calendar_client, fake_service):
        fake_service.events_by_id["allday"] = {
            "id": "allday",
            "summary": "Offsite",
            "start": {"date": "2099-01-10"},
            "end": {"date": "2099-01-11"},
        }

        result = calendar_client.list_events(5)

        assert result["events"][0]["start"] == "2099-01-10"
        assert result["events"][0]["title"] == "Offsite"

    @pytest.mark.parametrize("max_count", [0, -2, "many", None, True])
    def test_invalid_max_count_is_reported(self, calendar_client, fake_service, max_count):
        result = calendar_client.list_events(max_count)

        assert result["success"] is False
        assert "Invalid max_count" in result["error"]
        assert fake_service.calls == []

    def test_max_count_is_capped_at_provider_limit(self, calendar_client, fake_service):
        calendar_client.list_events(10_000)

        assert fake_service.calls[-1][1]["maxResults"] == 2500


# ─────────────────────────────────────────────────────────────────────────────
# update_event / delete_event
# ─────────────────────────────────────────────────────────────────────────────


class TestUpdateEvent:
    def test_title_only_update_keeps_other_fields(self, calendar_client, fake_service):
        event_id = fake_service.add_event(
            "Old Title", "2030-03-01T17:00:00Z", "2030-03-01T18:00:00Z", description="Agenda"
        )

        result = calendar_client.update_event(event_id, {"title": "New Title"})

        assert result["success"] is True
        assert result["event_id"] == event_id
        stored = fake_service.events_by_id[event_id]
        assert stored["summary"] == "New Title"
        assert stored["start"] == {"dateTime": "2030-03-01T17:00:00Z"}
        assert stored["end"] == {"dateTime": "2030-03-01T18:00:00Z"}
        assert stored["description"] == "Agenda"
        assert fake_service.call_names() == ["get", "update"]

    def test_none_values_are_not_applied(self, calendar_client, fake_service):
        event_id = fake_service.add_event("Keep", "2030-03-01T17:00:00Z", "2030-03-01T18:00:00Z", description="x")

        calendar_client.update_event(event_id, {"title": None, "description": None, "start": None, "end": None})

        stored = fake_service.events_by_id[event_id]
        assert stored["summary"] == "Keep"
        assert stored["description"] == "x"

    def test_rescheduling_sets_both_times(self, calendar_client, fake_service):
        event_id = fake_service.add_event("Move me", "2030-03-01T17:00:00Z", "2030-03-01T18:00:00Z")

        result = calendar_client.update_event(
            event_id, {"start": "2030-03-02T17:00:00Z", "end": "2030-03-02T18:30:00Z"}
        )

        assert result["success"] is True
        stored = fake_service.events_by_id[event_id]
        assert stored["start"]["dateTime"] == "2030-03-02T17:00:00Z"
        assert stored["end"]["dateTime"] == "2030-03-02T18:30:00Z"

    def test_moving_start_past_stored_end_is_rejected(self, calendar_client, fake_service):
        event_id = fake_service.add_event("Move me", "2030-03-01T17:00:00Z", "2030-03-01T18:00:00Z")

        result = calendar_client.update_event(event_id, {"start": "2030-03-01T19:00:00Z"})

        assert result == {"success": False, "error": "End time must be after start time"}
        assert "update" not in fake_service.call_names()

    def test_invalid_timestamp_is_reported(self, calendar_client, fake_service):
        event_id = fake_service.add_event("Move me", "2030-03-01T17:00:00Z", "2030-03-01T18:00:00Z")

        result = calendar_client.update_event(event_id, {"end": "soonish"})

        assert result == {"success": False, "error": "Invalid end time: soonish"}

    def test_missing_event_id(self, calendar_client):
        result = calendar_client.update_event(None, {"title": "x"})

        assert result == {"success": False, "error": "Missing required field: event_id"}

    def test_unknown_event_passes_provider_error_through(self, calendar_client):
        result = calendar_client.update_event("nope", {"title": "x"})

        assert result == {"success": False, "error": "Not Found"}


class TestDeleteEvent:
    def test_deletes_event(self, calendar_client, fake_service):
        event_id = fake_service.add_event("Bye", "2030-03-01T17:00:00Z", "2030-03-01T18:00:00Z")

        result = calendar_client.delete_event(event_id)

        assert result == {"success": True, "event_id": event_id, "message": "Event deleted successfully"}
        assert event_id not in fake_service.events_by_id

    def test_missing_event_id(self, calendar_client, fake_service):
        result = calendar_client.delete_event("")

        assert result["success"] is False
        assert fake_service.calls == []


# ─────────────────────────────────────────────────────────────────────────────
# confirm_event
# ─────────────────────────────────────────────────────────────────────────────


class TestConfirmEvent:
    DESCRIPTOR = {
        "title": "Design Review",
        "start": "2030-12-15T14:00:00",
        "end": "2030-12-15T15:30:00",
        "description": "Walk through the mockups",
        "attendees": ["ana@example.com", "bo@example.com"],
    }

    def test_preview_contents(self, calendar_client):
        result = calendar_client.confirm_event(self.DESCRIPTOR)

        assert result["success"] is True
        preview = result["preview"]
        assert preview["title"] == "Design Review"
        assert preview["duration_minutes"] == 90
        assert preview["time_range"] == "Sun, Dec 15, 2030, 2:00 PM - 3:30 PM PST"
        assert preview["attendees"] == "ana@example.com, bo@example.com"
        assert preview["description"] == "Walk through the mockups"
        assert result["confirmation_prompt"] == CONFIRMATION_PROMPT

    def test_no_attendees_placeholder(self, calendar_client):
        descriptor = dict(self.DESCRIPTOR, attendees=[])

        result = calendar_client.confirm_event(descriptor)

        assert result["preview"]["attendees"] == "No attendees"

    def test_is_idempotent_and_makes_no_provider_call(self, settings, fake_service):
        # No token at all: confirm must still work
        client = GoogleCalendarClient(TokenStore(), settings, service_builder=lambda credentials: fake_service)

        first = client.confirm_event(self.DESCRIPTOR)
        second = client.confirm_event(self.DESCRIPTOR)

        assert first == second
        assert fake_service.calls == []

    def test_duration_rounds_half_up(self, calendar_client):
        descriptor = dict(self.DESCRIPTOR, start="2030-12-15T14:00:00Z", end="2030-12-15T14:00:30Z")

        result = calendar_client.confirm_event(descriptor)

        assert result["preview"]["duration_minutes"] == 1

    def test_invalid_descriptor_is_reported(self, calendar_client):
        result = calendar_client.confirm_event(dict(self.DESCRIPTOR, start="whenever"))

        assert result == {"success": False, "error": "Invalid start time: whenever"}
