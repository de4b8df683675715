"""Shared test fixtures for the calendar agent tests.

Fakes stand in for every external collaborator:
- FakeCalendarService mimics the googleapiclient events() resource
- FakeChatModel mimics a LangChain chat model with bind_tools/ainvoke
"""

import asyncio
import itertools
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from calhook.agents.calendaragent.calendar_client import GoogleCalendarClient
from calhook.auth.session import TokenStore
from calhook.config import Settings
from calhook.dispatch.dispatcher import ToolDispatcher
from calhook.dispatch.interpreter import IntentInterpreter
from calhook.dispatch.workflow import CalendarWorkflow
from calhook.main import create_app


# ─────────────────────────────────────────────────────────────────────────────
# Google Calendar fake
# ─────────────────────────────────────────────────────────────────────────────


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _when(date_dict: dict) -> datetime:
    if "dateTime" in date_dict:
        return _parse(date_dict["dateTime"])
    return _parse(date_dict["date"] + "T00:00:00Z")


def _raise(error):
    raise error


class FakeRequest:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeEventsResource:
    def __init__(self, service: "FakeCalendarService"):
        self.service = service

    def _call(self, name: str, fn, **kwargs):
        self.service.calls.append((name, kwargs))
        if self.service.fail_with is not None:
            return FakeRequest(lambda: _raise(self.service.fail_with))
        return FakeRequest(fn)

    def insert(self, calendarId, body):
        return self._call("insert", lambda: self.service._insert(body), calendarId=calendarId, body=body)

    def list(self, **kwargs):
        return self._call("list", lambda: self.service._list(**kwargs), **kwargs)

    def get(self, calendarId, eventId):
        return self._call("get", lambda: self.service._get(eventId), calendarId=calendarId, eventId=eventId)

    def update(self, calendarId, eventId, body):
        return self._call(
            "update",
            lambda: self.service._update(eventId, body),
            calendarId=calendarId,
            eventId=eventId,
            body=body,
        )

    def delete(self, calendarId, eventId):
        return self._call("delete", lambda: self.service._delete(eventId), calendarId=calendarId, eventId=eventId)


class FakeCalendarService:
    """In-memory stand-in for the Calendar v3 service object."""

    def __init__(self):
        self.events_by_id: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self._ids = itertools.count(1)

    def events(self):
        return FakeEventsResource(self)

    def call_names(self) -> List[str]:
        return [name for name, _kwargs in self.calls]

    def add_event(self, summary: str, start: str, end: str, description: Optional[str] = None) -> str:
        event_id = f"evt{next(self._ids)}"
        event = {
            "id": event_id,
            "summary": summary,
            "start": {"dateTime": start},
            "end": {"dateTime": end},
            "htmlLink": f"https://calendar.google.com/event?eid={event_id}",
        }
        if description is not None:
            event["description"] = description
        self.events_by_id[event_id] = event
        return event_id

    def _insert(self, body):
        event_id = f"evt{next(self._ids)}"
        event = dict(body, id=event_id, htmlLink=f"https://calendar.google.com/event?eid={event_id}")
        self.events_by_id[event_id] = event
        return event

    def _list(self, timeMin, maxResults, pageToken=None, **_kwargs):
        time_min = _parse(timeMin)
        # Google filters on end time, not start time
        items = [
            event for event in self.events_by_id.values()
            if _when(event["end"]) > time_min
        ]
        items.sort(key=lambda event: _when(event["start"]))
        offset = int(pageToken or 0)
        page = {"items": items[offset:offset + maxResults]}
        if offset + maxResults < len(items):
            page["nextPageToken"] = str(offset + maxResults)
        return page

    def _get(self, event_id):
        if event_id not in self.events_by_id:
            raise LookupError("Not Found")
        return dict(self.events_by_id[event_id])

    def _update(self, event_id, body):
        if event_id not in self.events_by_id:
            raise LookupError("Not Found")
        self.events_by_id[event_id] = dict(body)
        return dict(body)

    def _delete(self, event_id):
        if event_id not in self.events_by_id:
            raise LookupError("Not Found")
        del self.events_by_id[event_id]
        return ""


# ─────────────────────────────────────────────────────────────────────────────
# Chat model fake
# ─────────────────────────────────────────────────────────────────────────────


class FakeChatModel:
    """Returns a canned AIMessage, optionally after a delay."""

    def __init__(self, response: Optional[AIMessage] = None, delay: float = 0.0, error: Optional[Exception] = None):
        self.response = response or AIMessage(content="What should the event be called?")
        self.delay = delay
        self.error = error
        self.bound_tools: Optional[list] = None
        self.received: List[list] = []
        self.completed = False

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    async def ainvoke(self, messages):
        self.received.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.completed = True
        return self.response


def tool_call_message(name: str, args: Dict[str, Any]) -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": "call_1"}])


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


def make_settings(**overrides) -> Settings:
    values = {
        "APP_ENV": "test",
        "GOOGLE_CLIENT_ID": "client-id.apps.googleusercontent.com",
        "GOOGLE_CLIENT_SECRET": "client-secret",
        "GOOGLE_REDIRECT_URI": "http://localhost:3000/callback",
        "CALENDAR_TIMEZONE": "America/Los_Angeles",
        "ENFORCE_EVENT_ORDERING": True,
        "LLM_API_KEY": "",
        "LLM_TIMEOUT_SECONDS": 25.0,
        "SLACK_BOT_TOKEN": "",
        "SLACK_SIGNING_SECRET": "",
        "SLACK_REPLY_DELAY_SECONDS": 0.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_service() -> FakeCalendarService:
    return FakeCalendarService()


@pytest.fixture
def token_store() -> TokenStore:
    store = TokenStore()
    store.set_token("fake-credentials")
    return store


@pytest.fixture
def calendar_client(token_store, settings, fake_service) -> GoogleCalendarClient:
    return GoogleCalendarClient(token_store, settings, service_builder=lambda credentials: fake_service)


@pytest.fixture
def dispatcher(calendar_client) -> ToolDispatcher:
    return ToolDispatcher(calendar_client)


@pytest.fixture
def chat_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def workflow(dispatcher, settings, chat_model) -> CalendarWorkflow:
    return CalendarWorkflow(dispatcher, IntentInterpreter(settings, chat_model=chat_model))


@pytest.fixture
def app(settings, fake_service):
    """App with no chat model and no Slack; tests opt into those explicitly."""
    return create_app(settings, service_builder=lambda credentials: fake_service)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def authed_client(app) -> TestClient:
    app.state.token_store.set_token("fake-credentials")
    return TestClient(app)
