"""
Prompts and tool catalog for the intent interpreter

All text sent to the language service lives here.
"""

from calhook.constants import TOOL_NAMES

INTERPRETER_SYSTEM_PROMPT = """You are a calendar assistant that turns requests into calendar tool calls.

The current date and time is {now} ({timezone}).

Guidelines:
- Call exactly one tool when the request is clear enough to act on
- Resolve relative dates ("tomorrow at 3pm", "next Monday") against the current date and time
- Send times as ISO-8601 without an offset (e.g. "2024-12-15T14:00:00"); they are read in {timezone}
- When an event has no stated end, assume it lasts one hour
- Before creating an event with attendees, call confirm_calendar_event first
- Updates and deletions need an event id; list events first if the user did not give one
- If information is missing or ambiguous, do not call a tool: reply with one short clarifying question"""


def _function(name: str, description: str, properties: dict, required: list) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


_EVENT_PROPERTIES = {
    "title": {"type": "string", "description": "Event title"},
    "start_time": {"type": "string", "description": "Start time, ISO-8601"},
    "end_time": {"type": "string", "description": "End time, ISO-8601"},
    "description": {"type": "string", "description": "Optional event description"},
    "attendees": {
        "type": "array",
        "items": {"type": "string"},
        "description": "Optional attendee email addresses",
    },
}

TOOL_CATALOG = [
    _function(
        TOOL_NAMES.CREATE_EVENT,
        "Create a new event on the user's calendar.",
        _EVENT_PROPERTIES,
        ["title", "start_time", "end_time"],
    ),
    _function(
        TOOL_NAMES.LIST_EVENTS,
        "List the user's upcoming events, earliest first.",
        {
            "max_results": {
                "type": "integer",
                "description": "Maximum number of events to return (default 10)",
            },
        },
        [],
    ),
    _function(
        TOOL_NAMES.UPDATE_EVENT,
        "Change the title, description, start or end of an existing event.",
        {
            "event_id": {"type": "string", "description": "Id of the event to update"},
            "title": _EVENT_PROPERTIES["title"],
            "start_time": _EVENT_PROPERTIES["start_time"],
            "end_time": _EVENT_PROPERTIES["end_time"],
            "description": _EVENT_PROPERTIES["description"],
        },
        ["event_id"],
    ),
    _function(
        TOOL_NAMES.DELETE_EVENT,
        "Delete an event from the user's calendar.",
        {"event_id": {"type": "string", "description": "Id of the event to delete"}},
        ["event_id"],
    ),
    _function(
        TOOL_NAMES.CONFIRM_EVENT,
        "Preview an event before creating it, so the user can confirm the details.",
        _EVENT_PROPERTIES,
        ["title", "start_time", "end_time"],
    ),
]

CLARIFICATION_FALLBACK = (
    "I couldn't tell what you'd like to do with your calendar. "
    "Could you rephrase, for example \"schedule a meeting tomorrow at 3pm\"?"
)
