"""
Chat reply formatting

Turns workflow results into human-readable Slack text: a success or failure
indicator followed by a per-tool body.
"""

import re
from typing import Any, Dict

from calhook.constants import TOOL_NAMES
from calhook.dispatch.dto import WorkflowResult

SUCCESS_PREFIX = "✅"
FAILURE_PREFIX = "❌"


def _format_created(envelope: Dict[str, Any]) -> str:
    text = f"{SUCCESS_PREFIX} {envelope.get('message', 'Event created')}"
    if envelope.get("html_link"):
        text += f"\n{envelope['html_link']}"
    return text


def _format_listed(envelope: Dict[str, Any]) -> str:
    events = envelope.get("events") or []
    if not events:
        return f"{SUCCESS_PREFIX} No upcoming events found"

    lines = [f"{SUCCESS_PREFIX} {envelope.get('message', f'Found {len(events)} upcoming events')}:"]
    for event in events:
        lines.append(f"• {event.get('title')} ({event.get('start')} to {event.get('end')}) id: {event.get('id')}")
    return "\n".join(lines)


def _format_confirmation(envelope: Dict[str, Any]) -> str:
    preview = envelope.get("preview") or {}
    lines = [
        f"{SUCCESS_PREFIX} Here is the event I'm about to create:",
        f"*{preview.get('title')}*",
        f"When: {preview.get('time_range')} ({preview.get('duration_minutes')} minutes)",
        f"Attendees: {preview.get('attendees')}",
    ]
    if preview.get("description"):
        lines.append(f"Description: {preview['description']}")
    lines.append(envelope.get("confirmation_prompt", ""))
    return "\n".join(line for line in lines if line)


def format_for_chat(tool_name: str, envelope: Dict[str, Any]) -> str:
    """Render one tool envelope as chat text."""
    if not envelope.get("success"):
        return f"{FAILURE_PREFIX} {envelope.get('error', 'Something went wrong')}"

    if tool_name == TOOL_NAMES.CREATE_EVENT:
        return _format_created(envelope)
    if tool_name == TOOL_NAMES.LIST_EVENTS:
        return _format_listed(envelope)
    if tool_name == TOOL_NAMES.CONFIRM_EVENT:
        return _format_confirmation(envelope)
    return f"{SUCCESS_PREFIX} {envelope.get('message', 'Done')}"


def format_workflow_result(result: WorkflowResult) -> str:
    """Clarifying questions are echoed verbatim; everything else gets an indicator."""
    if result.kind == "clarification":
        return result.message or ""
    if result.kind == "error":
        return f"{FAILURE_PREFIX} {result.error}"
    return format_for_chat(result.tool_name, result.result or {})


_LEADING_MENTIONS = re.compile(r"^(?:\s*<@[A-Z0-9]+(?:\|[^>]*)?>)+\s*")


def strip_leading_mentions(text: str) -> str:
    """'<@U0123ABC> list my events' -> 'list my events'"""
    return _LEADING_MENTIONS.sub("", text or "").strip()
