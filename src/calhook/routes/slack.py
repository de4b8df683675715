"""
Slack entry points

- /slack-webhook: slash commands; acknowledged at once, answered later on
  the response_url Slack provides
- /slack-events: Events API; URL verification handshake plus app mentions
  and direct messages, answered in-thread through the Web API
"""

from typing import Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from calhook.chat.formatting import (
    FAILURE_PREFIX,
    format_workflow_result,
    strip_leading_mentions,
)
from calhook.chat.notifier import ResponseUrlNotifier, SlackMessenger
from calhook.dependencies import (
    get_response_notifier,
    get_slack_messenger,
    get_workflow,
    verify_slack_request,
)
from calhook.dispatch.workflow import CalendarWorkflow

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter()

USAGE_TEXT = (
    "Tell me what to do with your calendar, for example:\n"
    "• schedule a team sync tomorrow at 10am for 30 minutes\n"
    "• what's coming up next?\n"
    "• move my dentist appointment to Friday at 4pm"
)

LLM_NOT_CONFIGURED = "Language service integration not configured"


async def answer_slash_command(
    workflow: CalendarWorkflow,
    notifier: ResponseUrlNotifier,
    text: str,
    response_url: str,
) -> None:
    """Background task: run the request, then post the answer to Slack."""
    try:
        result = await workflow.process_message(text)
        reply = format_workflow_result(result)
    except Exception as e:
        logger.exception("Slash command processing failed")
        reply = f"{FAILURE_PREFIX} {str(e)}"

    await notifier.deliver(response_url, reply)


async def answer_event(
    workflow: CalendarWorkflow,
    messenger: SlackMessenger,
    text: str,
    channel: str,
    thread_ts: Optional[str],
) -> None:
    """Background task: run the request, then reply in the originating thread."""
    if text:
        try:
            result = await workflow.process_message(text)
            reply = format_workflow_result(result)
        except Exception as e:
            logger.exception("Slack event processing failed")
            reply = f"{FAILURE_PREFIX} {str(e)}"
    else:
        reply = USAGE_TEXT

    await messenger.post_message(channel, reply, thread_ts=thread_ts)


@router.post("/slack-webhook")
async def slack_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    workflow: CalendarWorkflow = Depends(get_workflow),
    notifier: ResponseUrlNotifier = Depends(get_response_notifier),
):
    """
    Acknowledge a slash command immediately and answer it later.

    Slack expects an answer within three seconds, so the real work runs as a
    background task after the acknowledgment has been sent.
    """
    await verify_slack_request(request)
    form = await request.form()
    text = str(form.get("text") or "")
    response_url = str(form.get("response_url") or "")

    if not workflow.interpreter.is_configured:
        return {"response_type": "ephemeral", "text": f"{FAILURE_PREFIX} {LLM_NOT_CONFIGURED}"}

    text = text.strip()
    if not text:
        return {"response_type": "ephemeral", "text": USAGE_TEXT}

    if not response_url:
        # No deferred channel: answer inline
        result = await workflow.process_message(text)
        return {"response_type": "in_channel", "text": format_workflow_result(result)}

    logger.info("Slash command received, deferring reply")
    background_tasks.add_task(answer_slash_command, workflow, notifier, text, response_url)
    return {"response_type": "ephemeral", "text": f"⏳ Working on it: {text}"}


@router.post("/slack-events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    workflow: CalendarWorkflow = Depends(get_workflow),
    messenger: Optional[SlackMessenger] = Depends(get_slack_messenger),
):
    """Slack Events API endpoint."""
    await verify_slack_request(request)
    payload = await request.json()

    if payload.get("type") == "url_verification":
        return {"challenge": payload.get("challenge")}

    # Slack redelivers events it thinks timed out; the first delivery is already being handled
    if request.headers.get("x-slack-retry-num"):
        logger.info("Ignoring Slack retry %s", request.headers.get("x-slack-retry-num"))
        return {"ok": True}

    if messenger is None:
        return {"ok": False, "error": "Slack integration not configured"}
    if not workflow.interpreter.is_configured:
        return {"ok": False, "error": LLM_NOT_CONFIGURED}

    if payload.get("type") != "event_callback":
        return {"ok": True}

    event = payload.get("event") or {}
    if event.get("bot_id") or event.get("subtype"):
        return {"ok": True}

    is_mention = event.get("type") == "app_mention"
    is_direct_message = event.get("type") == "message" and event.get("channel_type") == "im"
    if not (is_mention or is_direct_message):
        return {"ok": True}

    text = strip_leading_mentions(event.get("text", ""))
    thread_ts = event.get("thread_ts") or event.get("ts")
    background_tasks.add_task(answer_event, workflow, messenger, text, event.get("channel"), thread_ts)
    return {"ok": True}
