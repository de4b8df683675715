"""
Tool dispatcher

Maps a tool name onto the matching calendar client operation, renaming the
snake_case fields used by callers and the language service to the
arguments the client expects.
"""

import logging
from typing import Any, Callable, Dict, List

from starlette.concurrency import run_in_threadpool

from calhook.agents.calendaragent.calendar_client import GoogleCalendarClient
from calhook.constants import CALENDAR_SETTINGS, DEFAULT_USER_ID, TOOL_NAMES
from calhook.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)


def _descriptor_fields(params: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": params.get("title"),
        "start": params.get("start_time"),
        "end": params.get("end_time"),
        "description": params.get("description"),
        "attendees": params.get("attendees") or [],
    }


class ToolDispatcher:
    """Fixed table of the five calendar tools."""

    def __init__(self, calendar_client: GoogleCalendarClient):
        self.calendar_client = calendar_client
        self._handlers: Dict[str, Callable[[Dict[str, Any], str], Dict[str, Any]]] = {
            TOOL_NAMES.CREATE_EVENT: self._handle_create,
            TOOL_NAMES.LIST_EVENTS: self._handle_list,
            TOOL_NAMES.UPDATE_EVENT: self._handle_update,
            TOOL_NAMES.DELETE_EVENT: self._handle_delete,
            TOOL_NAMES.CONFIRM_EVENT: self._handle_confirm,
        }

    @property
    def tool_names(self) -> List[str]:
        return list(self._handlers)

    async def dispatch(
        self,
        tool_name: Any,
        parameters: Any = None,
        user_id: str = DEFAULT_USER_ID,
    ) -> Dict[str, Any]:
        """
        Run one tool call and return its envelope. Never raises.

        Unauthorized envelopes carry "unauthorized": True so HTTP routes can
        answer with a 401.
        """
        handler = self._handlers.get(tool_name) if isinstance(tool_name, str) else None
        if handler is None:
            return {"success": False, "error": f"Unknown tool: {tool_name}"}

        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            return {"success": False, "error": "Parameters must be an object"}

        try:
            # The Google client is blocking, keep it off the event loop
            return await run_in_threadpool(handler, parameters, user_id)
        except NotAuthenticatedError as e:
            logger.warning("Rejected %s: no token set for user '%s'", tool_name, e.user_id)
            return {"success": False, "error": str(e), "unauthorized": True}
        except Exception as e:
            logger.exception("Tool %s failed", tool_name)
            return {"success": False, "error": str(e)}

    # Tool handlers

    def _handle_create(self, params: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        return self.calendar_client.create_event(_descriptor_fields(params), user_id=user_id)

    def _handle_list(self, params: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        max_results = params.get("max_results")
        if max_results is None:
            max_results = CALENDAR_SETTINGS.DEFAULT_MAX_RESULTS
        return self.calendar_client.list_events(max_results, user_id=user_id)

    def _handle_update(self, params: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        # Chat models send "" for optional arguments they leave out
        updates = {
            "title": params.get("title") or None,
            "start": params.get("start_time") or None,
            "end": params.get("end_time") or None,
            "description": params.get("description") or None,
        }
        return self.calendar_client.update_event(params.get("event_id"), updates, user_id=user_id)

    def _handle_delete(self, params: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        return self.calendar_client.delete_event(params.get("event_id"), user_id=user_id)

    def _handle_confirm(self, params: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        return self.calendar_client.confirm_event(_descriptor_fields(params))
