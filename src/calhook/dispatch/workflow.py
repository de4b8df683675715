"""
Request workflow

Composes interpretation and dispatch for one inbound request. Every request
is independent; the only shared state is the token store behind the
calendar client.
"""

import logging
import time

from calhook.constants import DEFAULT_USER_ID
from calhook.dispatch.dispatcher import ToolDispatcher
from calhook.dispatch.dto import WorkflowResult
from calhook.dispatch.interpreter import IntentInterpreter
from calhook.errors import CalhookError

logger = logging.getLogger(__name__)


class CalendarWorkflow:
    """Natural-language and structured entry points over the tool dispatcher."""

    def __init__(self, dispatcher: ToolDispatcher, interpreter: IntentInterpreter):
        self.dispatcher = dispatcher
        self.interpreter = interpreter

    async def run_tool(self, tool_name, parameters, user_id: str = DEFAULT_USER_ID) -> WorkflowResult:
        start_time = time.time()
        envelope = await self.dispatcher.dispatch(tool_name, parameters, user_id=user_id)
        return WorkflowResult(
            kind="tool",
            success=bool(envelope.get("success")),
            tool_name=tool_name,
            result=envelope,
            processing_time=time.time() - start_time,
        )

    async def process_message(self, text: str, user_id: str = DEFAULT_USER_ID) -> WorkflowResult:
        """Interpret free text, then run the tool it maps to."""
        start_time = time.time()

        try:
            interpretation = await self.interpreter.interpret(text)
        except CalhookError as e:
            return WorkflowResult(
                kind="error",
                success=False,
                error=str(e),
                processing_time=time.time() - start_time,
            )
        except Exception as e:
            logger.error("Language service call failed in %.3f seconds: %s", time.time() - start_time, str(e))
            return WorkflowResult(
                kind="error",
                success=False,
                error=str(e),
                processing_time=time.time() - start_time,
            )

        if not interpretation.is_tool_call:
            return WorkflowResult(
                kind="clarification",
                success=True,
                message=interpretation.message,
                processing_time=time.time() - start_time,
            )

        tool_call = interpretation.tool_call
        logger.info("Interpreted request as %s", tool_call.tool_name)
        result = await self.run_tool(tool_call.tool_name, tool_call.parameters, user_id=user_id)
        result.processing_time = time.time() - start_time
        return result
