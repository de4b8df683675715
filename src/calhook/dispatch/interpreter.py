"""
Intent interpreter

Sends free text and the tool catalog to a chat model and reads back either a
tool invocation or a clarifying question.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

import pytz
from langchain.chat_models import init_chat_model
from langchain_core.messages import HumanMessage, SystemMessage

from calhook.config import Settings
from calhook.dispatch.dto import Interpretation, ToolCall
from calhook.dispatch.prompts import (
    CLARIFICATION_FALLBACK,
    INTERPRETER_SYSTEM_PROMPT,
    TOOL_CATALOG,
)
from calhook.errors import InterpreterTimeoutError, NotConfiguredError

logger = logging.getLogger(__name__)


def _text_content(content: Any) -> str:
    """Chat models answer with a string or with a list of content blocks."""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts).strip()
    return ""


def _log_abandoned_call(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    if task.exception() is not None:
        logger.warning("Abandoned language service call failed: %s", task.exception())


class IntentInterpreter:
    """Natural-language front end for the calendar tools."""

    def __init__(self, settings: Settings, chat_model: Optional[Any] = None):
        """
        Args:
            settings: LLM provider, model, key, temperature and timeout
            chat_model: Pre-built LangChain chat model; built lazily from
                settings when omitted
        """
        self.settings = settings
        self.timeout_seconds = settings.LLM_TIMEOUT_SECONDS
        self._model = chat_model

    @property
    def is_configured(self) -> bool:
        return self._model is not None or self.settings.llm_configured

    @property
    def model_name(self) -> str:
        return f"{self.settings.LLM_PROVIDER}:{self.settings.LLM_MODEL}"

    def _bound_model(self):
        if self._model is None:
            self._model = init_chat_model(
                model=self.settings.LLM_MODEL,
                model_provider=self.settings.LLM_PROVIDER,
                api_key=self.settings.LLM_API_KEY,
                temperature=self.settings.LLM_TEMPERATURE,
            )
        return self._model.bind_tools(TOOL_CATALOG)

    def _messages(self, text: str) -> list:
        tz = pytz.timezone(self.settings.CALENDAR_TIMEZONE)
        now = datetime.now(tz).strftime("%A, %Y-%m-%d %H:%M")
        system_prompt = INTERPRETER_SYSTEM_PROMPT.format(
            now=now,
            timezone=self.settings.CALENDAR_TIMEZONE,
        )
        return [SystemMessage(content=system_prompt), HumanMessage(content=text)]

    async def interpret(self, text: str) -> Interpretation:
        """
        Interpret one free-text request.

        Raises:
            NotConfiguredError: no language service credentials
            InterpreterTimeoutError: no answer within LLM_TIMEOUT_SECONDS
        """
        if not self.is_configured:
            raise NotConfiguredError("Language service")

        model = self._bound_model()
        call = asyncio.ensure_future(model.ainvoke(self._messages(text)))

        try:
            # shield: a timeout abandons the call instead of cancelling it
            response = await asyncio.wait_for(asyncio.shield(call), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            call.add_done_callback(_log_abandoned_call)
            logger.error("Language service gave no answer within %.1f seconds", self.timeout_seconds)
            raise InterpreterTimeoutError(self.timeout_seconds)

        return self._parse_response(response)

    def _parse_response(self, response: Any) -> Interpretation:
        tool_calls = getattr(response, "tool_calls", None) or []
        if tool_calls:
            if len(tool_calls) > 1:
                logger.info("Model proposed %d tool calls, using the first", len(tool_calls))
            first = tool_calls[0]
            return Interpretation(
                tool_call=ToolCall(tool_name=first["name"], parameters=first.get("args") or {})
            )

        message = _text_content(getattr(response, "content", ""))
        return Interpretation(message=message or CLARIFICATION_FALLBACK)
