"""
Dispatch Data Transfer Objects (DTOs)

This module contains the data models passed between the interpreter,
the dispatcher and the chat surfaces:
- ToolCall: a named calendar operation and its raw parameters
- Interpretation: what the language service made of a free-text request
- WorkflowResult: terminal outcome of handling one request
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ToolCall:
    """A calendar tool invocation, supplied directly or inferred from text."""
    tool_name: str
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Interpretation:
    """Either a tool invocation or a clarifying question, never both."""
    tool_call: Optional[ToolCall] = None
    message: Optional[str] = None

    @property
    def is_tool_call(self) -> bool:
        return self.tool_call is not None


@dataclass
class WorkflowResult:
    """
    Outcome of one request.

    kind is "tool" (result holds the envelope), "clarification" (message
    holds the question) or "error" (error holds the message).
    """
    kind: str
    success: bool
    tool_name: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    error: Optional[str] = None
    processing_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "kind": self.kind}
        if self.tool_name:
            payload["tool_name"] = self.tool_name
        if self.result is not None:
            payload["result"] = {k: v for k, v in self.result.items() if k != "unauthorized"}
        if self.message is not None:
            payload["message"] = self.message
        if self.error is not None:
            payload["error"] = self.error
        return payload
