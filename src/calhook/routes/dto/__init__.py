"""
Routes Data Transfer Objects (DTOs)

This module contains the Pydantic models used by API routes:
- Request model for the direct webhook
- Health check response model
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class WebhookRequest(BaseModel):
    """
    Request model for the direct webhook.

    Structured callers send tool_name and parameters; callers that only
    have free text send text and let the interpreter pick the tool.
    """
    tool_name: Any = None
    parameters: Any = None
    text: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: Optional[str] = None
    components: Optional[Dict[str, str]] = None
