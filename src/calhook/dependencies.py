"""
FastAPI dependencies

Request handlers reach the shared application objects (token store,
workflow, Slack delivery) through these functions instead of module globals,
so tests can swap any of them with app.dependency_overrides.
"""

from typing import Optional

from fastapi import HTTPException, Request
from slack_sdk.signature import SignatureVerifier

from calhook.auth.oauth import GoogleOAuthFlow
from calhook.auth.session import TokenStore
from calhook.chat.notifier import ResponseUrlNotifier, SlackMessenger
from calhook.config import Settings
from calhook.dispatch.workflow import CalendarWorkflow


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_oauth_flow(request: Request) -> GoogleOAuthFlow:
    return request.app.state.oauth_flow


def get_workflow(request: Request) -> CalendarWorkflow:
    return request.app.state.workflow


def get_response_notifier(request: Request) -> ResponseUrlNotifier:
    return request.app.state.response_notifier


def get_slack_messenger(request: Request) -> Optional[SlackMessenger]:
    return request.app.state.slack_messenger


async def verify_slack_request(request: Request) -> None:
    """Reject Slack requests with a bad signature when a signing secret is set."""
    signing_secret = request.app.state.settings.SLACK_SIGNING_SECRET
    if not signing_secret:
        return

    body = await request.body()
    verifier = SignatureVerifier(signing_secret)
    if not verifier.is_valid_request(body, dict(request.headers)):
        raise HTTPException(status_code=401, detail="Invalid Slack signature")
