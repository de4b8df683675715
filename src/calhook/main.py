import logging
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Request

from calhook.agents.calendaragent.calendar_client import (
    GoogleCalendarClient,
    build_calendar_service,
)
from calhook.auth.oauth import GoogleOAuthFlow
from calhook.auth.session import TokenStore
from calhook.chat.notifier import ResponseUrlNotifier, SlackMessenger
from calhook.config import Settings, missing_integrations, secrets_report, settings as default_settings
from calhook.constants import APP_SETTINGS
from calhook.dependencies import get_settings, get_token_store
from calhook.dispatch.dispatcher import ToolDispatcher
from calhook.dispatch.interpreter import IntentInterpreter
from calhook.dispatch.workflow import CalendarWorkflow
from calhook.routes import auth, health, slack, webhook

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s"
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    service_builder: Callable = build_calendar_service,
    chat_model: Optional[Any] = None,
    slack_messenger: Optional[SlackMessenger] = None,
) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title=APP_SETTINGS.APP_NAME,
        version=APP_SETTINGS.VERSION,
        description=APP_SETTINGS.DESCRIPTION
    )

    token_store = TokenStore()
    calendar_client = GoogleCalendarClient(token_store, settings, service_builder=service_builder)
    interpreter = IntentInterpreter(settings, chat_model=chat_model)

    if slack_messenger is None and settings.slack_configured:
        slack_messenger = SlackMessenger(settings.SLACK_BOT_TOKEN)

    app.state.settings = settings
    app.state.token_store = token_store
    app.state.oauth_flow = GoogleOAuthFlow(settings)
    app.state.workflow = CalendarWorkflow(ToolDispatcher(calendar_client), interpreter)
    app.state.response_notifier = ResponseUrlNotifier(delay_seconds=settings.SLACK_REPLY_DELAY_SECONDS)
    app.state.slack_messenger = slack_messenger

    @app.on_event("startup")
    async def startup_event():
        """Report integrations that will answer "not configured"."""
        missing = missing_integrations(settings)
        if missing:
            logger.warning("Running without: %s", ", ".join(missing))
        print(f"✅ {APP_SETTINGS.APP_NAME} ready on port {settings.APP_PORT}")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup resources on shutdown"""
        print("🔄 Shutting down gracefully...")

    @app.get("/")
    async def root(request: Request, store: TokenStore = Depends(get_token_store)):
        authenticated = store.has_token()
        return {
            "status": "Calendar Agent Server Running",
            "authenticated": authenticated,
            "authUrl": None if authenticated else f"{request.base_url}auth",
        }

    @app.get("/debug")
    async def debug(current: Settings = Depends(get_settings)):
        """Presence-only report of configured secrets."""
        return {
            "environment": current.APP_ENV,
            "secrets": secrets_report(current),
            "missing_integrations": missing_integrations(current),
        }

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(webhook.router, tags=["Webhook"])
    app.include_router(slack.router, tags=["Slack"])

    return app


app = create_app()


def main():
    import uvicorn

    uvicorn.run(
        "calhook.main:app",
        host="0.0.0.0",
        port=default_settings.APP_PORT,
        reload=default_settings.APP_ENV == "development"
    )


if __name__ == "__main__":
    main()
