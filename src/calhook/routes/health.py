from fastapi import APIRouter, Depends

from calhook.auth.session import TokenStore
from calhook.config import Settings
from calhook.dependencies import get_settings, get_token_store
from calhook.routes.dto import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def health_check(
    settings: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
):
    """Component readiness, without exposing any secret values."""
    components = {
        "google_oauth": "configured" if settings.google_oauth_configured else "missing",
        "calendar_token": "present" if store.has_token() else "missing",
        "language_service": "configured" if settings.llm_configured else "missing",
        "slack": "configured" if settings.slack_configured else "missing",
    }
    status = "healthy" if settings.google_oauth_configured else "degraded"
    return HealthResponse(status=status, service="calendar", components=components)
