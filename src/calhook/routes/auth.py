from typing import Optional
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from calhook.auth.oauth import GoogleOAuthFlow
from calhook.auth.session import TokenStore
from calhook.dependencies import get_oauth_flow, get_token_store

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/auth")
async def auth(oauth_flow: GoogleOAuthFlow = Depends(get_oauth_flow)):
    """Redirect the user to Google's consent screen."""
    if not oauth_flow.is_configured:
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Google OAuth integration not configured"},
        )

    auth_url = oauth_flow.authorization_url()
    logger.info("Redirecting to Google consent screen")
    return RedirectResponse(auth_url)


@router.get("/callback")
async def callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    oauth_flow: GoogleOAuthFlow = Depends(get_oauth_flow),
    store: TokenStore = Depends(get_token_store),
):
    """
    Exchange the authorization code for a token set and keep it in memory.

    The new token set replaces any earlier one.
    """
    logger.info("Received authorization code: %s", "yes" if code else "no")

    if error:
        return PlainTextResponse(f"OAuth error: {error}", status_code=400)

    if not code:
        return PlainTextResponse("No authorization code received.", status_code=400)

    try:
        token_set = await run_in_threadpool(oauth_flow.exchange_code, code)
    except Exception as e:
        logger.error(f"Authorization error: {str(e)}")
        return PlainTextResponse(f"Authorization failed: {str(e)}", status_code=500)

    store.set_token(token_set)
    logger.info("Tokens received successfully")
    return PlainTextResponse("Authorization successful! You can now use the calendar agent.")
