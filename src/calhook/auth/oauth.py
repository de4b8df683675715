"""
Google OAuth 2.0 web flow

Builds the consent-screen URL and exchanges the returned authorization code
for a token set.
"""

import logging

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from calhook.config import Settings
from calhook.constants import GOOGLE_CALENDAR_SETTINGS
from calhook.errors import NotConfiguredError

logger = logging.getLogger(__name__)


class GoogleOAuthFlow:
    """One-shot authorization code exchange against Google's OAuth server."""

    def __init__(self, settings: Settings):
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.client_secret = settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = settings.GOOGLE_REDIRECT_URI
        self.scopes = GOOGLE_CALENDAR_SETTINGS.SCOPES

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _build_flow(self) -> Flow:
        if not self.is_configured:
            raise NotConfiguredError("Google OAuth")

        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": GOOGLE_CALENDAR_SETTINGS.AUTH_URI,
                "token_uri": GOOGLE_CALENDAR_SETTINGS.TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }
        # No PKCE verifier: the consent redirect and the code exchange are
        # served by separate requests that share no flow state.
        return Flow.from_client_config(
            client_config,
            scopes=self.scopes,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self) -> str:
        """Return the Google consent-screen URL for the calendar scope."""
        flow = self._build_flow()
        auth_url, _state = flow.authorization_url(
            access_type="offline",
            prompt="consent",
        )
        return auth_url

    def exchange_code(self, code: str) -> Credentials:
        """
        Exchange an authorization code for credentials.

        This performs a blocking HTTP call to the token endpoint.
        """
        flow = self._build_flow()
        flow.fetch_token(code=code)
        logger.info("Authorization code exchanged for token set")
        return flow.credentials
