"""
Token Store

Holds the OAuth token sets issued by the calendar provider. Token sets live
in memory only: they are overwritten on every new authorization and lost
when the process restarts.
"""

import logging
from typing import Any, Dict, Optional

from calhook.constants import DEFAULT_USER_ID
from calhook.errors import NotAuthenticatedError

logger = logging.getLogger(__name__)


class TokenStore:
    """
    In-memory token sets keyed by caller identity.

    The service runs single-tenant, so every caller shares DEFAULT_USER_ID
    unless an identity is passed explicitly.
    """

    def __init__(self):
        self._tokens: Dict[str, Any] = {}

    def set_token(self, token_set: Any, user_id: str = DEFAULT_USER_ID) -> None:
        """Store a token set, replacing whatever was there before."""
        if user_id in self._tokens:
            logger.info("Replacing token set for user '%s'", user_id)
        self._tokens[user_id] = token_set

    def has_token(self, user_id: str = DEFAULT_USER_ID) -> bool:
        return self._tokens.get(user_id) is not None

    def get_token(self, user_id: str = DEFAULT_USER_ID) -> Optional[Any]:
        return self._tokens.get(user_id)

    def require_token(self, user_id: str = DEFAULT_USER_ID) -> Any:
        """
        Return the token set for user_id.

        Raises:
            NotAuthenticatedError: if no token set has been stored yet
        """
        token_set = self._tokens.get(user_id)
        if token_set is None:
            raise NotAuthenticatedError(user_id)
        return token_set

    def clear(self, user_id: str = DEFAULT_USER_ID) -> None:
        self._tokens.pop(user_id, None)
