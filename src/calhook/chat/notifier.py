"""
Slack reply delivery

Deferred replies are best-effort notifications: one retry, then the failure
is logged and dropped. Nothing here raises into the request that scheduled it.
"""

import asyncio
import logging
from typing import Optional

import httpx
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from calhook.constants import SLACK_SETTINGS

logger = logging.getLogger(__name__)


class ResponseUrlNotifier:
    """Posts slash-command answers to the response_url Slack hands out."""

    def __init__(
        self,
        delay_seconds: float = 0.5,
        max_attempts: int = SLACK_SETTINGS.MAX_DELIVERY_ATTEMPTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.delay_seconds = delay_seconds
        self.max_attempts = max_attempts
        self._transport = transport

    async def deliver(self, response_url: str, text: str) -> bool:
        """
        Wait the configured delay, then POST the reply.

        Returns:
            True when Slack accepted the message, False after the last failed attempt
        """
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        payload = {"response_type": "in_channel", "text": text}

        async with httpx.AsyncClient(
            timeout=SLACK_SETTINGS.REQUEST_TIMEOUT,
            transport=self._transport,
        ) as client:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    response = await client.post(response_url, json=payload)
                    response.raise_for_status()
                    return True
                except httpx.HTTPError as e:
                    logger.warning(
                        "Slack response_url delivery attempt %d/%d failed: %s",
                        attempt,
                        self.max_attempts,
                        str(e),
                    )

        logger.error("Giving up on Slack response_url delivery after %d attempts", self.max_attempts)
        return False


class SlackMessenger:
    """Posts event replies through the Slack Web API."""

    def __init__(
        self,
        bot_token: str,
        max_attempts: int = SLACK_SETTINGS.MAX_DELIVERY_ATTEMPTS,
        client: Optional[AsyncWebClient] = None,
    ):
        self.max_attempts = max_attempts
        self.client = client or AsyncWebClient(token=bot_token)

    async def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.client.chat_postMessage(channel=channel, text=text, thread_ts=thread_ts)
                return True
            except SlackApiError as e:
                logger.warning(
                    "Slack chat.postMessage attempt %d/%d failed: %s",
                    attempt,
                    self.max_attempts,
                    e.response.get("error", str(e)) if e.response is not None else str(e),
                )
            except Exception as e:
                logger.warning(
                    "Slack chat.postMessage attempt %d/%d failed: %s",
                    attempt,
                    self.max_attempts,
                    str(e),
                )

        logger.error("Giving up on Slack message to channel %s after %d attempts", channel, self.max_attempts)
        return False
