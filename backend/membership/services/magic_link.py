import logging
from typing import Optional

import httpx

from membership.core.http_utils import InstrumentedAsyncClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "Identity Provider"


class MagicLinkSender:
    """Asks the identity provider to email a sign-in link."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def send(self, email: str, callback_url: str) -> bool:
        """
        Send a magic link to ``email`` that lands on ``callback_url`` after sign-in.

        :return: True if the provider accepted the request, False otherwise
        """
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        payload = {"email": email, "callbackURL": callback_url}

        try:
            async with InstrumentedAsyncClient(
                SERVICE_NAME, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/sign-in/magic-link", json=payload, headers=headers
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach identity provider for {email}: {e}")
            return False

        if response.is_error:
            logger.error(
                f"Identity provider rejected magic link for {email}. "
                f"Status: {response.status_code}, Body: {response.text}"
            )
            return False

        try:
            body = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("status") is False:
            logger.error(f"Identity provider reported failure sending magic link to {email}")
            return False

        logger.info(f"Magic link sent to {email}")
        return True
