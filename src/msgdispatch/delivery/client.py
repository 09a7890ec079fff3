"""HTTP client for the outbound message delivery webhook."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from msgdispatch import __version__
from msgdispatch.config import Settings

logger = logging.getLogger(__name__)

AUTH_HEADER = "x-ins-auth-key"
ACCEPTED_STATUS_CODES = frozenset({200, 202})


class DeliveryError(Exception):
    """Delivery webhook did not accept the message."""

    def __init__(self, detail: str, status_code: int | None = None):
        self.detail = detail
        self.status_code = status_code
        if status_code is None:
            super().__init__(f"Delivery failed: {detail}")
        else:
            super().__init__(f"Delivery failed with HTTP {status_code}: {detail}")


class DeliveryResponse(BaseModel):
    """Body returned by the webhook for an accepted message."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str = ""
    message_id: str = Field(alias="messageId", min_length=1)


@dataclass(frozen=True)
class DeliveryResult:
    """Provider-side identity of a delivered message."""

    message_id: str
    message: str = ""


class DeliveryClient:
    """Sends messages to the delivery webhook.

    Any outcome other than a 200/202 with a well-formed body raises
    DeliveryError; callers never see a partial result.
    """

    def __init__(
        self,
        url: str,
        auth_key: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._auth_key = auth_key
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeliveryClient":
        return cls(
            url=settings.delivery_url,
            auth_key=settings.delivery_auth_key.get_secret_value(),
            timeout=settings.delivery_timeout,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(self, recipient: str, content: str) -> DeliveryResult:
        """Deliver one message.

        Args:
            recipient: Destination address (phone number)
            content: Message text

        Returns:
            DeliveryResult carrying the provider-assigned message id

        Raises:
            DeliveryError: On transport errors, timeouts, unexpected status codes
                or malformed response bodies.
        """
        payload: dict[str, Any] = {"to": recipient, "content": content}
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"msgdispatch/{__version__}",
            AUTH_HEADER: self._auth_key,
        }

        try:
            response = await self._get_client().post(
                self.url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise DeliveryError("Request timed out") from e
        except httpx.ConnectError as e:
            raise DeliveryError(f"Connection error: {e}") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"HTTP error: {e}") from e

        if response.status_code not in ACCEPTED_STATUS_CODES:
            raise DeliveryError(response.text[:200], status_code=response.status_code)

        try:
            body = DeliveryResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DeliveryError(
                f"Malformed response body: {e}", status_code=response.status_code
            ) from e

        logger.debug(f"Webhook accepted message for {recipient} as {body.message_id}")
        return DeliveryResult(message_id=body.message_id, message=body.message)
