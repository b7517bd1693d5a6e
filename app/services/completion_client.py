"""
Client for the Matcha completions API.

POST {MATCHA_BASE_URL}/completions with ``{"mission_id", "input"}`` and the
``MATCHA-API-KEY`` header. A success payload carries the generated text at
``output[0].content[0].text``; anything else is an upstream failure.

Public API
----------
MatchaCompletionClient.complete(prompt)  -> Dict  (raw success payload)
extract_output_text(payload)             -> str
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from app.config import settings
from app.exceptions import UpstreamFailureError
from app.utils.helpers import truncate_text

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "No response text available."


def extract_output_text(payload: Any) -> str:
    """
    Return the first text payload of a completion response.

    Falls back to a fixed placeholder when the response does not have the
    expected ``output -> content -> text`` shape.
    """
    try:
        text = payload["output"][0]["content"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return NO_RESPONSE_TEXT
    if not isinstance(text, str) or not text:
        return NO_RESPONSE_TEXT
    return text


class MatchaCompletionClient:
    """
    Thin async wrapper around one shared ``httpx.AsyncClient``.

    Opened once in the application lifespan and closed on shutdown. Calls are
    never retried; every failure surfaces to the caller immediately.
    """

    CONNECT_TIMEOUT: float = 10.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        mission_id: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.MATCHA_API_KEY
        self.base_url = (base_url or settings.MATCHA_BASE_URL).rstrip("/")
        self.mission_id = mission_id if mission_id is not None else settings.MATCHA_MISSION_ID
        self.read_timeout = timeout if timeout is not None else settings.MATCHA_TIMEOUT
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.read_timeout, connect=self.CONNECT_TIMEOUT),
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str) -> Dict[str, Any]:
        """
        Send *prompt* to the configured mission and return the JSON payload.

        Raises:
            UpstreamFailureError: missing API key, transport error, timeout
                or non-2xx status (carried as ``upstream_status``).
        """
        if not self.is_configured:
            raise UpstreamFailureError("Matcha API key is not configured")

        try:
            resp = await self._client.post(
                "/completions",
                headers={"MATCHA-API-KEY": self.api_key},
                json={"mission_id": self.mission_id, "input": prompt},
            )
        except httpx.TimeoutException:
            logger.error("complete: request timed out after %.0f s", self.read_timeout)
            raise UpstreamFailureError("Matcha API timed out") from None
        except httpx.HTTPError as exc:
            logger.error("complete: transport error — %s", exc)
            raise UpstreamFailureError("Matcha API unreachable") from exc

        if not resp.is_success:
            logger.error(
                "complete: Matcha returned HTTP %d: %s",
                resp.status_code,
                truncate_text(resp.text, 300),
            )
            raise UpstreamFailureError("Matcha API failed", upstream_status=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            # Still a successful call; the caller substitutes placeholder text
            logger.warning("complete: response body is not JSON — %s", exc)
            return {}

    async def aclose(self) -> None:
        await self._client.aclose()
