"""
Remote Functions Client — invokes backend remote functions over HTTP.

Every function is a JSON POST to ``{FUNCTIONS_BASE_URL}/{name}``:
    check-domain, paypal-settings, midtrans-settings,
    subscription-addons, create-invoice

One attempt per call, no retry. Any transport failure, non-2xx status or
non-JSON body is raised as RemoteFunctionError; callers decide whether that
is user-visible, aggregated, or silently degraded.
"""
import logging
from typing import Any, Optional

import httpx

from config import settings
from domain.errors import RemoteFunctionError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull a human message out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message", "msg"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    text = response.text.strip()
    if text and len(text) <= 300:
        return text
    return f"Edge function returned {response.status_code} {response.reason_phrase}".strip()


class RemoteFunctionsClient:
    """Thin async invoker around a shared httpx.AsyncClient."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.functions_base_url).rstrip("/")
        self.api_key = settings.functions_api_key if api_key is None else api_key
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.functions_timeout_seconds,
            transport=transport,
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    async def invoke(self, name: str, body: Optional[dict] = None) -> Any:
        """
        Call one remote function and return its decoded JSON body.

        Raises:
            RemoteFunctionError on any failure.
        """
        url = f"{self.base_url}/{name}"
        try:
            response = await self._client.post(url, json=body or {}, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning(f"Remote function {name} transport error: {e}")
            raise RemoteFunctionError(name, str(e) or "Failed to send a request to the Edge Function") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"Remote function {name} failed [{response.status_code}]: {message}")
            raise RemoteFunctionError(name, message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteFunctionError(
                name, "Remote function returned a non-JSON body", status_code=response.status_code
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
