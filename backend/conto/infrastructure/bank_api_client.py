"""Bank API Client — wraps httpx.AsyncClient and classifies every call.

Invariants:
    - Every request carries Content-Type: application/json, Auth-Schema and Api-Key
    - Exactly one HTTP attempt per call: no retry at this layer (a retried
      money transfer may execute twice)
    - Returns a CallOutcome; never raises for HTTP or transport failures
    - httpx.HTTPError (connect, read, timeout, protocol) → TransportFailure

Design Decisions:
    - One long-lived AsyncClient owned by the app lifespan and injected into
      workers: connection pooling across concurrent requests
    - transport parameter lets tests plug in httpx.MockTransport
"""

import logging
from typing import Any

import httpx

from conto.core.call_outcome import CallOutcome, TransportFailure, classify_response

logger = logging.getLogger(__name__)


class BankApiClient:
    """Calls the bank REST API with the gateway credentials."""

    def __init__(
        self,
        api_key: str,
        auth_schema: str,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Auth-Schema": auth_schema,
                "Api-Key": api_key,
            },
        )

    async def get(self, url: str) -> CallOutcome:
        """GET a read endpoint (balance, transactions)."""
        return await self._send("GET", url)

    async def post_json(self, url: str, body: dict[str, Any] | str) -> CallOutcome:
        """POST a JSON body. Accepts a dict or an already-encoded JSON string."""
        if isinstance(body, str):
            return await self._send("POST", url, content=body.encode("utf-8"))
        return await self._send("POST", url, json=body)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _send(self, method: str, url: str, **kwargs) -> CallOutcome:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Bank API %s %s failed before a response: %s", method, url, e,
            )
            return TransportFailure(e)
        logger.info(
            "Bank API %s %s responded", method, url,
            extra={"status_code": response.status_code},
        )
        return classify_response(response.status_code, response.text)
