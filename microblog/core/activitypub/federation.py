"""Outbound HTTP for federation: remote actor lookup and signed delivery."""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from microblog.core.config import settings
from microblog.core.errors import RemoteDeliveryError
from microblog.core.activitypub.keys import SigningKey
from microblog.core.activitypub.signatures import sign_request
from microblog.core.activitypub.utils import ACTIVITY_JSON

logger = logging.getLogger(__name__)

@dataclass
class DeliveryResult:
    delivered: bool
    status_code: Optional[int] = None
    error: Optional[RemoteDeliveryError] = None

def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(settings.FEDERATION_TIMEOUT)

class FederationClient:
    """Thin wrapper over httpx for talking to remote servers."""
    # Shared httpx AsyncClient, injected at application startup
    shared_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def set_shared_client(cls, client: Optional[httpx.AsyncClient]) -> None:
        cls.shared_client = client

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or FederationClient.shared_client
        self.headers = {"User-Agent": settings.FEDERATION_USER_AGENT}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        kwargs["headers"] = {**self.headers, **kwargs.get("headers", {})}
        if self.client is not None:
            return await self.client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=default_timeout()) as temp_client:
            return await temp_client.request(method, url, **kwargs)

    async def fetch_actor(self, actor_url: str) -> Dict[str, Any]:
        """GET a remote actor document; any failure raises RemoteDeliveryError."""
        try:
            response = await self._request("GET", actor_url, headers={"Accept": ACTIVITY_JSON})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteDeliveryError(f"Error fetching actor {actor_url}: {e}") from e

        if not response.is_success:
            raise RemoteDeliveryError(
                f"Failed to fetch actor {actor_url}: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            actor = response.json()
        except ValueError as e:
            raise RemoteDeliveryError(f"Actor {actor_url} is not JSON") from e
        if not isinstance(actor, dict):
            raise RemoteDeliveryError(f"Actor {actor_url} is not a JSON object")
        return actor

    async def deliver(
        self,
        inbox_url: str,
        activity: Dict[str, Any],
        signing_key: SigningKey,
        key_id: str,
    ) -> DeliveryResult:
        """Sign and POST ``activity`` to ``inbox_url``. Never raises for remote failures."""
        body = json.dumps(activity).encode("utf-8")
        try:
            headers = sign_request(inbox_url, body, signing_key, key_id)
            response = await self._request("POST", inbox_url, content=body, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return DeliveryResult(False, error=RemoteDeliveryError(f"Error delivering to {inbox_url}: {e}"))

        if not response.is_success:
            return DeliveryResult(
                False,
                status_code=response.status_code,
                error=RemoteDeliveryError(
                    f"Failed to deliver to {inbox_url}: {response.status_code}",
                    status_code=response.status_code,
                ),
            )
        return DeliveryResult(True, status_code=response.status_code)
