"""Inbox: receives activities and answers Follow requests with a signed Accept.

Every activity that parses is acknowledged with 202. The only failures the
caller sees are a malformed body (400) and a missing local signing key (500).
Remote failures while answering a Follow are logged and otherwise ignored;
nothing is retried and followers are not recorded.
"""
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, ValidationError

from microblog.api.deps import get_account_config, get_federation_client, get_key_manager
from microblog.core.config import AccountConfig
from microblog.core.errors import ClientInputError, ConfigurationError, RemoteDeliveryError
from microblog.core.activitypub.federation import FederationClient
from microblog.core.activitypub.keys import KeyManager
from microblog.core.activitypub.utils import AS_CONTEXT, generate_accept_id

logger = logging.getLogger(__name__)

inbox_router = APIRouter()

class InboundActivity(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    id: Optional[Any] = None
    actor: Optional[Any] = None
    object: Optional[Any] = None

class InboxOutcome(str, enum.Enum):
    IGNORED = "ignored"
    ACTOR_UNRESOLVED = "actor_unresolved"
    DELIVERY_SUCCEEDED = "delivery_succeeded"
    DELIVERY_FAILED = "delivery_failed"

def parse_activity(data: Any) -> InboundActivity:
    if not isinstance(data, dict):
        raise ClientInputError("Activity must be a JSON object")
    try:
        return InboundActivity.model_validate(data)
    except ValidationError as e:
        raise ClientInputError(f"Invalid activity: {e.errors()[0]['msg']}") from e

def actor_uri(actor: Any) -> Optional[str]:
    if isinstance(actor, str):
        return actor
    if isinstance(actor, dict) and isinstance(actor.get("id"), str):
        return actor["id"]
    return None

class InboxProcessor:
    def __init__(self, account: AccountConfig, keys: KeyManager, federation: FederationClient):
        self.account = account
        self.keys = keys
        self.federation = federation
        self.handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[InboxOutcome]]] = {
            "Follow": self.handle_follow,
        }

    async def process(self, activity_data: Dict[str, Any]) -> InboxOutcome:
        activity = parse_activity(activity_data)
        logger.info("Inbox received: %s from %s", activity.type, activity.actor)
        handler = self.handlers.get(activity.type, self.ignore)
        return await handler(activity_data)

    async def ignore(self, activity_data: Dict[str, Any]) -> InboxOutcome:
        logger.info("Ignoring activity type: %s", activity_data.get("type"))
        return InboxOutcome.IGNORED

    def build_accept(self, follow: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "@context": AS_CONTEXT,
            "id": generate_accept_id(self.account),
            "type": "Accept",
            "actor": self.account.actor_id,
            "object": follow,
        }

    async def handle_follow(self, follow: Dict[str, Any]) -> InboxOutcome:
        follower_id = actor_uri(follow.get("actor"))
        if follower_id is None:
            logger.error("Follow without a usable actor: %r", follow.get("actor"))
            return InboxOutcome.ACTOR_UNRESOLVED

        try:
            follower = await self.federation.fetch_actor(follower_id)
        except RemoteDeliveryError as e:
            logger.error("Failed to fetch follower actor: %s", e)
            return InboxOutcome.ACTOR_UNRESOLVED

        inbox_url = follower.get("inbox")
        if not isinstance(inbox_url, str):
            logger.error("Follower actor %s has no inbox", follower_id)
            return InboxOutcome.ACTOR_UNRESOLVED
        logger.info("Follower inbox: %s", inbox_url)

        signing_key = await self.keys.get_private_key(self.account.account_id)
        if signing_key is None:
            logger.error("No private key found for %s", self.account.account_id)
            raise ConfigurationError("Actor not configured")

        accept = self.build_accept(follow)
        result = await self.federation.deliver(inbox_url, accept, signing_key, self.account.key_id)
        if result.delivered:
            logger.info("Accept delivered to %s (%s)", inbox_url, result.status_code)
            return InboxOutcome.DELIVERY_SUCCEEDED
        logger.warning("Failed to send Accept: %s", result.error)
        return InboxOutcome.DELIVERY_FAILED

@inbox_router.post("/inbox", status_code=202)
async def receive_activity(
    request: Request,
    account: AccountConfig = Depends(get_account_config),
    keys: KeyManager = Depends(get_key_manager),
    federation: FederationClient = Depends(get_federation_client),
):
    """Receive an ActivityPub activity"""
    try:
        activity_data = await request.json()
    except ValueError:
        raise ClientInputError("Invalid JSON")

    processor = InboxProcessor(account, keys, federation)
    await processor.process(activity_data)
    return Response(status_code=202)
