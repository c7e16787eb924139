import logging
from fastapi import APIRouter, Depends
from typing import Dict, Any

from microblog.api.deps import get_account_config, get_key_manager
from microblog.core.config import AccountConfig
from microblog.core.errors import ConfigurationError
from microblog.core.activitypub.keys import KeyManager
from microblog.core.activitypub.utils import AS_CONTEXT, CACHE_ACTOR, SECURITY_CONTEXT, activity_response

logger = logging.getLogger(__name__)

actor_router = APIRouter()

class ActorDirectory:
    """Builds the public identity document of the local account."""

    def __init__(self, account: AccountConfig, keys: KeyManager):
        self.account = account
        self.keys = keys

    async def build_actor_document(self, account_id: str) -> Dict[str, Any]:
        public_key_pem = await self.keys.get_public_key_pem(account_id)
        if not public_key_pem:
            logger.error("No public key stored for %s", account_id)
            raise ConfigurationError("Actor not configured")

        account = self.account
        actor_id = account.actor_id
        actor = {
            "@context": [AS_CONTEXT, SECURITY_CONTEXT],
            "id": actor_id,
            "type": "Person",
            "preferredUsername": account_id,
            "name": account.display_name or account_id,
            "summary": account.summary,
            "url": account.site_url,
            "inbox": account.inbox_url,
            "outbox": account.outbox_url,
            "followers": account.followers_url,
            "following": account.following_url,
            "featured": account.featured_url,
            "publicKey": {
                "id": account.key_id,
                "owner": actor_id,
                "publicKeyPem": public_key_pem,
            },
        }
        if account.icon_url:
            actor["icon"] = {"type": "Image", "url": account.icon_url}
        return actor

@actor_router.get("/actor")
async def get_actor(
    account: AccountConfig = Depends(get_account_config),
    keys: KeyManager = Depends(get_key_manager),
):
    """Actor document with the public key used to verify our signatures"""
    directory = ActorDirectory(account, keys)
    actor = await directory.build_actor_document(account.account_id)
    return activity_response(actor, max_age=CACHE_ACTOR)
