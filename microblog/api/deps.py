"""FastAPI dependency providers for the ActivityPub components."""
from microblog.core.config import AccountConfig, account_config
from microblog.core.database import get_session_factory
from microblog.core.posts import PostStore
from microblog.core.activitypub.keys import KeyManager
from microblog.core.activitypub.federation import FederationClient

def get_account_config() -> AccountConfig:
    return account_config

def get_key_manager() -> KeyManager:
    return KeyManager(get_session_factory())

def get_post_store() -> PostStore:
    return PostStore(get_session_factory())

def get_federation_client() -> FederationClient:
    return FederationClient()
