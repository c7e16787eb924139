from fastapi import APIRouter, Depends
from typing import Dict, Any, Optional

from microblog.api.deps import get_account_config, get_post_store
from microblog.core.config import AccountConfig
from microblog.core.errors import NotFoundError
from microblog.core.posts import PostStore
from microblog.core.activitypub.utils import (
    AS_CONTEXT,
    CACHE_FEED,
    create_activity_object,
    create_note_object,
    activity_response,
)

outbox_router = APIRouter()

class OutboxPublisher:
    """Renders the account's posts as outbox, collection and Note documents."""

    def __init__(self, account: AccountConfig, posts: PostStore):
        self.account = account
        self.posts = posts

    @property
    def first_page_url(self) -> str:
        return f"{self.account.outbox_url}?page=true"

    async def outbox_collection(self) -> Dict[str, Any]:
        return {
            "@context": AS_CONTEXT,
            "id": self.account.outbox_url,
            "type": "OrderedCollection",
            "totalItems": await self.posts.count(),
            "first": self.first_page_url,
        }

    async def outbox_page(self) -> Dict[str, Any]:
        # Single page holding every post
        posts = await self.posts.list_recent()
        return {
            "@context": AS_CONTEXT,
            "id": self.first_page_url,
            "type": "OrderedCollectionPage",
            "partOf": self.account.outbox_url,
            "orderedItems": [create_activity_object(self.account, post) for post in posts],
        }

    async def featured_collection(self) -> Dict[str, Any]:
        posts = await self.posts.list_recent(limit=self.account.featured_count)
        items = [create_note_object(self.account, post) for post in posts]
        return {
            "@context": AS_CONTEXT,
            "id": self.account.featured_url,
            "type": "OrderedCollection",
            "totalItems": len(items),
            "orderedItems": items,
        }

    def empty_collection(self, collection_id: str) -> Dict[str, Any]:
        return {
            "@context": AS_CONTEXT,
            "id": collection_id,
            "type": "OrderedCollection",
            "totalItems": 0,
            "orderedItems": [],
        }

    def followers_collection(self) -> Dict[str, Any]:
        return self.empty_collection(self.account.followers_url)

    def following_collection(self) -> Dict[str, Any]:
        return self.empty_collection(self.account.following_url)

    async def note(self, post_id: int) -> Dict[str, Any]:
        post = await self.posts.get(post_id)
        if post is None:
            raise NotFoundError("Not found")
        return create_note_object(self.account, post, with_context=True)

def get_publisher(
    account: AccountConfig = Depends(get_account_config),
    posts: PostStore = Depends(get_post_store),
) -> OutboxPublisher:
    return OutboxPublisher(account, posts)

@outbox_router.get("/outbox")
async def get_outbox(page: Optional[str] = None, publisher: OutboxPublisher = Depends(get_publisher)):
    """Outbox; ``?page=true`` returns the items"""
    if page == "true":
        data = await publisher.outbox_page()
    else:
        data = await publisher.outbox_collection()
    return activity_response(data, max_age=CACHE_FEED)
