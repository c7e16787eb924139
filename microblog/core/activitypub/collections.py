"""Followers, following, featured and single-post endpoints."""
import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from microblog.core.errors import NotFoundError
from microblog.core.activitypub.outbox import OutboxPublisher, get_publisher
from microblog.core.activitypub.utils import CACHE_OBJECT, activity_response, wants_activity_json

collections_router = APIRouter()

# Post ids are integer primary keys; bounded to fit a 64-bit column
POST_ID_RE = re.compile(r"[0-9]{1,18}")

# Followers are never recorded, so both membership collections stay empty
@collections_router.get("/followers")
async def get_followers(publisher: OutboxPublisher = Depends(get_publisher)):
    return activity_response(publisher.followers_collection(), max_age=CACHE_OBJECT)

@collections_router.get("/following")
async def get_following(publisher: OutboxPublisher = Depends(get_publisher)):
    return activity_response(publisher.following_collection(), max_age=CACHE_OBJECT)

@collections_router.get("/featured")
async def get_featured(publisher: OutboxPublisher = Depends(get_publisher)):
    """Pinned posts shown on remote profiles"""
    return activity_response(await publisher.featured_collection(), max_age=CACHE_OBJECT)

@collections_router.get("/posts/{post_id}")
async def get_post(post_id: str, request: Request, publisher: OutboxPublisher = Depends(get_publisher)):
    if not POST_ID_RE.fullmatch(post_id):
        raise NotFoundError("Not found")
    note = await publisher.note(int(post_id))
    accept = request.headers.get("accept", "")
    if "text/html" in accept and not wants_activity_json(accept):
        return RedirectResponse(note["url"], status_code=303)
    return activity_response(note, max_age=CACHE_OBJECT)
