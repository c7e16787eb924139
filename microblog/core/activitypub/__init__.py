from fastapi import APIRouter
from microblog.core.activitypub.actor import actor_router
from microblog.core.activitypub.collections import collections_router
from microblog.core.activitypub.inbox import inbox_router
from microblog.core.activitypub.nodeinfo import nodeinfo_router
from microblog.core.activitypub.outbox import outbox_router
from microblog.core.activitypub.webfinger import webfinger_router

# routers
activitypub_router = APIRouter()
well_known_router = APIRouter()

activitypub_router.include_router(actor_router)
activitypub_router.include_router(inbox_router)
activitypub_router.include_router(outbox_router)
activitypub_router.include_router(collections_router)

# Discovery endpoints under /.well-known
well_known_router.include_router(webfinger_router)
well_known_router.include_router(nodeinfo_router, prefix="/nodeinfo")
