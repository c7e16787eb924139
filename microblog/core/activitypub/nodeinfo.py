from fastapi import APIRouter, Depends
from typing import Dict, Any

from microblog import __version__
from microblog.api.deps import get_account_config, get_post_store
from microblog.core.config import AccountConfig
from microblog.core.posts import PostStore
from microblog.core.activitypub.utils import activity_response

nodeinfo_router = APIRouter()

NODEINFO_SCHEMA = "http://nodeinfo.diaspora.software/ns/schema/2.0"
CACHE_NODEINFO = 1800

def get_nodeinfo_links(account: AccountConfig) -> Dict[str, Any]:
    return {
        "links": [
            {
                "rel": NODEINFO_SCHEMA,
                "href": f"{account.site_url}/.well-known/nodeinfo/2.0"
            }
        ]
    }

def build_nodeinfo(local_posts: int) -> Dict[str, Any]:
    return {
        "version": "2.0",
        "software": {
            "name": "microblog-activitypub",
            "version": __version__,
        },
        "protocols": [
            "activitypub"
        ],
        "services": {
            "inbound": [],
            "outbound": []
        },
        "openRegistrations": False,
        "usage": {
            "users": {
                "total": 1,
                "activeMonth": 1,
                "activeHalfyear": 1
            },
            "localPosts": local_posts
        },
        "metadata": {}
    }

@nodeinfo_router.get("")
async def nodeinfo(account: AccountConfig = Depends(get_account_config)):
    return activity_response(get_nodeinfo_links(account), max_age=CACHE_NODEINFO, media_type="application/json")

@nodeinfo_router.get("/2.0")
async def nodeinfo_2_0(posts: PostStore = Depends(get_post_store)):
    data = build_nodeinfo(await posts.count())
    return activity_response(
        data,
        max_age=CACHE_NODEINFO,
        media_type=f'application/json; profile="{NODEINFO_SCHEMA}#"',
    )
