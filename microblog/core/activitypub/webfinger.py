import re
import xml.etree.ElementTree as ET
from typing import Dict, Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from microblog.api.deps import get_account_config
from microblog.core.config import AccountConfig
from microblog.core.errors import ClientInputError, NotFoundError
from microblog.core.activitypub.utils import (
    ACTIVITY_JSON,
    CACHE_DISCOVERY,
    CACHE_HOST_META,
    JRD_JSON,
    XRD_XML,
    activity_response,
)

webfinger_router = APIRouter()

ACCT_RE = re.compile(r'^acct:([^@\s]+)@([^@\s]+)$')
XRD_NS = "http://docs.oasis-open.org/ns/xri/xrd-1.0"
ET.register_namespace("", XRD_NS)

def resolve_handle(resource: Optional[str], account: AccountConfig) -> Dict[str, Any]:
    """Resolve an ``acct:user@domain`` URI to a JRD document."""
    if not resource:
        raise ClientInputError("Missing resource parameter")

    # Format: acct:username@domain
    match = ACCT_RE.match(resource)
    if not match:
        raise ClientInputError("Invalid resource format")

    username, domain = match.groups()
    if domain.lower() not in [d.lower() for d in account.domains] or username != account.account_id:
        raise NotFoundError("User not found")

    return {
        "subject": resource,
        "aliases": [account.actor_id],
        "links": [
            {
                "rel": "self",
                "type": ACTIVITY_JSON,
                "href": account.actor_id,
            },
            {
                "rel": "http://webfinger.net/rel/profile-page",
                "type": "text/html",
                "href": account.site_url,
            },
        ],
    }

def host_meta_document(account: AccountConfig) -> str:
    """XRD document pointing legacy clients at the WebFinger template."""
    root = ET.Element(f"{{{XRD_NS}}}XRD")
    ET.SubElement(root, f"{{{XRD_NS}}}Link", {
        "rel": "lrdd",
        "template": f"{account.site_url}/.well-known/webfinger?resource={{uri}}",
    })
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'

@webfinger_router.get("/webfinger")
async def webfinger(resource: Optional[str] = None, account: AccountConfig = Depends(get_account_config)):
    """WebFinger (RFC 7033)"""
    jrd = resolve_handle(resource, account)
    return activity_response(jrd, max_age=CACHE_DISCOVERY, media_type=JRD_JSON)

@webfinger_router.get("/host-meta")
async def host_meta(account: AccountConfig = Depends(get_account_config)):
    """host-meta (RFC 6415)"""
    return Response(
        content=host_meta_document(account),
        media_type=XRD_XML,
        headers={"Cache-Control": f"public, max-age={CACHE_HOST_META}"},
    )
