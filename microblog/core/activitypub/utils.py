import uuid
from typing import Dict, Any, Optional

from fastapi.responses import ORJSONResponse

from microblog.core.config import AccountConfig
from microblog.core.timestamps import format_utc, parse_timestamp

AS_CONTEXT = "https://www.w3.org/ns/activitystreams"
SECURITY_CONTEXT = "https://w3id.org/security/v1"
PUBLIC_COLLECTION = "https://www.w3.org/ns/activitystreams#Public"

ACTIVITY_JSON = "application/activity+json"
LD_JSON = "application/ld+json"
JRD_JSON = "application/jrd+json"
XRD_XML = "application/xrd+xml; charset=utf-8"

# Cache lifetimes in seconds
CACHE_DISCOVERY = 3600
CACHE_HOST_META = 86400
CACHE_ACTOR = 3600
CACHE_FEED = 60
CACHE_OBJECT = 300

def to_iso8601(timestamp: str) -> str:
    """Normalize a stored timestamp to strict ISO-8601 UTC.

    "2025-12-02 16:42:15" -> "2025-12-02T16:42:15Z"
    "2025-12-03T01:42:15+09:00" -> "2025-12-02T16:42:15Z"
    """
    return format_utc(parse_timestamp(timestamp))

def render_content(content: str) -> str:
    """Newlines become <br>; nothing else is touched."""
    return content.replace("\n", "<br>")

def generate_accept_id(account: AccountConfig) -> str:
    return f"{account.actor_id}#accept-{uuid.uuid4().hex}"

def create_note_object(
    account: AccountConfig,
    post: Any,
    with_context: bool = False,
) -> Dict[str, Any]:
    """Render a stored post as a Note."""
    note: Dict[str, Any] = {}
    if with_context:
        note["@context"] = AS_CONTEXT
    note.update({
        "id": account.note_id(post.id),
        "type": "Note",
        "attributedTo": account.actor_id,
        "content": render_content(post.content),
        "published": to_iso8601(post.created_at),
        "to": [PUBLIC_COLLECTION],
        "cc": [account.followers_url],
        "url": account.post_page_url(post.id),
    })
    if getattr(post, "image_url", None):
        note["attachment"] = [{
            "type": "Image",
            "url": post.image_url,
        }]
    return note

def create_activity_object(
    account: AccountConfig,
    post: Any,
) -> Dict[str, Any]:
    """Wrap a post's Note in a Create activity."""
    note = create_note_object(account, post)
    return {
        "id": f"{note['id']}#create",
        "type": "Create",
        "actor": account.actor_id,
        "published": note["published"],
        "to": note["to"],
        "cc": note["cc"],
        "object": note,
    }

def activity_response(
    data: Dict[str, Any],
    max_age: Optional[int] = None,
    media_type: str = ACTIVITY_JSON,
    status_code: int = 200,
) -> ORJSONResponse:
    headers = {}
    if max_age is not None:
        headers["Cache-Control"] = f"public, max-age={max_age}"
    return ORJSONResponse(data, status_code=status_code, headers=headers, media_type=media_type)

def wants_activity_json(accept: Optional[str]) -> bool:
    accept = accept or ""
    return ACTIVITY_JSON in accept or LD_JSON in accept
