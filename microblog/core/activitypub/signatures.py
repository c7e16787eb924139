"""HTTP Signatures (draft-cavage) for outbound ActivityPub deliveries."""

import base64
import hashlib
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from microblog.core.activitypub.keys import SigningKey
from microblog.core.activitypub.utils import ACTIVITY_JSON

# Verifiers rebuild the signing string in this order
SIGNED_HEADERS: List[str] = ["(request-target)", "host", "date", "digest"]

def http_date(now: Optional[datetime] = None) -> str:
    """RFC 1123 date, e.g. ``Tue, 02 Dec 2025 16:42:15 GMT``."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_datetime(now.astimezone(timezone.utc), usegmt=True)

def body_digest(body: bytes) -> str:
    return "SHA-256=" + base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")

def request_target(target_url: str) -> str:
    parts = urlsplit(target_url)
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return f"post {path}"

def build_signing_string(target_url: str, host: str, date: str, digest: str) -> str:
    return "\n".join([
        f"(request-target): {request_target(target_url)}",
        f"host: {host}",
        f"date: {date}",
        f"digest: {digest}",
    ])

def sign_request(
    target_url: str,
    body: bytes,
    signing_key: SigningKey,
    key_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Build the signed header set for POSTing ``body`` to ``target_url``."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    host = urlsplit(target_url).netloc
    headers = {
        "Host": host,
        "Date": http_date(now),
        "Content-Type": ACTIVITY_JSON,
        "Digest": body_digest(body),
    }

    signing_string = build_signing_string(target_url, host, headers["Date"], headers["Digest"])
    signature = base64.b64encode(signing_key.sign(signing_string.encode("utf-8"))).decode("ascii")

    headers["Signature"] = ",".join([
        f'keyId="{key_id}"',
        'algorithm="rsa-sha256"',
        f'headers="{" ".join(SIGNED_HEADERS)}"',
        f'signature="{signature}"',
    ])
    return headers
