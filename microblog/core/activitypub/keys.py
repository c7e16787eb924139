"""RSA key utilities for ActivityPub.

Keys are stored as JSON Web Keys in the ``account_keys`` table and converted
to PEM (for the actor document) or to a signing handle (for HTTP Signatures)
when loaded.
"""

import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from microblog.core.errors import KeyAlreadyExistsError
from microblog.models.activitypub import AccountKey

logger = logging.getLogger(__name__)

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

def _b64url_uint(value: int) -> str:
    length = max(1, (value.bit_length() + 7) // 8)
    return base64.urlsafe_b64encode(value.to_bytes(length, "big")).rstrip(b"=").decode("ascii")

def _uint_b64url(value: str) -> int:
    padded = value + "=" * (-len(value) % 4)
    return int.from_bytes(base64.urlsafe_b64decode(padded), "big")

def public_key_to_jwk(public_key: rsa.RSAPublicKey) -> Dict[str, Any]:
    numbers = public_key.public_numbers()
    return {
        "kty": "RSA",
        "alg": "RS256",
        "e": _b64url_uint(numbers.e),
        "n": _b64url_uint(numbers.n),
        "ext": True,
        "key_ops": ["verify"],
    }

def private_key_to_jwk(private_key: rsa.RSAPrivateKey) -> Dict[str, Any]:
    numbers = private_key.private_numbers()
    jwk = public_key_to_jwk(private_key.public_key())
    jwk.update({
        "d": _b64url_uint(numbers.d),
        "p": _b64url_uint(numbers.p),
        "q": _b64url_uint(numbers.q),
        "dp": _b64url_uint(numbers.dmp1),
        "dq": _b64url_uint(numbers.dmq1),
        "qi": _b64url_uint(numbers.iqmp),
        "key_ops": ["sign"],
    })
    return jwk

def jwk_to_public_key(jwk: Dict[str, Any]) -> rsa.RSAPublicKey:
    if jwk.get("kty") != "RSA":
        raise ValueError(f"Unsupported key type: {jwk.get('kty')}")
    return rsa.RSAPublicNumbers(_uint_b64url(jwk["e"]), _uint_b64url(jwk["n"])).public_key()

def jwk_to_private_key(jwk: Dict[str, Any]) -> rsa.RSAPrivateKey:
    if jwk.get("kty") != "RSA":
        raise ValueError(f"Unsupported key type: {jwk.get('kty')}")
    public_numbers = rsa.RSAPublicNumbers(_uint_b64url(jwk["e"]), _uint_b64url(jwk["n"]))
    d = _uint_b64url(jwk["d"])
    p = _uint_b64url(jwk["p"])
    q = _uint_b64url(jwk["q"])
    dmp1 = _uint_b64url(jwk["dp"]) if "dp" in jwk else rsa.rsa_crt_dmp1(d, p)
    dmq1 = _uint_b64url(jwk["dq"]) if "dq" in jwk else rsa.rsa_crt_dmq1(d, q)
    iqmp = _uint_b64url(jwk["qi"]) if "qi" in jwk else rsa.rsa_crt_iqmp(p, q)
    return rsa.RSAPrivateNumbers(p, q, d, dmp1, dmq1, iqmp, public_numbers).private_key()

def public_key_to_pem(public_key: rsa.RSAPublicKey) -> str:
    """SPKI PEM, 64 characters per line, without a trailing newline."""
    pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.decode("ascii").strip()

class SigningKey:
    """Sign-only handle for RSASSA-PKCS1-v1_5 with SHA-256."""

    __slots__ = ("_key",)

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self._key = private_key

    def sign(self, data: bytes) -> bytes:
        return self._key.sign(data, padding.PKCS1v15(), hashes.SHA256())

    def __repr__(self) -> str:
        return "<SigningKey rsa-sha256>"

class KeyManager:
    """Generates, stores and loads the key pair of an account."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def generate_and_store(self, owner_id: str) -> None:
        """Create a 2048-bit key pair for ``owner_id``.

        Raises ``KeyAlreadyExistsError`` when the owner already has a key; the
        unique constraint on ``user_id`` decides concurrent calls.
        """
        private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
        row = AccountKey(
            user_id=owner_id,
            rsa_public_key=json.dumps(public_key_to_jwk(private_key.public_key())),
            rsa_private_key=json.dumps(private_key_to_jwk(private_key)),
            created_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )
        async with self.session_factory() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise KeyAlreadyExistsError(f"Key already exists for {owner_id}") from e
        logger.info("Generated RSA key pair for %s", owner_id)

    async def _load(self, owner_id: str) -> Optional[AccountKey]:
        async with self.session_factory() as session:
            result = await session.execute(select(AccountKey).where(AccountKey.user_id == owner_id))
            return result.scalar_one_or_none()

    async def get_public_key_pem(self, owner_id: str) -> Optional[str]:
        row = await self._load(owner_id)
        if row is None:
            return None
        return public_key_to_pem(jwk_to_public_key(json.loads(row.rsa_public_key)))

    async def get_private_key(self, owner_id: str) -> Optional[SigningKey]:
        row = await self._load(owner_id)
        if row is None:
            return None
        return SigningKey(jwk_to_private_key(json.loads(row.rsa_private_key)))
