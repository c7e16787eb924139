"""ORM models for the account key and the read-only post table."""
from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

class Base(DeclarativeBase):
    pass

class AccountKey(Base):
    """RSA key pair of the local account, both halves stored as JWK JSON."""
    __tablename__ = "account_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    rsa_public_key: Mapped[str] = mapped_column(Text, nullable=False)
    rsa_private_key: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String(64), nullable=False)

class Post(Base):
    """Microblog post, written by the posting API and only read here."""
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "YYYY-MM-DD HH:MM:SS" or ISO-8601 text
    created_at: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
