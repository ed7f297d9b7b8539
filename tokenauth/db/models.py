"""
Auth models.

User: identity, credential hash and email verification flag
RefreshSession: one row per currently valid refresh token
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from tokenauth.db.engine import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _epoch(value: datetime | None) -> int | None:
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite hands back naive datetimes
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    hashed_password = Column(Text, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    refresh_sessions = relationship(
        "RefreshSession", back_populates="user", cascade="all, delete-orphan"
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "hashed_password": self.hashed_password,
            "is_verified": bool(self.is_verified),
            "created_at": _epoch(self.created_at),
            "updated_at": _epoch(self.updated_at),
        }

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class RefreshSession(Base):
    """
    A refresh token that is currently valid for its user.

    The token itself is the primary key, so no two users can ever hold the
    same value; deleting the row revokes the token.
    """
    __tablename__ = "refresh_sessions"

    token = Column(String(1024), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    user = relationship("User", back_populates="refresh_sessions")

    def __repr__(self):
        return f"<RefreshSession(token={self.token[:8]}..., user_id={self.user_id})>"
