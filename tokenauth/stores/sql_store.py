"""SQL auth stores using SQLAlchemy."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tokenauth.db.models import RefreshSession, User
from tokenauth.exceptions import EmailTaken, StoreUnavailable, SubjectNotFound, UsernameTaken


class SQLStoreBase:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()


class SQLUserStore(SQLStoreBase):
    """User store backed by any SQLAlchemy database."""

    async def get_by_email(self, email: str) -> dict | None:
        return self._get_one(User.email == email.lower())

    async def get_by_username(self, username: str) -> dict | None:
        return self._get_one(User.username == username)

    async def get_by_id(self, user_id: str) -> dict | None:
        return self._get_one(User.id == user_id)

    def _get_one(self, criterion) -> dict | None:
        try:
            with self._get_session() as db:
                user = db.execute(select(User).where(criterion)).scalar_one_or_none()
                return user.to_dict() if user else None
        except SQLAlchemyError as exc:
            raise StoreUnavailable("User store unavailable") from exc

    async def create_user(self, data: dict) -> dict:
        email = data["email"].lower()
        try:
            with self._get_session() as db:
                if db.execute(select(User.id).where(User.email == email)).first():
                    raise EmailTaken()
                if db.execute(select(User.id).where(User.username == data["username"])).first():
                    raise UsernameTaken()
                user = User(
                    id=uuid4().hex,
                    email=email,
                    username=data["username"],
                    hashed_password=data["hashed_password"],
                    is_verified=bool(data.get("is_verified", False)),
                )
                db.add(user)
                try:
                    db.commit()
                except IntegrityError as exc:
                    # Lost a race with a concurrent registration
                    db.rollback()
                    raise EmailTaken() from exc
                db.refresh(user)
                return user.to_dict()
        except SQLAlchemyError as exc:
            raise StoreUnavailable("User store unavailable") from exc

    async def update_user(self, user_id: str, updates: dict) -> dict:
        try:
            with self._get_session() as db:
                user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
                if not user:
                    raise SubjectNotFound()
                for key, value in updates.items():
                    if key in {"id", "email", "username"}:
                        continue
                    if hasattr(user, key):
                        setattr(user, key, value)
                db.commit()
                db.refresh(user)
                return user.to_dict()
        except SQLAlchemyError as exc:
            raise StoreUnavailable("User store unavailable") from exc


class SQLSessionStore(SQLStoreBase):
    """Refresh-token SessionSets backed by the ``refresh_sessions`` table."""

    async def add(self, subject_id: str, token: str) -> None:
        try:
            with self._get_session() as db:
                owner = db.execute(
                    select(RefreshSession.user_id).where(RefreshSession.token == token)
                ).scalar_one_or_none()
                if owner == subject_id:
                    return
                if owner is not None:
                    raise ValueError("Refresh token already bound to another subject")
                db.add(RefreshSession(token=token, user_id=subject_id))
                try:
                    db.commit()
                except IntegrityError:
                    # Same token inserted concurrently; fine if it is ours
                    db.rollback()
                    owner = db.execute(
                        select(RefreshSession.user_id).where(RefreshSession.token == token)
                    ).scalar_one_or_none()
                    if owner != subject_id:
                        raise
        except SQLAlchemyError as exc:
            raise StoreUnavailable() from exc

    async def remove_one(self, subject_id: str, token: str) -> bool:
        try:
            with self._get_session() as db:
                result = db.execute(
                    delete(RefreshSession).where(
                        RefreshSession.token == token,
                        RefreshSession.user_id == subject_id,
                    )
                )
                db.commit()
                return result.rowcount == 1
        except SQLAlchemyError as exc:
            raise StoreUnavailable() from exc

    async def remove_all(self, subject_id: str) -> int:
        try:
            with self._get_session() as db:
                result = db.execute(
                    delete(RefreshSession).where(RefreshSession.user_id == subject_id)
                )
                db.commit()
                return result.rowcount or 0
        except SQLAlchemyError as exc:
            raise StoreUnavailable() from exc

    async def find_subject_by_token(self, token: str) -> str | None:
        try:
            with self._get_session() as db:
                return db.execute(
                    select(RefreshSession.user_id).where(RefreshSession.token == token)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreUnavailable() from exc

    async def list_tokens(self, subject_id: str) -> set[str]:
        try:
            with self._get_session() as db:
                rows = db.execute(
                    select(RefreshSession.token).where(RefreshSession.user_id == subject_id)
                ).scalars()
                return set(rows)
        except SQLAlchemyError as exc:
            raise StoreUnavailable() from exc
