from tokenauth.db.engine import Base, create_session_factory
from tokenauth.db.models import RefreshSession, User

__all__ = ["Base", "RefreshSession", "User", "create_session_factory"]
