"""ORM models package.

Importing this module ensures every model is registered with the
SQLAlchemy ``Base.metadata`` so that Alembic autogenerate can detect
all tables.
"""

from evergreeners.models.account import GITHUB_PROVIDER_ID, Account
from evergreeners.models.auth_session import AuthSession
from evergreeners.models.user import User

__all__ = [
    "GITHUB_PROVIDER_ID",
    "Account",
    "AuthSession",
    "User",
]
