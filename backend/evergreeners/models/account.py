"""Account ORM model."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, TIMESTAMP, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from evergreeners.database import Base

GITHUB_PROVIDER_ID = "github"


class Account(Base):
    """Per-provider credential owned by a user."""

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint(
            "provider_id",
            "account_id",
            name="uq_accounts_provider_account",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    provider_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    account_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User id on the provider side",
    )
    access_token: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="AES-256-GCM encrypted OAuth access token",
    )
    scope: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # --- Relationships ---
    user: Mapped["User"] = relationship(  # noqa: F821
        back_populates="accounts",
    )

    def __repr__(self) -> str:
        return (
            f"<Account(id={self.id!r}, provider_id={self.provider_id!r}, "
            f"user_id={self.user_id!r})>"
        )
