"""User ORM model."""

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, Index, Integer, String, TIMESTAMP, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from evergreeners.database import Base


class User(Base):
    """Evergreeners user with profile fields and synced GitHub statistics.

    Rows are created by the external authentication service at sign-up.
    The ``github_*`` statistics are only written by the sync orchestrator.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index(
            "ix_users_github_sync_targets",
            "is_github_connected",
            "github_sync_enabled",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )
    email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    image: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Avatar URL or base64 data URI",
    )

    # --- Profile ---
    username: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )
    bio: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    website: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
    anonymous_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Alias shown on leaderboards while the profile is private",
    )

    # --- GitHub linkage ---
    github_username: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    is_github_connected: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    github_sync_enabled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
    github_synced_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )
    github_streak: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    github_total_commits: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    github_today_commits: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    github_contribution_data: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Contribution calendar, newest day first",
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
    accounts: Mapped[list["Account"]] = relationship(  # noqa: F821
        back_populates="user",
        cascade="all, delete-orphan",
    )
    sessions: Mapped[list["AuthSession"]] = relationship(  # noqa: F821
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, github_username={self.github_username!r})>"
