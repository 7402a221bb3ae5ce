"""SQLAlchemy ORM models — single source of truth for the database schema.

Two groups of tables share one metadata:
- suppliers: the business entity served by the CRUD endpoints
- users, user_claims, roles, user_roles: the identity store consumed
  by registration, login and token issuing

UUID primary keys use the portable ``Uuid`` type so the same models run
on PostgreSQL (native uuid) and SQLite (char(32)).
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


# ══════════════════════════════════════════════════════════════
# Suppliers
# ══════════════════════════════════════════════════════════════


class Supplier(Base):
    """A supplier ("fornecedor"). Its id never changes once assigned."""

    __tablename__ = "suppliers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    document: Mapped[str] = mapped_column(String(20), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


# ══════════════════════════════════════════════════════════════
# Identity store
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A registered identity. Email doubles as the user name."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    email_confirmed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class UserClaim(Base):
    """A claim (type/value pair) granted to a user.

    Claims are copied into every token issued for the user and drive
    policy checks such as the delete-supplier permission.
    """

    __tablename__ = "user_claims"
    __table_args__ = (
        UniqueConstraint("user_id", "claim_type", name="uq_user_claims_user_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    claim_type: Mapped[str] = mapped_column(String(255), nullable=False)
    claim_value: Mapped[str] = mapped_column(String(255), nullable=False)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
