from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class Usuario(Base):
    """Dashboard user.

    Stores:
    - id: numeric user ID
    - email: login email, matches the identity provider subject
    - cliente_id: client the user belongs to (None for cross-client staff)
    """

    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    cliente_id: Mapped[int | None] = mapped_column(Integer, nullable=True)


class UserRole(Base):
    """Role granted to a user. A user may hold several roles."""

    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("usuarios.id"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)


class MenuPermission(Base):
    """Per-role allow/deny flag for a menu item.

    Missing rows mean the item is allowed for that role.
    """

    __tablename__ = "menu_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role: Mapped[str] = mapped_column(String, nullable=False)
    menu_item: Mapped[str] = mapped_column(String, nullable=False)
    can_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("role", "menu_item", name="uq_menu_permissions_role_item"),
        Index("idx_menu_permissions_role", "role"),
    )
