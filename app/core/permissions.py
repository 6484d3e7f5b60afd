"""Permission guards for role-gated dashboard views.

Superadmin and admin see everything. Other roles are filtered by the
menu_permissions table, where an item is only hidden if it is explicitly
denied. Nothing here is a server-side security boundary for the KPI data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.roles import AccessDecision, Role, SessionContext
from app.db.models import MenuPermission


@dataclass(frozen=True)
class MenuPermissions:
    """Merged menu permissions for the roles of one session.

    Args:
        universal: Session holds superadmin or admin
        has_roles: Session holds at least one role
        items: menu_item -> can_access, merged across held roles
    """

    universal: bool = False
    has_roles: bool = False
    items: dict[str, bool] = field(default_factory=dict)

    def can_access(self, menu_item: str) -> bool:
        if self.universal:
            return True
        if not self.has_roles:
            return False
        return self.items.get(menu_item, True)


def merge_permission_rows(rows: Iterable[tuple[str, bool]]) -> dict[str, bool]:
    """Merge (menu_item, can_access) rows from several roles.

    An item stays allowed if any role allows it.
    """
    merged: dict[str, bool] = {}
    for menu_item, can_access in rows:
        merged[menu_item] = merged.get(menu_item, False) or bool(can_access)
    return merged


def load_menu_permissions(session: Session, context: SessionContext) -> MenuPermissions:
    """Load menu permissions for the roles held by context.

    Load failures degrade to an empty permission map (every item allowed for
    the held roles).
    """
    if context.is_universal():
        return MenuPermissions(universal=True, has_roles=True)
    if not context.roles:
        return MenuPermissions()

    role_values = sorted(role.value for role in context.roles)
    try:
        rows = session.execute(
            select(MenuPermission.menu_item, MenuPermission.can_access).where(MenuPermission.role.in_(role_values))
        ).all()
    except SQLAlchemyError as e:
        logger.warning(f"Error loading menu permissions for roles={role_values}: {e}")
        return MenuPermissions(has_roles=True)

    items = merge_permission_rows((row.menu_item, row.can_access) for row in rows)
    logger.debug(f"Loaded {len(items)} menu permission(s) for roles={role_values}")
    return MenuPermissions(has_roles=True, items=items)


def menu_access(context: SessionContext, permissions: MenuPermissions | None, menu_item: str) -> AccessDecision:
    """Decide access to a menu item. UNKNOWN until roles and permissions are loaded."""
    if context.loading or permissions is None:
        return AccessDecision.UNKNOWN
    return AccessDecision.ALLOWED if permissions.can_access(menu_item) else AccessDecision.DENIED


def require_any_role(context: SessionContext, required: Iterable[Role]) -> SessionContext:
    """Require that the session holds one of the required roles.

    Raises:
        HTTPException: 503 if roles are still loading
        HTTPException: 403 if none of the required roles is held
    """
    required = list(required)
    decision = context.authorize(required)
    if decision is AccessDecision.UNKNOWN:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User roles are still loading",
        )
    if decision is AccessDecision.DENIED:
        logger.info(f"Access denied: user_id={context.user_id} lacks any of {[r.value for r in required]}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient role",
        )
    return context
