"""Role and menu visibility for the current user.

The front end mounts role-gated views from these responses. They are
display decisions only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.dependencies.auth import get_session_context
from app.core.permissions import load_menu_permissions, menu_access
from app.core.roles import AccessDecision, Role, SessionContext
from app.db.session import get_db

router = APIRouter(prefix="/me", tags=["me"])


class RolesResponse(BaseModel):
    user_id: int | None
    client_id: int | None
    roles: list[Role]
    is_super_admin: bool
    is_admin: bool


class MenuPermissionsResponse(BaseModel):
    universal: bool
    permissions: dict[str, bool]
    menu_item: str | None = None
    decision: AccessDecision | None = None


@router.get("/roles", response_model=RolesResponse)
def roles(context: SessionContext = Depends(get_session_context)):
    return RolesResponse(
        user_id=context.user_id,
        client_id=context.client_id,
        roles=sorted(context.roles),
        is_super_admin=context.is_super_admin(),
        is_admin=context.is_admin(),
    )


@router.get("/menu-permissions", response_model=MenuPermissionsResponse)
def menu_permissions(
    menu_item: str | None = None,
    context: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    permissions = load_menu_permissions(db, context)
    decision = menu_access(context, permissions, menu_item) if menu_item else None
    return MenuPermissionsResponse(
        universal=permissions.universal,
        permissions=permissions.items,
        menu_item=menu_item,
        decision=decision,
    )
