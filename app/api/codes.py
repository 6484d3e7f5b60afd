"""Next sequential code for record-creation forms."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.dependencies.auth import get_session_context
from app.codes.generator import next_code
from app.core.permissions import require_any_role
from app.core.roles import Role, SessionContext
from app.db.session import get_db

router = APIRouter(prefix="/codes", tags=["codes"])

CODE_EDITOR_ROLES = (Role.SUPERADMIN, Role.ADMIN, Role.COORDINATOR)


class NextCodeResponse(BaseModel):
    resource: str
    code_field: str
    code: str


@router.get("/{resource}/next", response_model=NextCodeResponse)
def get_next_code(
    resource: str,
    code_field: str = "codigo",
    context: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    require_any_role(context, CODE_EDITOR_ROLES)
    try:
        code = next_code(db, resource, code_field)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return NextCodeResponse(resource=resource, code_field=code_field, code=code)
