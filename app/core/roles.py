"""Session roles and role-based access decisions.

A SessionContext is created per actor session, loaded once through
SessionContext.load() and cleared on logout. Consumers receive the context
explicitly; there is no module-level role state.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import UserRole, Usuario


class Role(StrEnum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    COORDINATOR = "coordinator"
    MANAGER = "manager"


UNIVERSAL_ROLES = frozenset({Role.SUPERADMIN, Role.ADMIN})


class SessionStatus(StrEnum):
    LOADING = "loading"
    READY = "ready"


class AccessDecision(StrEnum):
    """Outcome of an access check.

    UNKNOWN means roles have not resolved yet; callers show a loading state.
    """

    UNKNOWN = "unknown"
    ALLOWED = "allowed"
    DENIED = "denied"


def parse_roles(raw: Iterable[str]) -> frozenset[Role]:
    """Convert stored role strings to Roles, dropping unknown values."""
    roles = set()
    for value in raw:
        try:
            roles.add(Role(value))
        except ValueError:
            logger.warning(f"Ignoring unknown role value: {value!r}")
    return frozenset(roles)


RoleLoader = Callable[[], tuple[int | None, int | None, Iterable[str]]]


@dataclass
class SessionContext:
    user_id: int | None = None
    client_id: int | None = None
    roles: frozenset[Role] = field(default_factory=frozenset)
    status: SessionStatus = SessionStatus.LOADING

    @property
    def loading(self) -> bool:
        return self.status is SessionStatus.LOADING

    def load(self, loader: RoleLoader) -> SessionContext:
        """Resolve roles through loader. Failures degrade to an empty role set.

        Args:
            loader: Callable returning (user_id, client_id, role strings)

        Returns:
            self, with status READY
        """
        try:
            user_id, client_id, raw_roles = loader()
            self.user_id = user_id
            self.client_id = client_id
            self.roles = parse_roles(raw_roles)
            logger.info(f"Session roles loaded: user_id={user_id}, roles={sorted(self.roles)}")
        except Exception as e:
            logger.warning(f"Error loading user roles, continuing without roles: {e}")
            self.roles = frozenset()
        self.status = SessionStatus.READY
        return self

    def clear(self) -> None:
        """Tear down the session (logout)."""
        self.user_id = None
        self.client_id = None
        self.roles = frozenset()
        self.status = SessionStatus.LOADING

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def has_any_role(self, required: Iterable[Role]) -> bool:
        return any(role in self.roles for role in required)

    def is_super_admin(self) -> bool:
        return self.has_role(Role.SUPERADMIN)

    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    def is_universal(self) -> bool:
        """Superadmin and admin bypass per-item permission lists."""
        return bool(self.roles & UNIVERSAL_ROLES)

    def authorize(self, required: Iterable[Role]) -> AccessDecision:
        if self.loading:
            return AccessDecision.UNKNOWN
        return AccessDecision.ALLOWED if self.has_any_role(required) else AccessDecision.DENIED


def load_roles_from_store(session: Session, email: str) -> tuple[int | None, int | None, list[str]]:
    """Read the user row and role grants for an email.

    Returns (None, None, []) when the email has no user row.
    """
    usuario = session.execute(select(Usuario).where(Usuario.email == email)).scalar_one_or_none()
    if usuario is None:
        logger.warning(f"No usuario row for email={email}")
        return None, None, []

    roles = session.execute(select(UserRole.role).where(UserRole.user_id == usuario.id)).scalars().all()
    return usuario.id, usuario.cliente_id, list(roles)
