"""Tests for menu permission merging and role guards."""

from unittest.mock import Mock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from app.core.permissions import (
    MenuPermissions,
    load_menu_permissions,
    menu_access,
    merge_permission_rows,
    require_any_role,
)
from app.core.roles import AccessDecision, Role, SessionContext
from app.db.models import MenuPermission


def _context(*roles: str) -> SessionContext:
    return SessionContext().load(lambda: (1, None, list(roles)))


class TestMenuPermissions:
    def test_universal_allows_everything(self):
        assert MenuPermissions(universal=True).can_access("anything")

    def test_no_roles_denies(self):
        assert not MenuPermissions().can_access("dashboard")

    def test_unlisted_item_defaults_to_allowed(self):
        permissions = MenuPermissions(has_roles=True, items={"config": False})
        assert permissions.can_access("dashboard")
        assert not permissions.can_access("config")

    def test_merge_allows_if_any_role_allows(self):
        merged = merge_permission_rows([("config", False), ("config", True), ("reports", False)])
        assert merged == {"config": True, "reports": False}


class TestLoadMenuPermissions:
    def test_admin_skips_lookup(self):
        session = Mock()
        permissions = load_menu_permissions(session, _context("admin"))
        assert permissions.universal
        session.execute.assert_not_called()

    def test_superadmin_skips_lookup(self):
        session = Mock()
        assert load_menu_permissions(session, _context("superadmin")).can_access("usuarios")
        session.execute.assert_not_called()

    def test_reads_rows_for_held_roles(self, db_session):
        db_session.add_all(
            [
                MenuPermission(role="manager", menu_item="config", can_access=False),
                MenuPermission(role="manager", menu_item="dashboard", can_access=True),
                MenuPermission(role="coordinator", menu_item="reports", can_access=False),
            ]
        )
        db_session.flush()

        permissions = load_menu_permissions(db_session, _context("manager"))

        assert permissions.items == {"config": False, "dashboard": True}
        assert not permissions.can_access("config")
        assert permissions.can_access("reports")

    def test_multiple_roles_merge(self, db_session):
        db_session.add_all(
            [
                MenuPermission(role="manager", menu_item="config", can_access=False),
                MenuPermission(role="coordinator", menu_item="config", can_access=True),
            ]
        )
        db_session.flush()

        permissions = load_menu_permissions(db_session, _context("manager", "coordinator"))
        assert permissions.can_access("config")

    def test_load_failure_degrades_to_empty_map(self):
        session = Mock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        permissions = load_menu_permissions(session, _context("manager"))

        assert permissions.items == {}
        assert permissions.can_access("dashboard")


class TestMenuAccess:
    def test_unknown_while_loading(self):
        assert menu_access(SessionContext(), MenuPermissions(universal=True), "x") is AccessDecision.UNKNOWN

    def test_unknown_without_permissions(self):
        assert menu_access(_context("manager"), None, "x") is AccessDecision.UNKNOWN

    def test_decisions(self):
        permissions = MenuPermissions(has_roles=True, items={"config": False})
        context = _context("manager")
        assert menu_access(context, permissions, "config") is AccessDecision.DENIED
        assert menu_access(context, permissions, "dashboard") is AccessDecision.ALLOWED


class TestRequireAnyRole:
    def test_allowed_returns_context(self):
        context = _context("admin")
        assert require_any_role(context, [Role.ADMIN]) is context

    def test_denied_raises_403(self):
        with pytest.raises(HTTPException) as exc_info:
            require_any_role(_context("manager"), [Role.ADMIN])
        assert exc_info.value.status_code == 403

    def test_loading_raises_503(self):
        with pytest.raises(HTTPException) as exc_info:
            require_any_role(SessionContext(), [Role.ADMIN])
        assert exc_info.value.status_code == 503
