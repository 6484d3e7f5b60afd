"""Remote procedure calls against the PostgreSQL store.

KPI logic lives in server-side functions. This module is the only place that
knows how to invoke them; everything above it talks to a ProcedureClient.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.session import get_session

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ProcedureClient(Protocol):
    """Anything that can run a named procedure with named parameters."""

    def call(self, name: str, params: dict[str, Any]) -> Any: ...


def require_identifier(value: str, kind: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ValueError(f"Invalid {kind} name: {value!r}")
    return value


def build_procedure_sql(name: str, params: dict[str, Any]) -> str:
    """Build a SELECT over a function call using PostgreSQL named notation.

    Example:
        >>> build_procedure_sql("analyze_issues", {"p_cliente_id": 1})
        'SELECT * FROM analyze_issues(p_cliente_id => :p_cliente_id)'
    """
    require_identifier(name, "procedure")
    args = ", ".join(f"{require_identifier(key, 'parameter')} => :{key}" for key in params)
    return f"SELECT * FROM {name}({args})"


def unwrap_procedure_rows(name: str, rows: list[dict[str, Any]]) -> Any:
    """Shape procedure output the way the dashboard consumes it.

    A scalar function (one column named after the function) yields its single
    value. A set-returning function yields a list of row dicts.
    """
    if len(rows) == 1 and list(rows[0].keys()) == [name]:
        return rows[0][name]
    return rows


class SqlProcedureClient:
    """ProcedureClient backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: Callable[[], AbstractContextManager[Session]] = get_session):
        self._session_factory = session_factory

    def call(self, name: str, params: dict[str, Any]) -> Any:
        sql = build_procedure_sql(name, params)
        logger.debug(f"[RPC] {name} params={params}")
        with self._session_factory() as session:
            result = session.execute(text(sql), params)
            rows = [dict(row) for row in result.mappings().all()]
        logger.debug(f"[RPC] {name} returned {len(rows)} row(s)")
        return unwrap_procedure_rows(name, rows)
