"""Tests for SQL procedure invocation."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from app.db.procedures import SqlProcedureClient, build_procedure_sql, unwrap_procedure_rows


class TestBuildProcedureSql:
    def test_named_notation(self):
        sql = build_procedure_sql(
            "calculate_sla_compliance",
            {"p_cliente_id": 1, "p_start_date": "2025-01-01", "p_end_date": "2025-01-31"},
        )
        assert sql == (
            "SELECT * FROM calculate_sla_compliance("
            "p_cliente_id => :p_cliente_id, p_start_date => :p_start_date, p_end_date => :p_end_date)"
        )

    def test_no_params(self):
        assert build_procedure_sql("refresh_kpis", {}) == "SELECT * FROM refresh_kpis()"

    @pytest.mark.parametrize("name", ["drop table x;--", "1abc", "a.b", ""])
    def test_rejects_unsafe_procedure_names(self, name):
        with pytest.raises(ValueError):
            build_procedure_sql(name, {})

    def test_rejects_unsafe_parameter_names(self):
        with pytest.raises(ValueError):
            build_procedure_sql("analyze_issues", {"p_id) ; --": 1})


class TestUnwrapProcedureRows:
    def test_scalar_function(self):
        payload = {"health_score": 90}
        assert unwrap_procedure_rows("calculate_network_health", [{"calculate_network_health": payload}]) == payload

    def test_set_returning_function(self):
        rows = [{"period_date": "2025-01-01", "total_events": 3}, {"period_date": "2025-01-02", "total_events": 4}]
        assert unwrap_procedure_rows("get_performance_trends", rows) == rows

    def test_empty_set(self):
        assert unwrap_procedure_rows("get_route_performance", []) == []


def test_sql_client_executes_with_bound_params():
    session = MagicMock()
    session.execute.return_value.mappings.return_value.all.return_value = [
        {"analyze_issues": {"summary": {"total_count": 0}}}
    ]

    @contextmanager
    def session_factory():
        yield session

    client = SqlProcedureClient(session_factory=session_factory)
    result = client.call("analyze_issues", {"p_cliente_id": 9})

    assert result == {"summary": {"total_count": 0}}
    statement, params = session.execute.call_args.args
    assert str(statement) == "SELECT * FROM analyze_issues(p_cliente_id => :p_cliente_id)"
    assert params == {"p_cliente_id": 9}


def test_sql_client_propagates_errors():
    session = MagicMock()
    session.execute.side_effect = RuntimeError("function does not exist")

    @contextmanager
    def session_factory():
        yield session

    with pytest.raises(RuntimeError, match="function does not exist"):
        SqlProcedureClient(session_factory=session_factory).call("analyze_issues", {"p_cliente_id": 1})
