"""Sequential 4-digit codes for configuration records (carriers, nodes, ...).

The next code is read-then-computed; two concurrent creators can receive the
same value. Uniqueness is left to the table's own constraint.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import Select, column, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.procedures import require_identifier

CODE_WIDTH = 4


def format_code(number: int, width: int = CODE_WIDTH) -> str:
    """Zero-pad number to width. Wider numbers are never truncated."""
    return str(number).zfill(width)


def _parse_base(value: object) -> int:
    if value is None:
        return 0
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning(f"Existing code {value!r} is not numeric, restarting from 0")
        return 0


def last_code_statement(resource_name: str, code_field: str) -> Select:
    """Select the highest code, with NULL codes sorted after every real one."""
    resource = table(resource_name, column(code_field))
    code_col = resource.c[code_field]
    return select(code_col).order_by(code_col.desc().nulls_last()).limit(1)


def next_code(session: Session, resource_name: str, code_field: str = "codigo") -> str:
    """Compute the next code for a table.

    Args:
        session: Database session
        resource_name: Table holding the codes
        code_field: Column holding the code (default "codigo")

    Returns:
        The highest existing code plus one, zero-padded to 4 digits. "0001"
        when the table is empty, the query fails or the code is not numeric.
    """
    require_identifier(resource_name, "table")
    require_identifier(code_field, "column")

    try:
        last_code = session.execute(last_code_statement(resource_name, code_field)).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching last code from {resource_name}.{code_field}: {e}")
        session.rollback()
        return format_code(1)

    code = format_code(_parse_base(last_code) + 1)
    logger.debug(f"Next code for {resource_name}.{code_field}: {code}")
    return code
