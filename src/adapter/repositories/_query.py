"""Helpers shared by the filtered find() implementations"""

from typing import Any, Optional, Sequence

from sqlalchemy import case, func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.domain.entities import Priority


def priority_rank(column: Any):
    """Sort key putting LOW < MEDIUM < HIGH < CRITICAL instead of alphabetical"""
    return case({p: rank for rank, p in enumerate(Priority)}, value=column)


def where_in(stmt, column: Any, values: Optional[Sequence[Any]]):
    if values:
        stmt = stmt.where(col(column).in_(list(values)))
    return stmt


def where_range(stmt, column: Any, start=None, end=None):
    if start is not None:
        stmt = stmt.where(col(column) >= start)
    if end is not None:
        stmt = stmt.where(col(column) <= end)
    return stmt


def ordered(stmt, column: Any, direction: str):
    return stmt.order_by(column.desc() if direction == "desc" else column.asc())


async def count_rows(session: AsyncSession, stmt) -> int:
    """Total rows matched by stmt, ignoring any ordering or paging"""
    total_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    result = await session.exec(total_stmt)
    return result.one()
