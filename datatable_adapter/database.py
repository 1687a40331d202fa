# datatable_adapter/database.py
from typing import Any

from sqlalchemy import Select, func, select


class DatabaseBackend:
    def __init__(self, db_session: Any):
        self.db_session = db_session

    async def get_total_records(self, stmt: Select) -> int:
        """Count the rows of the caller's statement (no search, no filters)"""
        raise NotImplementedError

    async def get_filtered_records(self, stmt: Select) -> int:
        """Count the rows left once search and filters are applied"""
        raise NotImplementedError

    async def execute_query(self, stmt: Select):
        """Executes the final, paginated statement"""
        raise NotImplementedError


class SQLAlchemyBackend(DatabaseBackend):
    """Runs statements on an ``AsyncSession``. Database errors are not caught."""

    async def get_total_records(self, stmt: Select) -> int:
        return await self._count(stmt)

    async def get_filtered_records(self, stmt: Select) -> int:
        return await self._count(stmt)

    async def execute_query(self, stmt: Select):
        result = await self.db_session.execute(stmt)
        if _selects_single_entity(stmt):
            return result.scalars().all()
        return [dict(row) for row in result.mappings().all()]

    async def _count(self, stmt: Select) -> int:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        result = await self.db_session.execute(count_stmt)
        return result.scalar_one()


def _selects_single_entity(stmt: Select) -> bool:
    descriptions = stmt.column_descriptions
    if len(descriptions) != 1:
        return False
    entity = descriptions[0].get("entity")
    return entity is not None and descriptions[0].get("expr") is entity
