import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import DatabaseBackend, SQLAlchemyBackend
from .enum import (
    DATE_COLUMNS,
    FILTER_OPERATOR_TABLE,
    OPERATOR_TABLE,
    Comparison,
    Condition,
    Operator,
)
from .mapping import ColumnMap, ColumnMapping, ExtraFilter, load_column_map, load_filter
from .plan import OrderClause, Predicate, QueryPlan
from .schema import DataTablesColumn, DataTablesRequest
from .utils import parse_search_date

logger = logging.getLogger(__name__)

RequestData = Union[DataTablesRequest, Mapping[str, Any]]
FilterData = Union[ExtraFilter, Mapping[str, Any]]


class DataTableAdapter:
    date_columns = DATE_COLUMNS

    def __init__(
        self,
        db_session: Optional[AsyncSession],
        statement: Select,
        request_data: RequestData,
        column_map: Mapping[str, Any],
        filters: Optional[Sequence[FilterData]] = None,
        db_backend: Optional[DatabaseBackend] = None,
    ):
        """
        Builds the search, filter and ordering conditions for one table request
        and applies them to ``statement``.

        Args:
            db_session: AsyncSession the statements are run on.
            statement: Select already scoped to the table (and joins) to page through.
            request_data: The table widget request, parsed or as sent.
            column_map: Logical column name -> ColumnMapping, see ``load_column_map``.
            filters: Extra server-side filters, applied once and drained.
            db_backend: Overrides the SQLAlchemy backend built from ``db_session``.
        """
        if not isinstance(request_data, DataTablesRequest):
            request_data = DataTablesRequest.model_validate(request_data)
        if not all(isinstance(entry, ColumnMapping) for entry in column_map.values()):
            column_map = load_column_map(column_map)

        self.request = request_data
        self.column_map: ColumnMap = dict(column_map)
        self.filters: List[ExtraFilter] = [load_filter(f) for f in filters or []]
        self.db_backend = db_backend or SQLAlchemyBackend(db_session)

        self.columns = request_data.columns
        self.search_value = request_data.search_value
        self.start = request_data.start
        self.length = request_data.length
        self.draw = request_data.draw
        self.order_by_columns = request_data.order

        self.base_statement = statement
        self.statement = statement
        self.records_total: Optional[int] = None
        self.records_filtered: Optional[int] = None

        self.plan = QueryPlan()
        self.set_conditions()

    @classmethod
    async def create(
        cls,
        db_session: Optional[AsyncSession],
        statement: Select,
        request_data: RequestData,
        column_map: Mapping[str, Any],
        filters: Optional[Sequence[FilterData]] = None,
        db_backend: Optional[DatabaseBackend] = None,
    ) -> "DataTableAdapter":
        """Constructs the adapter and counts the unfiltered rows straight away."""
        adapter = cls(db_session, statement, request_data, column_map, filters, db_backend)
        await adapter.set_records_total()
        return adapter

    async def render(self, with_offset: bool = True) -> dict:
        """
        Runs the query and returns the envelope the table widget expects.
        Database errors propagate as raised.
        """
        if self.records_total is None:
            await self.set_records_total()

        await self.set_records_filtered()

        if with_offset:
            self.set_offset()

        data = await self.db_backend.execute_query(self.statement)

        logger.debug(
            "draw=%s total=%s filtered=%s returned=%s",
            self.draw,
            self.records_total,
            self.records_filtered,
            len(data),
        )
        return {
            "data": data,
            "draw": self.draw,
            "recordsTotal": self.records_total,
            "recordsFiltered": self.records_filtered,
        }

    def set_conditions(self):
        """
        Matches the request columns against the column map and builds the
        where/having/order conditions, then applies them to the statement.
        """
        self.set_search_conditions()
        self.set_having_filters()
        logger.debug("Built %d conditions for draw=%s", len(self.plan), self.draw)
        self.statement = self.plan.apply(self.statement)

    def set_search_conditions(self):
        date_range = parse_search_date(self.search_value) if self.search_value else None

        for index, column in enumerate(self.columns):
            mapping = self.column_map.get(column.key)
            if mapping is None:
                continue

            self.set_order(index, mapping)

            if column.searchable and self.search_value:
                self.add_search_condition(column, mapping, date_range)

        # -- WHERE extra filters, AND'd with the search group --
        pending = []
        for extra in self.filters:
            if extra.condition == Condition.WHERE:
                self.plan.where.append(self.where_filter(extra))
            else:
                pending.append(extra)
        self.filters = pending

    def add_search_condition(self, column: DataTablesColumn, mapping: ColumnMapping, date_range):
        comparison = OPERATOR_TABLE[mapping.operator]
        value = self.filter_search_value(mapping.operator)

        if mapping.condition == Condition.WHERE:
            if date_range and column.key in self.date_columns:
                self.plan.search.append(
                    Predicate(mapping.model_column, Comparison.BETWEEN, date_range)
                )
            elif not date_range:
                self.plan.search.append(Predicate(mapping.model_column, comparison, value))
            # a date typed against any other column adds nothing for it
        elif mapping.condition == Condition.HAVING:
            self.plan.having.append(Predicate(mapping.model_column, comparison, value))

    def set_having_filters(self):
        # anything still pending after the WHERE pass is treated here and drained
        while self.filters:
            extra = self.filters.pop(0)
            if extra.condition == Condition.HAVING:
                comparison = FILTER_OPERATOR_TABLE.get(extra.operator, Comparison.EQ)
                self.plan.having.append(Predicate(extra.column, comparison, extra.value))

    def set_order(self, index: int, mapping: ColumnMapping):
        for order in self.order_by_columns:
            if order.column == index:
                self.plan.order_by.append(OrderClause(mapping.model_column, order.dir))

    def filter_search_value(self, operator: Operator) -> str:
        value = self.search_value
        if operator == Operator.LIKE_LOOSE:
            value = f"%{value}%"
        return value

    @staticmethod
    def where_filter(extra: ExtraFilter) -> Predicate:
        if extra.operator == Operator.BETWEEN:
            return Predicate(extra.column, Comparison.BETWEEN, tuple(extra.value))
        elif extra.operator == Operator.IS_NULL:
            return Predicate(extra.column, Comparison.IS_NULL)
        elif extra.operator == Operator.IS_NOT_NULL:
            return Predicate(extra.column, Comparison.IS_NOT_NULL)
        elif extra.operator == Operator.LIKE_LOOSE:
            return Predicate(extra.column, Comparison.LIKE, f"%{extra.value}%")
        # every other operator is plain equality
        return Predicate(extra.column, Comparison.EQ, extra.value)

    def set_offset(self):
        """Applies OFFSET start LIMIT length; a negative length means every row."""
        self.statement = self.statement.offset(self.start)
        if self.length >= 0:
            self.statement = self.statement.limit(self.length)

    async def set_records_total(self):
        self.records_total = await self.db_backend.get_total_records(self.base_statement)

    async def set_records_filtered(self):
        self.records_filtered = await self.db_backend.get_filtered_records(self.statement)


async def paginate(
    db_session: Optional[AsyncSession],
    statement: Select,
    request_data: RequestData,
    column_map: Mapping[str, Any],
    filters: Optional[Sequence[FilterData]] = None,
    with_offset: bool = True,
    db_backend: Optional[DatabaseBackend] = None,
) -> dict:
    """One-shot helper: build the adapter, count, page and execute."""
    adapter = await DataTableAdapter.create(
        db_session, statement, request_data, column_map, filters, db_backend
    )
    return await adapter.render(with_offset=with_offset)
