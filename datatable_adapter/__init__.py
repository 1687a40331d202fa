# datatable_adapter/__init__.py
from .core import DataTableAdapter, paginate
from .database import DatabaseBackend, SQLAlchemyBackend
from .enum import Comparison, Condition, Operator, OrderDirection, SearchType
from .exceptions import ConfigurationError, DataAccessError, DataTablesError
from .factory import DataTableFactory
from .mapping import ColumnMapping, ExtraFilter, load_column_map
from .plan import OrderClause, Predicate, QueryPlan
from .render import render_table
from .schema import (
    DataTablesColumn,
    DataTablesOrder,
    DataTablesRequest,
    DataTablesResponse,
    DataTablesSearch,
)
from .utils import build_condition, parse_search_date

__version__ = "0.2.0"

__all__ = [
    "DataTableAdapter",
    "paginate",
    "DatabaseBackend",
    "SQLAlchemyBackend",
    "Comparison",
    "Condition",
    "Operator",
    "OrderDirection",
    "SearchType",
    "ConfigurationError",
    "DataAccessError",
    "DataTablesError",
    "DataTableFactory",
    "ColumnMapping",
    "ExtraFilter",
    "load_column_map",
    "OrderClause",
    "Predicate",
    "QueryPlan",
    "render_table",
    "DataTablesColumn",
    "DataTablesOrder",
    "DataTablesRequest",
    "DataTablesResponse",
    "DataTablesSearch",
    "build_condition",
    "parse_search_date",
]
