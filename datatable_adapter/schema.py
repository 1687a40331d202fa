# datatable_adapter/schema.py
import re
from typing import Any, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

from .enum import OrderDirection

T = TypeVar("T")

_BRACKET = re.compile(r"\[([^\]]*)\]")
# indexes past this are dropped rather than padded out
_MAX_INDEX = 1000


class DataTablesSearch(BaseModel):
    value: str = ""
    regex: bool = False

    @field_validator("value", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return "" if value is None else value


class DataTablesColumn(BaseModel):
    data: Optional[Union[int, str]] = None
    name: Optional[str] = None
    searchable: bool = False
    orderable: bool = True
    search: DataTablesSearch = Field(default_factory=DataTablesSearch)

    @property
    def key(self) -> str:
        """The logical column name used to look up its mapping."""
        return "" if self.data is None else str(self.data)


class DataTablesOrder(BaseModel):
    column: int
    dir: OrderDirection = OrderDirection.ASC

    @field_validator("dir", mode="before")
    @classmethod
    def _lower(cls, value):
        return value.lower() if isinstance(value, str) else value


class DataTablesRequest(BaseModel):
    draw: int = 1
    start: int = 0
    length: int = 10
    search: DataTablesSearch = Field(default_factory=DataTablesSearch)
    order: List[DataTablesOrder] = []
    columns: List[DataTablesColumn] = []

    @field_validator("columns", mode="before")
    @classmethod
    def _fill_column_gaps(cls, value):
        # a skipped index still occupies its position; order[] refers to it
        if isinstance(value, list):
            return [{} if column is None else column for column in value]
        return value

    @field_validator("order", mode="before")
    @classmethod
    def _drop_order_gaps(cls, value):
        if isinstance(value, list):
            return [entry for entry in value if entry is not None]
        return value

    @property
    def search_value(self) -> str:
        return self.search.value.strip()

    @classmethod
    def from_query_params(
        cls, params: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]
    ) -> "DataTablesRequest":
        """
        Builds a request from the bracket-encoded parameters the table widget
        sends by default, e.g. ``columns[0][search][value]=Rob``.
        """
        return cls.model_validate(parse_bracket_params(params))


class DataTablesResponse(BaseModel, Generic[T]):
    draw: int
    recordsTotal: int
    recordsFiltered: int
    data: Optional[T]
    error: Optional[str] = None


def parse_bracket_params(
    params: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]
) -> dict:
    """Turns ``a[0][b]=v`` style pairs into nested dicts and lists."""
    pairs = params.items() if isinstance(params, Mapping) else params
    tree: dict = {}
    for key, value in pairs:
        head, bracket, rest = key.partition("[")
        parts = [head]
        if bracket:
            parts += _BRACKET.findall(bracket + rest)
        node = tree
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[parts[-1]] = value
    return _listify(tree)


def _listify(node):
    if not isinstance(node, dict):
        return node
    items = {key: _listify(value) for key, value in node.items()}
    if items and all(key.isdigit() for key in items):
        # keep the sent indexes: gaps are filled with None
        indexes = {int(key): value for key, value in items.items() if int(key) < _MAX_INDEX}
        listed = [None] * (max(indexes, default=-1) + 1)
        for index, value in indexes.items():
            listed[index] = value
        return listed
    return items
