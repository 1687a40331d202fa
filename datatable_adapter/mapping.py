import logging
from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from sqlalchemy.sql.expression import ColumnElement

from .enum import OPERATOR_TABLE, Condition, Operator, SearchType
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _check_target(value: Any) -> Any:
    if isinstance(value, str):
        if not value.strip():
            raise ValueError("target expression must not be empty")
        return value
    if isinstance(value, ColumnElement) or hasattr(value, "__clause_element__"):
        return value
    raise ValueError(
        f"target expression must be a string or a SQLAlchemy expression, got {type(value).__name__}"
    )


class ColumnMapping(BaseModel):
    """
    How one logical table column is searched and sorted.

    ``model_column`` is either a column name / raw SQL fragment or a
    SQLAlchemy expression built by the caller (a model attribute,
    ``func.concat(...)``, a labelled case, ...).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, protected_namespaces=())

    condition: Condition = Condition.WHERE
    operator: Operator = Operator.EQ
    search_type: SearchType = SearchType.TEXT
    model_column: Any

    @field_validator("model_column")
    @classmethod
    def _target(cls, value):
        return _check_target(value)

    @field_validator("operator")
    @classmethod
    def _searchable_operator(cls, value):
        if value not in OPERATOR_TABLE:
            raise ValueError(f"operator {value.value!r} cannot be used to search a column")
        return value


class ExtraFilter(BaseModel):
    """A server-side predicate applied to every request, whatever the user searched."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    column: Any
    operator: Operator = Operator.EQ
    value: Any = None
    condition: Condition = Condition.WHERE

    @field_validator("column")
    @classmethod
    def _target(cls, value):
        return _check_target(value)

    @model_validator(mode="after")
    def _range(self):
        if self.operator is not Operator.BETWEEN:
            return self
        is_pair = isinstance(self.value, (list, tuple))
        if is_pair and len(self.value) != 2:
            raise ValueError("a BETWEEN filter needs a [low, high] value")
        # HAVING accepts a scalar, used as both bounds
        if not is_pair and self.condition is Condition.WHERE:
            raise ValueError("a BETWEEN filter needs a [low, high] value")
        return self


ColumnMap = Dict[str, ColumnMapping]


def load_column_map(raw: Mapping[str, Union[ColumnMapping, Mapping[str, Any]]]) -> ColumnMap:
    """
    Validates a column map once, at startup.

    Raises:
        ConfigurationError: an entry is missing ``model_column`` or declares an
            unknown condition or operator.
    """
    column_map: ColumnMap = {}
    for name, entry in raw.items():
        if isinstance(entry, ColumnMapping):
            column_map[name] = entry
            continue
        try:
            column_map[name] = ColumnMapping.model_validate(entry)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid mapping for column {name!r}: {exc}") from exc
    logger.debug("Loaded column map with %d columns: %s", len(column_map), ", ".join(column_map))
    return column_map


def load_filter(raw: Union[ExtraFilter, Mapping[str, Any]]) -> ExtraFilter:
    if isinstance(raw, ExtraFilter):
        return raw
    try:
        return ExtraFilter.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid extra filter {raw!r}: {exc}") from exc
