import re
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Optional, Tuple

from dateutil import parser as date_parser
from sqlalchemy import literal, literal_column

from .enum import Comparison
from .exceptions import ConfigurationError

# year-first or day/month-first dates, optionally followed by a time
_DATE_SHAPE = re.compile(
    r"^(\d{4}[-/.]\d{1,2}[-/.]\d{1,2}|\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4})([ T].*)?$"
)


def resolve_target(target: Any):
    """
    Strings are column names or raw SQL fragments and become a
    ``literal_column``; SQLAlchemy expressions are used as given.
    """
    if isinstance(target, str):
        return literal_column(target)
    return target


def bind_value(column, value: Any):
    """
    Binds ``value`` with the target's type when the value fits it (numeric
    text against a numeric column is converted), otherwise with the value's
    own type, so text typed against a date column still binds as text.
    """
    column_type = getattr(column, "type", None)
    try:
        python_type = column_type.python_type
    except (AttributeError, NotImplementedError):
        return literal(value)

    if isinstance(value, python_type):
        return literal(value, column_type)
    if isinstance(value, str) and python_type in (int, float, Decimal):
        try:
            return literal(python_type(value.strip()), column_type)
        except (ValueError, ArithmeticError):
            pass
    return literal(value)


def build_condition(target: Any, comparison: Comparison, value: Any = None):
    """
    Build a SQLAlchemy condition for one target expression.
    BETWEEN takes a (low, high) pair; a scalar is used as both bounds.
    """
    column = resolve_target(target)

    if comparison == Comparison.EQ:
        if value is None:
            return column.is_(None)
        return column == bind_value(column, value)
    elif comparison == Comparison.GT:
        return column > bind_value(column, value)
    elif comparison == Comparison.LT:
        return column < bind_value(column, value)
    elif comparison == Comparison.LIKE:
        return column.like(literal(value))
    elif comparison == Comparison.BETWEEN:
        if isinstance(value, (list, tuple)):
            low, high = value
        else:
            low = high = value
        return column.between(bind_value(column, low), bind_value(column, high))
    elif comparison == Comparison.IS_NULL:
        return column.is_(None)
    elif comparison == Comparison.IS_NOT_NULL:
        return column.is_not(None)

    raise ConfigurationError(f"Unsupported comparison: {comparison!r}")


def parse_search_date(value: str) -> Optional[Tuple[datetime, datetime]]:
    """
    Returns the start and end of the day named by ``value``, or None when the
    search text is not a date.
    """
    value = (value or "").strip()
    if not _DATE_SHAPE.match(value):
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None

    day = parsed.date()
    return datetime.combine(day, time.min), datetime.combine(day, time.max)
