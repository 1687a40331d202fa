from enum import Enum


class Condition(str, Enum):
    WHERE = "where"
    HAVING = "having"


class Operator(str, Enum):
    EQ = "="
    GT = ">"
    LT = "<"
    IS_NULL = "null"
    IS_NOT_NULL = "not_null"
    LIKE_STRICT = "like"
    LIKE_LOOSE = "like_loose"
    BETWEEN = "between"


class SearchType(str, Enum):
    TEXT = "text"


class Comparison(str, Enum):
    EQ = "="
    GT = ">"
    LT = "<"
    LIKE = "LIKE"
    BETWEEN = "BETWEEN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Operators a column mapping may declare for the global search.
OPERATOR_TABLE = {
    Operator.LIKE_STRICT: Comparison.LIKE,
    Operator.LIKE_LOOSE: Comparison.LIKE,
    Operator.EQ: Comparison.EQ,
    Operator.BETWEEN: Comparison.BETWEEN,
    Operator.GT: Comparison.GT,
    Operator.LT: Comparison.LT,
}

# Used by HAVING extra filters, which may also carry null checks.
FILTER_OPERATOR_TABLE = {
    **OPERATOR_TABLE,
    Operator.IS_NULL: Comparison.IS_NULL,
    Operator.IS_NOT_NULL: Comparison.IS_NOT_NULL,
}

DATE_COLUMNS = ("created_at", "updated_at", "deleted_at")
