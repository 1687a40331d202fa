from dataclasses import dataclass, field
from typing import Any, List

from sqlalchemy import Select, or_

from .enum import Comparison, OrderDirection
from .utils import build_condition, resolve_target


@dataclass(frozen=True)
class Predicate:
    target: Any
    comparison: Comparison
    value: Any = None

    def to_clause(self):
        return build_condition(self.target, self.comparison, self.value)


@dataclass(frozen=True)
class OrderClause:
    target: Any
    direction: OrderDirection = OrderDirection.ASC

    def to_clause(self):
        column = resolve_target(self.target)
        if self.direction == OrderDirection.DESC:
            return column.desc()
        return column.asc()


@dataclass
class QueryPlan:
    """
    The conditions collected for one table request, kept apart from the
    statement so they can be inspected before anything is compiled.

    ``search`` predicates are OR'd into a single group; that group, the
    ``where`` predicates and the ``having`` predicates are all AND'd.
    """

    search: List[Predicate] = field(default_factory=list)
    where: List[Predicate] = field(default_factory=list)
    having: List[Predicate] = field(default_factory=list)
    order_by: List[OrderClause] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.search) + len(self.where) + len(self.having) + len(self.order_by)

    def apply(self, stmt: Select) -> Select:
        if self.search:
            stmt = stmt.where(or_(*[p.to_clause() for p in self.search]))
        for predicate in self.where:
            stmt = stmt.where(predicate.to_clause())
        for predicate in self.having:
            stmt = stmt.having(predicate.to_clause())
        if self.order_by:
            stmt = stmt.order_by(*[o.to_clause() for o in self.order_by])
        return stmt
