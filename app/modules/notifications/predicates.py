"""Composable filter predicates for history queries.

A predicate is a small tree (``Always | Eq | In | Compare | And | Or``) that
is either evaluated in-process against a row or translated into a DynamoDB
``FilterExpression``. ``and_``/``or_`` treat ``None`` and ``Always`` as "no
constraint yet", so filters can be folded up from empty. Value lists are one
flat ``In`` node, so the tree stays shallow however many ids are filtered.

Usage:
    from modules.notifications.predicates import Eq, and_, any_of

    predicate = and_(any_of("partition_key", ["AppA", "AppB"]), Eq("status", "Sent"))
"""

import operator
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from modules.notifications.errors import InvalidArgumentError
from modules.notifications.models import NotificationReportRequest, NotificationStatus
from modules.notifications.serialization import format_timestamp, parse_date_best_effort


class ComparisonOperator(str, Enum):
    EQ = "="
    NE = "<>"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


_OPERATORS: Dict[ComparisonOperator, Callable[[Any, Any], bool]] = {
    ComparisonOperator.EQ: operator.eq,
    ComparisonOperator.NE: operator.ne,
    ComparisonOperator.LT: operator.lt,
    ComparisonOperator.LE: operator.le,
    ComparisonOperator.GT: operator.gt,
    ComparisonOperator.GE: operator.ge,
}


@dataclass(frozen=True)
class Always:
    """Matches every row."""


ALWAYS = Always()


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any


@dataclass(frozen=True)
class In:
    """``field`` equals one of ``values``."""

    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Compare:
    field: str
    op: ComparisonOperator
    value: Any


@dataclass(frozen=True)
class And:
    left: "Predicate"
    right: "Predicate"


@dataclass(frozen=True)
class Or:
    left: "Predicate"
    right: "Predicate"


Predicate = Union[Always, Eq, In, Compare, And, Or]

FilterExpression = Tuple[str, Dict[str, str], Dict[str, Any]]

# DynamoDB accepts at most 100 operands in one IN comparison
MAX_IN_OPERANDS = 100


def _is_identity(predicate: Optional[Predicate]) -> bool:
    return predicate is None or isinstance(predicate, Always)


def and_(left: Optional[Predicate], right: Optional[Predicate]) -> Predicate:
    if _is_identity(left):
        return ALWAYS if right is None else right
    if _is_identity(right):
        return left
    return And(left, right)


def or_(left: Optional[Predicate], right: Optional[Predicate]) -> Predicate:
    if _is_identity(left):
        return ALWAYS if right is None else right
    if _is_identity(right):
        return left
    return Or(left, right)


def any_of(field: str, values: Iterable[Any]) -> Predicate:
    """Match rows whose ``field`` equals any of ``values``.

    Duplicates are dropped and order is kept. No values gives ``Always``,
    one value an ``Eq`` and several an ``In``.
    """
    distinct = tuple(dict.fromkeys(values))
    if not distinct:
        return ALWAYS
    if len(distinct) == 1:
        return Eq(field, distinct[0])
    return In(field, distinct)


def matches(predicate: Predicate, row: Dict[str, Any]) -> bool:
    """Evaluate a predicate against a row.

    A comparison on a missing attribute, or between values that cannot be
    ordered, is false.
    """
    if isinstance(predicate, Always):
        return True
    if isinstance(predicate, Eq):
        return predicate.field in row and row[predicate.field] == predicate.value
    if isinstance(predicate, In):
        return predicate.field in row and row[predicate.field] in predicate.values
    if isinstance(predicate, Compare):
        value = row.get(predicate.field)
        if value is None:
            return False
        try:
            return bool(_OPERATORS[predicate.op](value, predicate.value))
        except TypeError:
            return False
    if isinstance(predicate, And):
        return matches(predicate.left, row) and matches(predicate.right, row)
    if isinstance(predicate, Or):
        return matches(predicate.left, row) or matches(predicate.right, row)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


class _ExpressionBuilder:
    def __init__(self) -> None:
        self.names: Dict[str, str] = {}
        self.values: Dict[str, Any] = {}

    def _name(self, field: str) -> str:
        for placeholder, name in self.names.items():
            if name == field:
                return placeholder
        placeholder = f"#f{len(self.names)}"
        self.names[placeholder] = field
        return placeholder

    def _value(self, value: Any) -> str:
        placeholder = f":v{len(self.values)}"
        self.values[placeholder] = value
        return placeholder

    def build(self, predicate: Predicate) -> str:
        if isinstance(predicate, Eq):
            return f"{self._name(predicate.field)} = {self._value(predicate.value)}"
        if isinstance(predicate, In):
            name = self._name(predicate.field)
            clauses = [
                f"{name} IN ({', '.join(self._value(value) for value in chunk)})"
                for chunk in (
                    predicate.values[i : i + MAX_IN_OPERANDS]
                    for i in range(0, len(predicate.values), MAX_IN_OPERANDS)
                )
            ]
            if len(clauses) == 1:
                return clauses[0]
            return f"({' OR '.join(clauses)})"
        if isinstance(predicate, Compare):
            return (
                f"{self._name(predicate.field)} {predicate.op.value} "
                f"{self._value(predicate.value)}"
            )
        if isinstance(predicate, And):
            return f"({self.build(predicate.left)} AND {self.build(predicate.right)})"
        if isinstance(predicate, Or):
            return f"({self.build(predicate.left)} OR {self.build(predicate.right)})"
        raise TypeError(f"Unsupported predicate: {predicate!r}")


def to_filter_expression(predicate: Predicate) -> Optional[FilterExpression]:
    """Translate a predicate into ``(FilterExpression, names, values)``.

    Values are plain Python values; the caller serializes them to the
    DynamoDB attribute format. ``Always`` yields None (no filter).
    """
    if _is_identity(predicate):
        return None
    builder = _ExpressionBuilder()
    expression = builder.build(predicate)
    return expression, builder.names, builder.values


def _status_labels(codes: Iterable[int]) -> list[str]:
    labels = []
    for code in codes:
        try:
            labels.append(NotificationStatus.from_code(int(code)).value)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
    return labels


def build_filter_predicate(request: NotificationReportRequest) -> Optional[Predicate]:
    """AND of the list criteria of a report request, each OR'd internally.

    Returns None when the request has no list criteria.
    """
    categories = (
        any_of("partition_key", request.application_filter),
        any_of("email_account_used", request.accounts_used_filter),
        any_of("notification_id", request.notification_ids_filter),
        any_of("tracking_id", request.tracking_ids_filter),
        any_of("status", _status_labels(request.notification_status_filter)),
    )
    predicate: Optional[Predicate] = None
    for category in categories:
        if not isinstance(category, Always):
            predicate = and_(predicate, category)
    return predicate


def _bound(
    field: str, op: ComparisonOperator, value: Optional[datetime]
) -> Optional[Predicate]:
    if value is None:
        return None
    return Compare(field, op, format_timestamp(value))


def build_date_predicate(
    request: NotificationReportRequest, legacy_updated_date_bounds: bool = False
) -> Optional[Predicate]:
    """AND of every date bound of a report request that parses.

    Start bounds are inclusive lower bounds and end bounds inclusive upper
    bounds. With ``legacy_updated_date_bounds`` the updated-date bounds use
    the historical inverted comparisons (start ``<``, end ``>``).

    Returns None when no bound parses.
    """
    updated_start_op = ComparisonOperator.GE
    updated_end_op = ComparisonOperator.LE
    if legacy_updated_date_bounds:
        updated_start_op = ComparisonOperator.LT
        updated_end_op = ComparisonOperator.GT

    bounds = (
        _bound(
            "created_date_time",
            ComparisonOperator.GE,
            parse_date_best_effort(request.created_date_time_start),
        ),
        _bound(
            "created_date_time",
            ComparisonOperator.LE,
            parse_date_best_effort(request.created_date_time_end),
        ),
        _bound(
            "send_on_utc_date",
            ComparisonOperator.GE,
            parse_date_best_effort(request.send_on_utc_date_start),
        ),
        _bound(
            "send_on_utc_date",
            ComparisonOperator.LE,
            parse_date_best_effort(request.send_on_utc_date_end),
        ),
        _bound(
            "updated_date_time",
            updated_start_op,
            parse_date_best_effort(request.updated_date_time_start),
        ),
        _bound(
            "updated_date_time",
            updated_end_op,
            parse_date_best_effort(request.updated_date_time_end),
        ),
    )
    predicate: Optional[Predicate] = None
    for bound in bounds:
        if bound is not None:
            predicate = and_(predicate, bound)
    return predicate


def compose_report_predicate(
    request: NotificationReportRequest, legacy_updated_date_bounds: bool = False
) -> Predicate:
    """Combine the date and list criteria of a report request.

    Returns ``ALWAYS`` when the request carries no usable criteria.
    """
    date_predicate = build_date_predicate(request, legacy_updated_date_bounds)
    filter_predicate = build_filter_predicate(request)
    return and_(date_predicate, filter_predicate)
