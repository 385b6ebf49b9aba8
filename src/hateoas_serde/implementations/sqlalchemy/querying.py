import operator
import typing

import sqlalchemy as sa  # type: ignore

from ...conditions import normalize_condition
from ...exceptions import InvalidDeclarationError

LIST_DELIMITER = ","


def _like(c: sa.sql.operators.Operators, v: typing.Any) -> sa.sql.operators.Operators:
    return c.like(v)


def _escape_like(value: str, escape: str = "\\") -> str:
    return value.replace(escape, escape * 2).replace("%", escape + "%").replace("_", escape + "_")


def _contains(c: sa.sql.operators.Operators, v: typing.Any) -> sa.sql.operators.Operators:
    """
    Tests list membership. A string column holds a delimited list, so the
    operand must match one whole element; an ``ARRAY`` column is compared
    with ``ANY``.
    """
    type_ = getattr(c, "type", None)
    if isinstance(type_, sa.ARRAY):
        return sa.literal(v) == sa.any_(c)
    if isinstance(type_, sa.String):
        bounded = sa.literal(LIST_DELIMITER).concat(c).concat(LIST_DELIMITER)
        pattern = f"%{LIST_DELIMITER}{_escape_like(str(v))}{LIST_DELIMITER}%"
        return bounded.like(pattern, escape="\\")
    raise InvalidDeclarationError(f"contains is not supported on a column of type {type_!r}")


_op_builders: typing.Dict[
    str, typing.Callable[[sa.sql.operators.Operators, typing.Any], sa.sql.operators.Operators]
] = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": operator.gt,
    "lt": operator.lt,
    "gteq": operator.ge,
    "lteq": operator.le,
    "in": lambda c, v: c.in_(list(v)),
    "nin": lambda c, v: c.notin_(list(v)),
    "like": _like,
    "null": lambda c, v: c.is_(None),
    "notnull": lambda c, v: c.isnot(None),
    "contains": _contains,
}


def build_condition_expression(
    c: sa.sql.operators.Operators, condition: typing.Any
) -> sa.sql.operators.Operators:
    """
    Compiles a filter condition against the column ``c``.

    ``eq`` with :py:const:`None` compiles to ``IS NULL``; ``neq`` lets NULLs
    through, as the in-memory evaluation does.
    """
    op, operand = normalize_condition(condition)
    if operand is None and op in ("eq", "neq"):
        return c.is_(None) if op == "eq" else c.isnot(None)
    expr = _op_builders[op](c, operand)
    if op == "neq":
        expr = sa.or_(expr, c.is_(None))
    return expr


def build_filter_expression(
    columns: typing.Mapping[str, sa.sql.operators.Operators],
    filters: typing.Mapping[str, typing.Any],
) -> typing.Optional[sa.sql.operators.Operators]:
    op: typing.Optional[sa.sql.operators.Operators] = None
    for name, condition in filters.items():
        new_op = build_condition_expression(columns[name], condition)
        op = new_op if op is None else sa.and_(op, new_op)
    return op
