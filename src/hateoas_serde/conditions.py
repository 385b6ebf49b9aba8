"""
Filter conditions for :py:meth:`BackingStore.query_collection`.

A condition is either a bare value, meaning equality, or a mapping holding a
single operator name and its operand::

    {"entity_id": 5, "event_start_date": {"lteq": now}, "event_ids": {"contains": 12}}

"""
import collections.abc
import fnmatch
import operator
import typing

from .exceptions import InvalidDeclarationError

OPERATORS = (
    "eq",
    "neq",
    "gt",
    "lt",
    "gteq",
    "lteq",
    "in",
    "nin",
    "like",
    "null",
    "notnull",
    "contains",
)


def normalize_condition(condition: typing.Any) -> typing.Tuple[str, typing.Any]:
    """
    Returns the ``(operator, operand)`` pair for a condition.
    """
    if isinstance(condition, collections.abc.Mapping):
        if len(condition) != 1:
            raise InvalidDeclarationError(f"a condition holds exactly one operator: {condition!r}")
        ((op, operand),) = condition.items()
        if op not in OPERATORS:
            raise InvalidDeclarationError(f"unsupported operator: {op}")
        return op, operand
    return "eq", condition


def _like(value: typing.Any, pattern: str) -> bool:
    if value is None:
        return False
    return fnmatch.fnmatchcase(str(value), pattern.replace("%", "*").replace("_", "?"))


def _contains(value: typing.Any, operand: typing.Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return str(operand) in (element.strip() for element in value.split(","))
    return operand in value


def _compare(op: typing.Callable[[typing.Any, typing.Any], bool]):
    def _(value: typing.Any, operand: typing.Any) -> bool:
        if value is None:
            return False
        return op(value, operand)

    return _


_evaluators: typing.Dict[str, typing.Callable[[typing.Any, typing.Any], bool]] = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": _compare(operator.gt),
    "lt": _compare(operator.lt),
    "gteq": _compare(operator.ge),
    "lteq": _compare(operator.le),
    "in": lambda value, operand: value in operand,
    "nin": lambda value, operand: value not in operand,
    "like": _like,
    "null": lambda value, operand: value is None,
    "notnull": lambda value, operand: value is not None,
    "contains": _contains,
}


def evaluate(condition: typing.Any, value: typing.Any) -> bool:
    op, operand = normalize_condition(condition)
    return _evaluators[op](value, operand)


def matches(record: typing.Mapping[str, typing.Any], filters: typing.Mapping[str, typing.Any]) -> bool:
    """
    Evaluates every filter against the record in memory.
    """
    return all(evaluate(condition, record.get(name)) for name, condition in filters.items())
