import datetime
import typing

T = typing.TypeVar("T")

Clock = typing.Callable[[], datetime.datetime]


def assert_not_none(value: typing.Optional[T]) -> T:
    assert value is not None
    return value


def english_enumerate(items: typing.Iterable[str], conj: str = " and ") -> str:
    """
    >>> english_enumerate(["name", "sku", "price"])
    'name, sku and price'
    """
    items = list(items)
    if len(items) < 2:
        return "".join(items)
    return ", ".join(items[:-1]) + conj + items[-1]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)
