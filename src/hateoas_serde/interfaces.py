"""
This package contains the interface definitions of the collaborators that
the projection engine and the resource handlers consume: the backing store,
the routing registry, the response cache and the authenticator.
"""
import abc
import typing

from .models import Record

Condition = typing.Any
"""
Either a bare value (equality) or a mapping of an operator name to its operand,
e.g. ``{"gteq": 10}``. See :py:mod:`hateoas_serde.conditions`.
"""

Filters = typing.Mapping[str, Condition]


@typing.runtime_checkable
class Validatable(typing.Protocol):
    def validate(self) -> typing.Sequence[str]:
        """
        Returns the list of business-rule violations of the record; empty when valid.
        """
        ...  # pragma: nocover


class BackingStore(metaclass=abc.ABCMeta):
    """
    A :py:class:`BackingStore` is the narrow interface to the catalog and order data store.
    """

    @abc.abstractmethod
    def new_record(self) -> Record:
        """
        Returns a new, unsaved record.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def load_by_id(self, id: typing.Any) -> Record:
        """
        Loads a single record.

        :param Any id: the identifier of the record.
        :return: the record.
        :raises RecordNotFoundError: when no record exists for ``id``.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def query_collection(self, filters: Filters = {}) -> typing.Iterable[Record]:
        """
        Returns the records matching every filter, in the store's natural order.

        :param Filters filters: a mapping of attribute names to conditions.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def save(self, record: Record) -> Record:
        """
        Persists the record, inserting it when it has no identifier yet.

        :param Record record: the record to persist.
        :return: the record as stored, including generated attributes.
        :raises StoreError: when the store rejects the record.
        """
        ...  # pragma: nocover


class RoutingRegistry(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def resolve_path(self, resource_type: str, operation: str) -> str:
        """
        Returns the path template under which the operation of the resource is served.

        :raises UnknownResourceReferenceError: when no such operation is registered.
        """
        ...  # pragma: nocover


class CacheBackend(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def get(self, key: str) -> typing.Optional[str]:
        ...  # pragma: nocover

    @abc.abstractmethod
    def contains(self, key: str) -> bool:
        ...  # pragma: nocover

    @abc.abstractmethod
    def put(self, key: str, body: str, lifetime: int, tags: typing.Iterable[str] = ()) -> bool:
        """
        Stores ``body`` under ``key``. Overwriting an existing entry is allowed.

        :param str key: the cache key.
        :param str body: the serialized response body.
        :param int lifetime: the lifetime of the entry in seconds.
        :param Iterable[str] tags: tags by which the entry can later be invalidated.
        :return: :py:const:`True` when the entry was stored.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def invalidate_tags(self, tags: typing.Iterable[str]) -> int:
        """
        Removes every entry carrying any of ``tags``.

        :return: the number of removed entries.
        """
        ...  # pragma: nocover


class Authenticator(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def authenticate(self, email: str, password: str) -> typing.Optional[typing.Tuple[str, Record]]:
        """
        Verifies the credentials and opens a session.

        :return: a pair of the session token and the user record, or :py:const:`None`.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def end_session(self, token: str) -> bool:
        ...  # pragma: nocover
