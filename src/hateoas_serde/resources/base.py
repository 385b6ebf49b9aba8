import json
import logging
import typing

from ..cache import ResponseCache
from ..declarative import ResourceMeta, handle_meta
from ..envelope import RequestInfo, Response, error_response
from ..exceptions import (
    HateoasSerdeException,
    MalformedRequestError,
    PersistenceError,
    RecordNotFoundError,
    StoreError,
)
from ..formatter import EMPTY_CONTEXT, FormatContext, ItemFormatter, RepresentationFormatter
from ..interfaces import BackingStore, Filters
from ..models import Record
from ..populator import WritePathPopulator
from ..serde.models import ResourceRepr
from ..serde.renderer import ReprRenderer

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

MergeHook = typing.Callable[[Record], None]


def entity_id_from_url(url: str) -> int:
    """
    Extracts the trailing entity identifier from a resource URL such as
    ``https://api.totsy.com/address/12``.
    """
    _, sep, tail = url.rstrip("/").rpartition("/")
    if not sep:
        raise MalformedRequestError(f"Invalid Resource URL {url}")
    try:
        return int(tail)
    except ValueError:
        raise MalformedRequestError(f"Invalid Resource URL {url}")


class Resource:
    """
    The base class of the resource handlers.

    Subclasses declare their field and link specs in a nested ``Meta`` class
    and expose endpoints with :py:func:`hateoas_serde.routing.route`. Every
    endpoint is invoked through :py:meth:`dispatch`, which turns the errors
    raised along the way into error responses.
    """

    meta: typing.ClassVar[ResourceMeta]
    record_class: typing.ClassVar[typing.Type[Record]] = Record
    readonly_attributes: typing.ClassVar[typing.Tuple[str, ...]] = ()
    """
    Attributes an inbound representation can never change, besides the identifier.
    """

    store: BackingStore
    formatter: RepresentationFormatter
    cache: ResponseCache
    renderer: ReprRenderer
    populator: WritePathPopulator
    item_formatter: ItemFormatter

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        meta = cls.__dict__.get("Meta")
        if meta is not None:
            cls.meta = handle_meta(meta)

    @property
    def id_attribute(self) -> str:
        return self.populator.id_attribute

    def build_item_formatter(self, default: ItemFormatter) -> ItemFormatter:
        return default

    def context_for(self, record: Record) -> FormatContext:
        """
        Returns the per-call context the item formatter receives when ``record``
        is served on its own.
        """
        return EMPTY_CONTEXT

    def dispatch(self, operation: str, request: RequestInfo, **params: typing.Any) -> Response:
        handler = getattr(self, operation)
        try:
            return handler(request, **params)
        except HateoasSerdeException as e:
            log = logger.error if e.status >= 500 else logger.info
            log(
                "%s failed: %s",
                operation,
                e.message,
                extra={"resource": self.meta.name, "status": e.status, "path": request.path},
            )
            if isinstance(e, StoreError) and e.sensitive:
                return error_response(PersistenceError("Unable to complete the request", 500))
            return error_response(e)

    def parse_id(self, value: typing.Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise MalformedRequestError(f"Invalid identifier {value}")

    def tags_for(self, record: typing.Mapping[str, typing.Any]) -> typing.List[str]:
        return [self.meta.name, f"{self.meta.name}:{record.get(self.id_attribute)}"]

    def serialize(self, data: typing.Any) -> str:
        return json.dumps(self.renderer(data))

    def ok(self, body: str, status: int = 200) -> Response:
        return Response(status=status, body=body, headers=dict(JSON_HEADERS))

    def format_item(
        self, record: typing.Mapping[str, typing.Any], ctx: FormatContext = EMPTY_CONTEXT
    ) -> typing.Optional[ResourceRepr]:
        return self.formatter.format(
            record, self.meta.fields, self.meta.links, ctx, self.item_formatter
        )

    def format_collection(
        self,
        records: typing.Iterable[typing.Mapping[str, typing.Any]],
        ctx: FormatContext = EMPTY_CONTEXT,
    ) -> typing.List[ResourceRepr]:
        return self.formatter.format_collection(
            records, self.meta.fields, self.meta.links, ctx, self.item_formatter
        )

    def load(self, id: typing.Any) -> Record:
        return self.record_class(self.store.load_by_id(id))

    def represent(self, record: Record) -> ResourceRepr:
        """
        Formats a record served on its own.

        :raises RecordNotFoundError: when the item formatter drops the record.
        """
        repr_ = self.format_item(record, self.context_for(record))
        if repr_ is None:
            raise RecordNotFoundError(self.meta.name, record.get(self.id_attribute))
        return repr_

    def cached(
        self,
        request: RequestInfo,
        produce: typing.Callable[[], typing.Tuple[typing.Any, typing.Iterable[str]]],
        lifetime: typing.Optional[int] = None,
    ) -> Response:
        """
        Serves the cached body for ``request`` or produces, serializes and caches a new one.

        :param produce: returns the data to serialize and the tags of the cache entry.
        :param lifetime: overrides the lifetime declared in ``Meta``; 0 disables caching.
        """
        if lifetime is None:
            lifetime = self.meta.cache_entry_lifetime
        body = self.cache.inspect(request) if lifetime > 0 else None
        if body is None:
            data, tags = produce()
            body = self.serialize(data)
            if lifetime > 0:
                self.cache.add(request, body, lifetime, tags)
        return self.ok(body)

    def get_item(self, request: RequestInfo, id: typing.Any) -> Response:
        id = self.parse_id(id)

        def produce():
            record = self.load(id)
            return self.represent(record), self.tags_for(record)

        return self.cached(request, produce)

    def get_collection(
        self,
        request: RequestInfo,
        filters: Filters = {},
        ctx: FormatContext = EMPTY_CONTEXT,
    ) -> Response:
        def produce():
            records = self.store.query_collection(filters)
            return self.format_collection(records, ctx), [self.meta.name]

        return self.cached(request, produce)

    def _pinned(
        self, values: typing.Mapping[str, typing.Any], on_merge: typing.Optional[MergeHook]
    ) -> MergeHook:
        def _(record: Record) -> None:
            for name in (self.id_attribute,) + self.readonly_attributes:
                if name in values:
                    record[name] = values[name]
                else:
                    record.pop(name, None)
            if on_merge is not None:
                on_merge(record)

        return _

    def save_new(
        self,
        request: RequestInfo,
        defaults: typing.Mapping[str, typing.Any] = {},
        on_merge: typing.Optional[MergeHook] = None,
        inbound: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> Record:
        """
        Creates a record from the request body. ``defaults`` are applied first
        and keep their values even if the body names them as read-only attributes.
        """
        inbound = self.populator.parse(request.body) if inbound is None else inbound
        record = self.record_class(self.store.new_record())
        record.update(defaults)
        saved = self.populator.populate(
            record, inbound, self.meta.fields, self._pinned(defaults, on_merge)
        )
        self.cache.invalidate(self.tags_for(saved))
        return saved

    def save_existing(
        self,
        request: RequestInfo,
        record: Record,
        on_merge: typing.Optional[MergeHook] = None,
        inbound: typing.Optional[typing.Mapping[str, typing.Any]] = None,
    ) -> Record:
        inbound = self.populator.parse(request.body) if inbound is None else inbound
        saved = self.populator.populate(
            record, inbound, self.meta.fields, self._pinned(dict(record), on_merge)
        )
        self.cache.invalidate(self.tags_for(saved))
        return saved

    def create(
        self,
        request: RequestInfo,
        defaults: typing.Mapping[str, typing.Any] = {},
        on_merge: typing.Optional[MergeHook] = None,
    ) -> Response:
        saved = self.save_new(request, defaults, on_merge)
        return self.ok(self.serialize(self.represent(saved)), status=201)

    def update(
        self,
        request: RequestInfo,
        id: typing.Any,
        on_merge: typing.Optional[MergeHook] = None,
    ) -> Response:
        record = self.load(self.parse_id(id))
        saved = self.save_existing(request, record, on_merge)
        return self.ok(self.serialize(self.represent(saved)))

    def __init__(
        self,
        store: BackingStore,
        formatter: RepresentationFormatter,
        cache: ResponseCache,
        renderer: ReprRenderer,
        populator: typing.Optional[WritePathPopulator] = None,
    ):
        self.store = store
        self.formatter = formatter
        self.cache = cache
        self.renderer = renderer
        self.populator = populator if populator is not None else WritePathPopulator(store)
        self.item_formatter = self.build_item_formatter(formatter.default_item_formatter)
