"""
:py:mod:`hateoas_serde.formatter` composes field projection and link resolution
into representations.

The formatting of a single record goes through an :py:class:`ItemFormatter`.
Resource types that need computed fields wrap the default one in
:py:class:`ItemFormatterDecorator` subclasses, which derive a view of the
record (and, if needed, a rewritten link spec) before delegating::

    class UppercaseName(ItemFormatterDecorator):
        def preprocess(self, ctx, record, links):
            return derive(record, name=record["name"].upper()), links

    item_formatter = UppercaseName(formatter.default_item_formatter)
    formatter.format(record, fields, links, item_formatter=item_formatter)

"""
import abc
import collections
import dataclasses
import typing

from .links import LinkResolver
from .models import FieldSpec, Link, LinkSpec
from .projection import FieldProjector
from .serde.models import ResourceRepr

BackingRecord = typing.Mapping[str, typing.Any]


@dataclasses.dataclass(frozen=True)
class FormatContext:
    """
    Per-call values threaded through formatting, such as the event a product
    is listed under. Never stored on a handler.
    """

    extras: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)

    def get(self, name: str, default: typing.Any = None) -> typing.Any:
        return self.extras.get(name, default)


EMPTY_CONTEXT = FormatContext()


def derive(record: BackingRecord, **computed: typing.Any) -> BackingRecord:
    """
    Returns a read-only view of ``record`` in which ``computed`` take precedence.
    The record itself is left untouched.
    """
    return collections.ChainMap(computed, typing.cast(typing.MutableMapping, record))


class ItemFormatter(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def __call__(
        self,
        ctx: FormatContext,
        record: BackingRecord,
        fields: FieldSpec,
        links: typing.Sequence[Link],
    ) -> typing.Optional[ResourceRepr]:
        """
        Formats a single record.

        :return: the representation, or :py:const:`None` if the record is to be left out.
        """
        ...  # pragma: nocover


class DefaultItemFormatter(ItemFormatter):
    projector: FieldProjector
    link_resolver: LinkResolver

    def __call__(
        self,
        ctx: FormatContext,
        record: BackingRecord,
        fields: FieldSpec,
        links: typing.Sequence[Link],
    ) -> typing.Optional[ResourceRepr]:
        return ResourceRepr(
            attributes=self.projector.project(record, fields),
            links=self.link_resolver.resolve_all(links, record) if links else None,
        )

    def __init__(self, projector: FieldProjector, link_resolver: LinkResolver):
        self.projector = projector
        self.link_resolver = link_resolver


class ItemFormatterDecorator(ItemFormatter):
    inner: ItemFormatter

    @abc.abstractmethod
    def preprocess(
        self,
        ctx: FormatContext,
        record: BackingRecord,
        links: typing.Sequence[Link],
    ) -> typing.Optional[typing.Tuple[BackingRecord, typing.Sequence[Link]]]:
        """
        Derives the values the inner formatter sees.

        :return: the derived record and link spec, or :py:const:`None` to drop the record.
        """
        ...  # pragma: nocover

    def __call__(
        self,
        ctx: FormatContext,
        record: BackingRecord,
        fields: FieldSpec,
        links: typing.Sequence[Link],
    ) -> typing.Optional[ResourceRepr]:
        preprocessed = self.preprocess(ctx, record, links)
        if preprocessed is None:
            return None
        record, links = preprocessed
        return self.inner(ctx, record, fields, links)

    def __init__(self, inner: ItemFormatter):
        self.inner = inner


class RepresentationFormatter:
    projector: FieldProjector
    link_resolver: LinkResolver
    default_item_formatter: ItemFormatter

    def format(
        self,
        record: BackingRecord,
        fields: FieldSpec,
        links: LinkSpec = (),
        ctx: FormatContext = EMPTY_CONTEXT,
        item_formatter: typing.Optional[ItemFormatter] = None,
    ) -> typing.Optional[ResourceRepr]:
        if item_formatter is None:
            item_formatter = self.default_item_formatter
        return item_formatter(ctx, record, fields, links)

    def format_collection(
        self,
        records: typing.Iterable[BackingRecord],
        fields: FieldSpec,
        links: LinkSpec = (),
        ctx: FormatContext = EMPTY_CONTEXT,
        item_formatter: typing.Optional[ItemFormatter] = None,
    ) -> typing.List[ResourceRepr]:
        retval: typing.List[ResourceRepr] = []
        for record in records:
            repr_ = self.format(record, fields, links, ctx, item_formatter)
            if repr_ is not None:
                retval.append(repr_)
        return retval

    def __init__(self, projector: FieldProjector, link_resolver: LinkResolver):
        self.projector = projector
        self.link_resolver = link_resolver
        self.default_item_formatter = DefaultItemFormatter(projector, link_resolver)
