"""
Classes in :py:mod:`hateoas_serde.serde.models` are the in-memory form of the
representations served by the API, before they are rendered to JSON.
"""

import dataclasses
import datetime
import decimal
import typing
from collections import OrderedDict

AttributeScalar = typing.Union[
    datetime.datetime, datetime.date, decimal.Decimal, str, int, float, bool, bytes, None
]
AttributeValue = typing.Union[
    typing.Sequence[typing.Any],
    typing.Mapping[str, typing.Any],
    AttributeScalar,
]


@dataclasses.dataclass(frozen=True)
class LinkRepr:
    """
    :py:class:`LinkRepr` represents a resolved hyperlink, ``{"rel": ..., "href": ...}``.
    """

    rel: str
    href: str


@dataclasses.dataclass(init=False)
class ResourceRepr:
    """
    :py:class:`ResourceRepr` represents a single entity: its projected fields and,
    unless the resource declares no links, the ordered list of resolved links.
    """

    attributes: typing.Mapping[str, AttributeValue] = dataclasses.field(default_factory=OrderedDict)
    links: typing.Optional[typing.Sequence[LinkRepr]] = None

    def __getitem__(self, name: str) -> AttributeValue:
        return self.attributes[name]

    def __contains__(self, name: str) -> bool:
        return name in self.attributes

    def __init__(
        self,
        attributes: typing.Union[
            typing.Mapping[str, AttributeValue],
            typing.Iterable[typing.Tuple[str, AttributeValue]],
        ] = (),
        links: typing.Optional[typing.Iterable[LinkRepr]] = None,
    ):
        """
        :param attributes: a mapping, or a sequence of key-value pairs, of the projected fields.
        :param Optional[Iterable[LinkRepr]] links: resolved links, or :py:const:`None` if the resource has none.
        """
        self.attributes = OrderedDict(attributes)
        self.links = tuple(links) if links is not None else None
