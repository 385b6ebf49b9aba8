import collections.abc
import dataclasses
import typing

from .exceptions import DuplicateNameError, InvalidDeclarationError
from .uritemplate import URITemplate

LINKS_KEY = "links"
"""
The output key reserved for the resolved links of a representation.
"""

REL_SELF = "self"
REL_ALTERNATE = "alternate"


def rel(type_: str, name: str, domain: str = "totsy.com") -> str:
    """
    Builds a fully-qualified relation identifier.

    >>> rel("entity", "event")
    'http://rel.totsy.com/entity/event'
    """
    return f"http://rel.{domain}/{type_}/{name}"


class FieldSpecEntry:
    name: str
    """
    The output name of the entry.
    """


@dataclasses.dataclass(frozen=True)
class FieldDescriptor(FieldSpecEntry):
    """
    Copies the backing attribute ``source`` to the output field ``name``.
    The entry is an alias when both names differ.
    """

    name: str
    source: str


@dataclasses.dataclass(frozen=True)
class EmbeddedFieldDescriptor(FieldSpecEntry):
    """
    Re-projects the same backing record through ``spec`` and stores the result
    under the output field ``name``.
    """

    name: str
    spec: "FieldSpec"


class FieldSpec(typing.Sequence[typing.Union[FieldDescriptor, EmbeddedFieldDescriptor]]):
    """
    An immutable, ordered set of field entries.

    :param Iterable entries: :py:class:`FieldDescriptor` or :py:class:`EmbeddedFieldDescriptor` instances.
    """

    _entries: typing.Tuple[typing.Union[FieldDescriptor, EmbeddedFieldDescriptor], ...]

    @property
    def names(self) -> typing.Sequence[str]:
        return tuple(entry.name for entry in self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, FieldSpec) and other._entries == self._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(e) for e in self._entries)})"

    def __init__(
        self,
        entries: typing.Iterable[typing.Union[FieldDescriptor, EmbeddedFieldDescriptor]] = (),
    ):
        self._entries = tuple(entries)
        seen: typing.Set[str] = set()
        duplicates: typing.List[str] = []
        for entry in self._entries:
            if not isinstance(entry, (FieldDescriptor, EmbeddedFieldDescriptor)):
                raise InvalidDeclarationError(f"invalid field entry: {entry!r}")
            if entry.name == LINKS_KEY:
                raise InvalidDeclarationError(f'"{LINKS_KEY}" is a reserved output name')
            if entry.name in seen:
                duplicates.append(entry.name)
            seen.add(entry.name)
        if duplicates:
            raise DuplicateNameError(duplicates)


@dataclasses.dataclass(frozen=True, init=False)
class ResourceRef:
    """
    A symbolic reference to an operation of a resource, resolved through the routing registry.

    ``params`` maps the placeholders of the registered path to the attribute
    names of the entity being formatted; placeholders not listed there are
    looked up by their own name.
    """

    resource_type: str
    operation: str
    params: typing.Tuple[typing.Tuple[str, str], ...] = ()

    def __init__(
        self,
        resource_type: str,
        operation: str,
        params: typing.Union[
            typing.Mapping[str, str], typing.Iterable[typing.Tuple[str, str]]
        ] = (),
    ):
        if isinstance(params, collections.abc.Mapping):
            params = params.items()
        object.__setattr__(self, "resource_type", resource_type)
        object.__setattr__(self, "operation", operation)
        object.__setattr__(self, "params", tuple(params))


@dataclasses.dataclass(frozen=True, init=False)
class Link:
    rel: str
    href: typing.Optional[URITemplate] = None
    resource: typing.Optional[ResourceRef] = None

    def __init__(
        self,
        rel: str,
        href: typing.Union[str, URITemplate, None] = None,
        resource: typing.Optional[ResourceRef] = None,
    ):
        if (href is None) == (resource is None):
            raise InvalidDeclarationError(
                f'link "{rel}" must specify exactly one of href and resource'
            )
        if isinstance(href, str):
            href = URITemplate(href)
        object.__setattr__(self, "rel", rel)
        object.__setattr__(self, "href", href)
        object.__setattr__(self, "resource", resource)


LinkSpec = typing.Tuple[Link, ...]


class Record(dict):
    """
    A mutable backing record, as handed out by :py:class:`BackingStore` implementations.
    Subclasses may define ``validate()`` returning a list of error messages.
    """
