"""
:py:mod:`hateoas_serde.declarative` turns the declarations of a resource into
immutable field and link specs.

Synopsis
--------

.. code-block:: python

   class ProductResource(Resource):
       class Meta:
           name = "product"
           fields = [
               "name",
               ("title", "name"),
               ("price", {"price": "special_price", "orig": "price"}),
           ]
           links = [
               {"rel": "self", "href": "/product/{entity_id}"},
               Link(rel("entity", "event"), resource=ResourceRef("event", "get_event_entity")),
           ]

"""
import collections.abc
import dataclasses
import typing

from .exceptions import InvalidDeclarationError
from .models import (
    EmbeddedFieldDescriptor,
    FieldDescriptor,
    FieldSpec,
    Link,
    LinkSpec,
    ResourceRef,
)
from .uritemplate import URITemplate

FieldDeclaration = typing.Union[
    FieldSpec,
    typing.Mapping[str, typing.Any],
    typing.Sequence[typing.Any],
]
LinkDeclaration = typing.Sequence[typing.Union[Link, typing.Mapping[str, typing.Any]]]


def _build_field_entry(
    name: typing.Any, value: typing.Any
) -> typing.Union[FieldDescriptor, EmbeddedFieldDescriptor]:
    if not isinstance(name, str):
        raise InvalidDeclarationError(f"output name must be a str: {name!r}")
    if isinstance(value, str):
        return FieldDescriptor(name=name, source=value)
    elif isinstance(value, (FieldSpec, collections.abc.Mapping, collections.abc.Sequence)):
        return EmbeddedFieldDescriptor(name=name, spec=build_field_spec(value))
    raise InvalidDeclarationError(f"invalid declaration for field {name}: {value!r}")


def build_field_spec(decl: FieldDeclaration) -> FieldSpec:
    """
    Builds a :py:class:`FieldSpec` from its declaration.

    A declaration is either a mapping of output names to attribute names
    (or to nested declarations), or a sequence whose items are:

    * a bare attribute name,
    * an ``(output name, attribute name)`` pair,
    * an ``(output name, nested declaration)`` pair,
    * a :py:class:`FieldDescriptor` or :py:class:`EmbeddedFieldDescriptor`.
    """
    if isinstance(decl, FieldSpec):
        return decl

    entries: typing.List[typing.Union[FieldDescriptor, EmbeddedFieldDescriptor]] = []
    if isinstance(decl, collections.abc.Mapping):
        for name, value in decl.items():
            entries.append(_build_field_entry(name, value))
    elif isinstance(decl, collections.abc.Sequence) and not isinstance(decl, str):
        for item in decl:
            if isinstance(item, (FieldDescriptor, EmbeddedFieldDescriptor)):
                entries.append(item)
            elif isinstance(item, str):
                entries.append(FieldDescriptor(name=item, source=item))
            elif isinstance(item, tuple) and len(item) == 2:
                entries.append(_build_field_entry(*item))
            else:
                raise InvalidDeclarationError(f"invalid field declaration: {item!r}")
    else:
        raise InvalidDeclarationError(f"invalid field spec declaration: {decl!r}")
    return FieldSpec(entries)


def _build_resource_ref(decl: typing.Any) -> ResourceRef:
    if isinstance(decl, ResourceRef):
        return decl
    elif isinstance(decl, collections.abc.Mapping):
        try:
            return ResourceRef(
                decl["type"],
                decl["operation"],
                decl.get("params", ()),
            )
        except KeyError as e:
            raise InvalidDeclarationError(f"resource reference lacks {e.args[0]}: {decl!r}")
    elif isinstance(decl, tuple) and len(decl) in (2, 3):
        return ResourceRef(*decl)
    raise InvalidDeclarationError(f"invalid resource reference: {decl!r}")


def build_link_spec(decl: LinkDeclaration) -> LinkSpec:
    """
    Builds a link spec from a sequence of :py:class:`Link` objects or mappings with
    a ``rel`` key and either an ``href`` or a ``resource`` key.
    """
    links: typing.List[Link] = []
    for item in decl:
        if isinstance(item, Link):
            links.append(item)
        elif isinstance(item, collections.abc.Mapping):
            unknown = set(item.keys()) - {"rel", "href", "resource"}
            if unknown:
                raise InvalidDeclarationError(f"unknown link properties: {', '.join(sorted(unknown))}")
            if "rel" not in item:
                raise InvalidDeclarationError(f"link lacks rel: {item!r}")
            href = item.get("href")
            resource = item.get("resource")
            links.append(
                Link(
                    item["rel"],
                    href=URITemplate(href) if isinstance(href, str) else href,
                    resource=_build_resource_ref(resource) if resource is not None else None,
                )
            )
        else:
            raise InvalidDeclarationError(f"invalid link declaration: {item!r}")
    return tuple(links)


@dataclasses.dataclass(frozen=True)
class ResourceMeta:
    name: str
    fields: FieldSpec
    links: LinkSpec = ()
    cache_entry_lifetime: int = 60
    """
    The default lifetime, in seconds, of the cache entries a resource adds.
    """


def handle_meta(meta: typing.Type) -> ResourceMeta:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    if "name" not in attrs:
        raise InvalidDeclarationError(f"{meta.__qualname__} lacks a name")
    return ResourceMeta(
        name=attrs["name"],
        fields=build_field_spec(attrs.get("fields", ())),
        links=build_link_spec(attrs.get("links", ())),
        cache_entry_lifetime=attrs.get("cache_entry_lifetime", 60),
    )
