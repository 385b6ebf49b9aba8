import pytest

from ..exceptions import (
    InvalidDeclarationError,
    TemplateResolutionError,
    UnknownResourceReferenceError,
)
from ..links import LinkResolver
from ..models import Link, ResourceRef, rel
from ..serde.models import LinkRepr
from .testing import registry_of


@pytest.fixture
def registry():
    return registry_of(
        ("GET", "/product/{id}", "product", "get_product_entity"),
        ("GET", "/event/{id}/product", "product", "get_event_product_collection"),
    )


@pytest.fixture
def target(registry):
    return LinkResolver(registry)


def test_href(target):
    result = target.resolve_all([Link("self", href="/product/{entity_id}")], {"entity_id": 567})
    assert result == [LinkRepr(rel="self", href="/product/567")]


def test_base_uri(registry):
    target = LinkResolver(registry, "https://api.totsy.com/")
    assert target.resolve(Link("self", href="/product/{entity_id}"), {"entity_id": 1}) == LinkRepr(
        rel="self", href="https://api.totsy.com/product/1"
    )
    assert target.resolve(
        Link("alternate", href="http://www.totsy.com/{url_key}.html"), {"url_key": "bib"}
    ) == LinkRepr(rel="alternate", href="http://www.totsy.com/bib.html")


def test_resource_reference(target):
    result = target.resolve(
        Link(
            rel("collection", "product"),
            resource=ResourceRef("product", "get_event_product_collection", {"id": "entity_id"}),
        ),
        {"entity_id": 12},
    )
    assert result == LinkRepr(rel="http://rel.totsy.com/collection/product", href="/event/12/product")


def test_resource_reference_without_params(target):
    result = target.resolve(
        Link("self", resource=ResourceRef("product", "get_product_entity")), {"id": 3}
    )
    assert result.href == "/product/3"


def test_resource_reference_missing_param_source(target):
    with pytest.raises(TemplateResolutionError):
        target.resolve(
            Link("self", resource=ResourceRef("product", "get_product_entity", {"id": "entity_id"})),
            {},
        )


def test_order_is_preserved(target):
    links = [
        Link("c", href="/c/{x}"),
        Link("a", href="/a/{x}"),
        Link("b", resource=ResourceRef("product", "get_product_entity", {"id": "x"})),
    ]
    for x in (1, 2, 3):
        assert [l.rel for l in target.resolve_all(links, {"x": x})] == ["c", "a", "b"]


def test_validate(target):
    target.validate([Link("self", resource=ResourceRef("product", "get_product_entity"))])
    with pytest.raises(UnknownResourceReferenceError) as e:
        target.validate(
            [
                Link("self", href="/product/{entity_id}"),
                Link("up", resource=ResourceRef("event", "get_event_entity")),
            ]
        )
    assert e.value.resource_type == "event"
    assert e.value.status == 500


def test_link_needs_exactly_one_target():
    with pytest.raises(InvalidDeclarationError):
        Link("self")
    with pytest.raises(InvalidDeclarationError):
        Link("self", href="/a", resource=ResourceRef("a", "b"))
