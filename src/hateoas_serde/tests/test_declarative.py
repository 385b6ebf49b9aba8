import pytest

from ..declarative import build_field_spec, build_link_spec, handle_meta
from ..exceptions import DuplicateNameError, InvalidDeclarationError
from ..models import EmbeddedFieldDescriptor, FieldDescriptor, Link, ResourceRef
from ..uritemplate import URITemplate


class TestBuildFieldSpec:
    def test_sequence(self):
        result = build_field_spec(
            ["name", ("title", "name"), ("price", {"price": "special_price", "orig": "price"})]
        )
        assert result.names == ("name", "title", "price")
        assert result[0] == FieldDescriptor("name", "name")
        assert result[1] == FieldDescriptor("title", "name")
        assert isinstance(result[2], EmbeddedFieldDescriptor)
        assert result[2].spec.names == ("price", "orig")

    def test_mapping(self):
        result = build_field_spec({"name": "name", "zip": "postcode"})
        assert list(result) == [FieldDescriptor("name", "name"), FieldDescriptor("zip", "postcode")]

    def test_duplicate_names(self):
        with pytest.raises(DuplicateNameError) as e:
            build_field_spec(["name", ("name", "title"), "sku", "sku"])
        assert e.value.names == ["name", "sku"]
        assert e.value.message == "duplicate output names: name and sku"

    def test_reserved_name(self):
        with pytest.raises(InvalidDeclarationError):
            build_field_spec(["name", "links"])

    @pytest.mark.parametrize("decl", ["name", [1], [("a", 1)], [("a", "b", "c")]])
    def test_invalid(self, decl):
        with pytest.raises(InvalidDeclarationError):
            build_field_spec(decl)


class TestBuildLinkSpec:
    def test_href_and_resource(self):
        result = build_link_spec(
            [
                {"rel": "self", "href": "/product/{entity_id}"},
                {"rel": "up", "resource": ("event", "get_event_entity", {"id": "event_id"})},
                {"rel": "down", "resource": {"type": "product", "operation": "get_product_entity"}},
                Link("alternate", href="http://www.totsy.com/{url_key}.html"),
            ]
        )
        assert [l.rel for l in result] == ["self", "up", "down", "alternate"]
        assert result[0].href == URITemplate("/product/{entity_id}")
        assert result[1].resource == ResourceRef("event", "get_event_entity", {"id": "event_id"})
        assert result[2].resource == ResourceRef("product", "get_product_entity")

    @pytest.mark.parametrize(
        "decl",
        [
            [{"href": "/a"}],
            [{"rel": "self"}],
            [{"rel": "self", "href": "/a", "resource": ("a", "b")}],
            [{"rel": "self", "href": "/a", "title": "A"}],
            [{"rel": "self", "resource": {"type": "a"}}],
            ["/a"],
        ],
    )
    def test_invalid(self, decl):
        with pytest.raises(InvalidDeclarationError):
            build_link_spec(decl)


def test_handle_meta():
    class Meta:
        name = "product"
        cache_entry_lifetime = 600
        fields = ["name"]
        links = [{"rel": "self", "href": "/product/{entity_id}"}]

    result = handle_meta(Meta)
    assert result.name == "product"
    assert result.cache_entry_lifetime == 600
    assert result.fields.names == ("name",)
    assert result.links == (Link("self", href="/product/{entity_id}"),)


def test_handle_meta_defaults():
    class Meta:
        name = "reward"

    result = handle_meta(Meta)
    assert result.cache_entry_lifetime == 60
    assert len(result.fields) == 0
    assert result.links == ()

    class Nameless:
        fields = ["a"]

    with pytest.raises(InvalidDeclarationError):
        handle_meta(Nameless)
