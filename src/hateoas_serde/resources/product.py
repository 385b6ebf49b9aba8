"""
A Product is a single item that is available for sale, listed under one or
more events.
"""
import typing
from collections import OrderedDict

from ..envelope import RequestInfo, Response
from ..formatter import FormatContext, ItemFormatter, ItemFormatterDecorator, derive
from ..models import REL_ALTERNATE, REL_SELF, Link, Record, rel
from ..routing import route
from ..serde.models import ResourceRepr
from .base import Resource
from .formatting import as_list, media_url, storefront_links, strip_markup

STATUS_DISABLED = 2

REL_EVENT = rel("entity", "event")


class ProductFormatter(ItemFormatterDecorator):
    """
    Computes the presentational fields of a product: its event, the plain-text
    shipping and returns notice, departments and ages as lists, the hot and
    featured flags, image URLs, the options of configurable products and the
    storefront link. Disabled products are left out.
    """

    web_base_url: str
    image_base_url: str

    def _configurable_attributes(self, record) -> "OrderedDict[str, typing.List[str]]":
        retval: "OrderedDict[str, typing.List[str]]" = OrderedDict()
        for attr in record.get("configurable_attributes") or ():
            retval[attr["label"]] = [value["label"] for value in attr.get("values", ())]
        return retval

    def preprocess(self, ctx, record, links):
        if record.get("status") == STATUS_DISABLED:
            return None

        event_id = ctx.get("event_id")
        computed = {
            "event_id": event_id,
            "shipping_returns": strip_markup(record.get("shipping_returns")),
            "department": as_list(record.get("departments")),
            "age": as_list(record.get("ages")),
            "hot": bool(record.get("hot_list")),
            "featured": bool(record.get("featured")),
            "image": [
                media_url(self.image_base_url, image["file"])
                for image in record.get("media_gallery") or ()
                if not image.get("disabled")
            ],
            "type": record.get("type_id"),
        }
        if record.get("type_id") == "configurable":
            computed["attributes"] = self._configurable_attributes(record)

        links = storefront_links(links, self.web_base_url, record.get("url_key"))
        if event_id is None:
            links = [link for link in links if link.rel != REL_EVENT]
        return derive(record, **computed), links

    def __init__(self, inner: ItemFormatter, web_base_url: str, media_base_url: str):
        super().__init__(inner)
        self.web_base_url = web_base_url
        self.image_base_url = media_url(media_base_url, "catalog/product")


class ProductResource(Resource):
    class Meta:
        name = "product"
        cache_entry_lifetime = 600
        fields = [
            "name",
            "description",
            "short_description",
            "shipping_returns",
            "department",
            "age",
            "attributes",
            "vendor_style",
            "sku",
            "weight",
            ("price", {"price": "special_price", "orig": "price"}),
            "hot",
            "featured",
            "image",
            "type",
        ]
        links = [
            {"rel": REL_SELF, "href": "/product/{entity_id}"},
            {"rel": REL_EVENT, "href": "/event/{event_id}"},
            {"rel": REL_ALTERNATE, "href": "/{url_key}.html"},
        ]

    web_base_url: str
    media_base_url: str

    def build_item_formatter(self, default: ItemFormatter) -> ItemFormatter:
        return ProductFormatter(default, self.web_base_url, self.media_base_url)

    def context_for(self, record: Record) -> FormatContext:
        event_ids = as_list(record.get("event_ids"))
        return FormatContext({"event_id": event_ids[0] if event_ids else None})

    @route("GET", "/product/{id}")
    def get_product_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)

    @route("GET", "/product/{id}/quantity")
    def get_product_quantity(self, request: RequestInfo, id: str) -> Response:
        record = self.load(self.parse_id(id))
        return self.ok(self.serialize(ResourceRepr({"quantity": record.get("qty")})))

    @route("GET", "/event/{id}/product")
    def get_event_product_collection(self, request: RequestInfo, id: str) -> Response:
        event_id = self.parse_id(id)
        ctx = FormatContext({"event_id": event_id})

        def produce():
            records = self.store.query_collection({"event_ids": {"contains": event_id}})
            return self.format_collection(records, ctx), [self.meta.name, f"event:{event_id}"]

        return self.cached(request, produce)

    def __init__(self, *args, web_base_url: str, media_base_url: str, **kwargs):
        self.web_base_url = web_base_url
        self.media_base_url = media_base_url
        super().__init__(*args, **kwargs)
