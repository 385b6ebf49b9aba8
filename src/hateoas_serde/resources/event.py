"""
An Event is a time-limited sale grouping a set of products.
"""
from ..envelope import RequestInfo, Response
from ..formatter import ItemFormatter, ItemFormatterDecorator, derive
from ..models import REL_ALTERNATE, REL_SELF, rel
from ..routing import route
from ..utils import Clock, utcnow
from .base import Resource
from .formatting import as_list, decode_entities, media_url, storefront_links


class EventFormatter(ItemFormatterDecorator):
    web_base_url: str
    image_base_url: str

    def preprocess(self, ctx, record, links):
        computed = {
            "description": decode_entities(record.get("description")),
            "department": as_list(record.get("departments")),
            "age": as_list(record.get("ages")),
            "image": media_url(self.image_base_url, record.get("image")),
        }
        links = storefront_links(links, self.web_base_url, record.get("url_key"))
        return derive(record, **computed), links

    def __init__(self, inner: ItemFormatter, web_base_url: str, media_base_url: str):
        super().__init__(inner)
        self.web_base_url = web_base_url
        self.image_base_url = media_url(media_base_url, "catalog/category")


class EventResource(Resource):
    class Meta:
        name = "event"
        fields = [
            "name",
            "description",
            "short_description",
            "department",
            "age",
            "image",
            ("start", "event_start_date"),
            ("end", "event_end_date"),
        ]
        links = [
            {"rel": REL_SELF, "href": "/event/{entity_id}"},
            {
                "rel": rel("collection", "product"),
                "resource": ("product", "get_event_product_collection", {"id": "entity_id"}),
            },
            {"rel": REL_ALTERNATE, "href": "/{url_key}.html"},
        ]

    web_base_url: str
    media_base_url: str
    clock: Clock

    def build_item_formatter(self, default: ItemFormatter) -> ItemFormatter:
        return EventFormatter(default, self.web_base_url, self.media_base_url)

    @route("GET", "/event")
    def get_event_collection(self, request: RequestInfo) -> Response:
        """
        The events currently on sale.
        """
        now = self.clock()
        return self.get_collection(
            request,
            {
                "is_active": True,
                "event_start_date": {"lteq": now},
                "event_end_date": {"gt": now},
            },
        )

    @route("GET", "/event/{id}")
    def get_event_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)

    def __init__(
        self,
        *args,
        web_base_url: str,
        media_base_url: str,
        clock: Clock = utcnow,
        **kwargs
    ):
        self.web_base_url = web_base_url
        self.media_base_url = media_base_url
        self.clock = clock
        super().__init__(*args, **kwargs)
