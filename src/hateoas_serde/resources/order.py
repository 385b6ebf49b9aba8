"""
Orders are written in several steps. A submission lacking any of the items,
the shipping address or the payment is stored as a provisional order that
expires unless it is updated in time; the first submission completing all
three finalizes the order::

    POST /user/5/order  {"items": [{"product_id": 567, "quantity": 1}]}
        -> 202, "state": "provisional", "expires": ...
    PUT /order/12       {"links": [{"rel": ".../entity/address", "href": "/address/3"}]}
        -> 202, "expires" pushed back
    PUT /order/12       {"links": [{"rel": ".../entity/creditcard", "href": "/creditcard/9"}]}
        -> 200, "state": "new"

"""
import collections.abc
import datetime
import typing

from ..envelope import RequestInfo, Response
from ..exceptions import ConflictError, MalformedRequestError, RecordNotFoundError
from ..formatter import ItemFormatter, ItemFormatterDecorator
from ..models import LINKS_KEY, REL_SELF, Record, rel
from ..routing import route
from ..utils import Clock, utcnow
from .base import Resource, entity_id_from_url

STATE_PROVISIONAL = "provisional"
STATE_NEW = "new"

REL_ADDRESS = rel("entity", "address")
REL_CREDITCARD = rel("entity", "creditcard")

LINKED_ATTRIBUTES = {
    REL_ADDRESS: "shipping_address_id",
    REL_CREDITCARD: "payment_id",
}


class OrderRecord(Record):
    @property
    def is_complete(self) -> bool:
        return (
            bool(self.get("items"))
            and self.get("shipping_address_id") is not None
            and self.get("payment_id") is not None
        )

    def is_expired(self, now: datetime.datetime) -> bool:
        expires = self.get("expires")
        if expires is not None and expires.tzinfo is None:
            expires = expires.replace(tzinfo=datetime.timezone.utc)
        return self.get("state") == STATE_PROVISIONAL and expires is not None and expires <= now

    def validate(self):
        items = self.get("items")
        if items is None:
            return []
        if not isinstance(items, list):
            return ["Order items must be a list."]
        errors = []
        for i, item in enumerate(items):
            if not isinstance(item, collections.abc.Mapping) or item.get("product_id") is None:
                errors.append(f"Item {i} lacks a product.")
            elif not isinstance(item.get("quantity"), int) or item["quantity"] < 1:
                errors.append(f"Item {i} must have a positive quantity.")
        return errors


class OrderFormatter(ItemFormatterDecorator):
    """
    Leaves out expired provisional orders, and the address and payment links
    of orders that do not have them yet.
    """

    clock: Clock

    def preprocess(self, ctx, record, links):
        if OrderRecord(record).is_expired(self.clock()):
            return None
        links = [
            link
            for link in links
            if link.rel not in LINKED_ATTRIBUTES or record.get(LINKED_ATTRIBUTES[link.rel]) is not None
        ]
        return record, links

    def __init__(self, inner: ItemFormatter, clock: Clock):
        super().__init__(inner)
        self.clock = clock


class OrderResource(Resource):
    class Meta:
        name = "order"
        cache_entry_lifetime = 0
        fields = [
            "state",
            ("created", "created_at"),
            "expires",
            "items",
        ]
        links = [
            {"rel": REL_SELF, "href": "/order/{entity_id}"},
            {"rel": rel("entity", "user"), "href": "/user/{customer_id}"},
            {"rel": REL_ADDRESS, "href": "/address/{shipping_address_id}"},
            {"rel": REL_CREDITCARD, "href": "/creditcard/{payment_id}"},
        ]

    record_class = OrderRecord
    readonly_attributes = ("customer_id", "state", "expires", "created_at")

    clock: Clock
    provisional_lifetime: datetime.timedelta

    def build_item_formatter(self, default: ItemFormatter) -> ItemFormatter:
        return OrderFormatter(default, self.clock)

    def _inbound(self, request: RequestInfo) -> typing.Dict[str, typing.Any]:
        inbound = dict(self.populator.parse(request.body))
        links = inbound.get(LINKS_KEY) or []
        if not isinstance(links, list):
            raise MalformedRequestError()
        for link in links:
            if not isinstance(link, collections.abc.Mapping) or not isinstance(link.get("href"), str):
                raise MalformedRequestError()
            name = LINKED_ATTRIBUTES.get(link.get("rel"))
            if name is not None:
                inbound[name] = entity_id_from_url(link["href"])
        return inbound

    def _advance(self, record: Record) -> None:
        assert isinstance(record, OrderRecord)
        if record.is_complete:
            record["state"] = STATE_NEW
            record["expires"] = None
        else:
            record["state"] = STATE_PROVISIONAL
            record["expires"] = self.clock() + self.provisional_lifetime

    def _respond(self, record: Record, finalized_status: int) -> Response:
        status = 202 if record["state"] == STATE_PROVISIONAL else finalized_status
        return self.ok(self.serialize(self.represent(record)), status=status)

    @route("GET", "/user/{id}/order")
    def get_user_order_collection(self, request: RequestInfo, id: str) -> Response:
        return self.get_collection(request, {"customer_id": self.parse_id(id)})

    @route("POST", "/user/{id}/order")
    def create_user_order(self, request: RequestInfo, id: str) -> Response:
        inbound = self._inbound(request)
        record = self.save_new(
            request,
            {"customer_id": self.parse_id(id), "created_at": self.clock()},
            self._advance,
            inbound,
        )
        return self._respond(record, 201)

    @route("GET", "/order/{id}")
    def get_order_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)

    @route("PUT", "/order/{id}")
    def update_order_entity(self, request: RequestInfo, id: str) -> Response:
        record = self.load(self.parse_id(id))
        assert isinstance(record, OrderRecord)
        if record.is_expired(self.clock()):
            raise RecordNotFoundError(self.meta.name, id)
        if record.get("state") != STATE_PROVISIONAL:
            raise ConflictError(f"Order {id} has already been placed")
        inbound = self._inbound(request)
        record = self.save_existing(request, record, self._advance, inbound)
        return self._respond(record, 200)

    def __init__(
        self,
        *args,
        provisional_lifetime: int = 900,
        clock: Clock = utcnow,
        **kwargs
    ):
        self.clock = clock
        self.provisional_lifetime = datetime.timedelta(seconds=provisional_lifetime)
        super().__init__(*args, **kwargs)
