import datetime

from ..envelope import RequestInfo, Response
from ..exceptions import MalformedRequestError
from ..models import REL_SELF, Record, rel
from ..routing import route
from ..utils import english_enumerate
from .base import Resource

CARD_TYPES = ("AE", "DI", "MC", "VI")


class CreditCardRecord(Record):
    def validate(self):
        errors = []
        if self.get("cc_type") not in CARD_TYPES:
            errors.append(f"Card type must be one of {english_enumerate(CARD_TYPES)}.")
        last4 = self.get("cc_last4")
        if not (isinstance(last4, str) and len(last4) == 4 and last4.isdigit()):
            errors.append("A card number is required.")
        month, year = self.get("cc_exp_month"), self.get("cc_exp_year")
        if not (isinstance(month, int) and 1 <= month <= 12):
            errors.append("Expiration month must be between 1 and 12.")
        elif not isinstance(year, int) or (year, month) < (
            datetime.date.today().year,
            datetime.date.today().month,
        ):
            errors.append("The card has expired.")
        return errors


def keep_last_digits(record: Record) -> None:
    """
    Replaces an inbound card number by its last four digits. The full number and
    the verification code are never stored.
    """
    number = record.pop("number", None)
    record.pop("cvv", None)
    if number is None:
        return
    digits = "".join(c for c in str(number) if c.isdigit())
    if len(digits) < 12:
        raise MalformedRequestError("Invalid card number")
    record["cc_last4"] = digits[-4:]


class CreditCardResource(Resource):
    class Meta:
        name = "creditcard"
        fields = [
            ("type", "cc_type"),
            ("last4", "cc_last4"),
            ("exp_month", "cc_exp_month"),
            ("exp_year", "cc_exp_year"),
            ("owner", "cc_owner"),
        ]
        links = [
            {"rel": REL_SELF, "href": "/creditcard/{entity_id}"},
            {"rel": rel("entity", "user"), "href": "/user/{customer_id}"},
        ]

    record_class = CreditCardRecord
    readonly_attributes = ("customer_id",)

    @route("GET", "/user/{id}/creditcard")
    def get_user_creditcard_collection(self, request: RequestInfo, id: str) -> Response:
        return self.get_collection(request, {"customer_id": self.parse_id(id)})

    @route("POST", "/user/{id}/creditcard")
    def create_user_creditcard(self, request: RequestInfo, id: str) -> Response:
        return self.create(request, {"customer_id": self.parse_id(id)}, keep_last_digits)

    @route("GET", "/creditcard/{id}")
    def get_creditcard_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)
