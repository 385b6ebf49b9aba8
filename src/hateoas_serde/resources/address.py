from ..envelope import RequestInfo, Response
from ..models import REL_SELF, Record, rel
from ..routing import route
from .base import Resource

REQUIRED = (
    ("firstname", "First name"),
    ("lastname", "Last name"),
    ("street", "Street"),
    ("city", "City"),
    ("postcode", "Zip code"),
    ("country_id", "Country"),
)


class AddressRecord(Record):
    def validate(self):
        return [f"{label} is required." for name, label in REQUIRED if not self.get(name)]


class AddressResource(Resource):
    class Meta:
        name = "address"
        fields = [
            ("first_name", "firstname"),
            ("last_name", "lastname"),
            "street",
            "city",
            ("state", "region"),
            ("zip", "postcode"),
            ("country", "country_id"),
            "telephone",
        ]
        links = [
            {"rel": REL_SELF, "href": "/address/{entity_id}"},
            {"rel": rel("entity", "user"), "href": "/user/{parent_id}"},
        ]

    record_class = AddressRecord
    readonly_attributes = ("parent_id",)

    @route("GET", "/user/{id}/address")
    def get_user_address_collection(self, request: RequestInfo, id: str) -> Response:
        return self.get_collection(request, {"parent_id": self.parse_id(id)})

    @route("POST", "/user/{id}/address")
    def create_user_address(self, request: RequestInfo, id: str) -> Response:
        return self.create(request, {"parent_id": self.parse_id(id)})

    @route("GET", "/address/{id}")
    def get_address_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)

    @route("PUT", "/address/{id}")
    def update_address_entity(self, request: RequestInfo, id: str) -> Response:
        return self.update(request, id)
