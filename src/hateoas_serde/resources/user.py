import re

from ..envelope import RequestInfo, Response
from ..models import REL_SELF, Record, rel
from ..routing import route
from .base import Resource

EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserRecord(Record):
    def validate(self):
        errors = []
        email = self.get("email")
        if not email:
            errors.append("Email address is required.")
        elif not EMAIL.match(email):
            errors.append(f'"{email}" is not a valid email address.')
        if not self.get("firstname"):
            errors.append("First name is required.")
        if not self.get("lastname"):
            errors.append("Last name is required.")
        return errors


class UserResource(Resource):
    """
    A registered customer, linking to the collections the customer owns.
    """

    class Meta:
        name = "user"
        fields = [
            "email",
            ("first_name", "firstname"),
            ("last_name", "lastname"),
            ("created", "created_at"),
        ]
        links = [
            {"rel": REL_SELF, "href": "/user/{entity_id}"},
            {
                "rel": rel("collection", "address"),
                "resource": ("address", "get_user_address_collection", {"id": "entity_id"}),
            },
            {
                "rel": rel("collection", "creditcard"),
                "resource": ("creditcard", "get_user_creditcard_collection", {"id": "entity_id"}),
            },
            {
                "rel": rel("collection", "order"),
                "resource": ("order", "get_user_order_collection", {"id": "entity_id"}),
            },
            {
                "rel": rel("collection", "reward"),
                "resource": ("reward", "get_user_reward_collection", {"id": "entity_id"}),
            },
        ]

    record_class = UserRecord
    readonly_attributes = ("created_at",)

    @route("GET", "/user/{id}")
    def get_user_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)

    @route("PUT", "/user/{id}")
    def update_user_entity(self, request: RequestInfo, id: str) -> Response:
        return self.update(request, id)
