from ..envelope import RequestInfo, Response
from ..models import REL_SELF, rel
from ..routing import route
from .base import Resource


class RewardResource(Resource):
    """
    Store credit granted to a customer.
    """

    class Meta:
        name = "reward"
        fields = [
            "amount",
            "reason",
            ("created", "created_at"),
            ("expires", "expires_at"),
        ]
        links = [
            {"rel": REL_SELF, "href": "/reward/{entity_id}"},
            {"rel": rel("entity", "user"), "href": "/user/{customer_id}"},
        ]

    @route("GET", "/user/{id}/reward")
    def get_user_reward_collection(self, request: RequestInfo, id: str) -> Response:
        return self.get_collection(request, {"customer_id": self.parse_id(id)})

    @route("GET", "/reward/{id}")
    def get_reward_entity(self, request: RequestInfo, id: str) -> Response:
        return self.get_item(request, id)
