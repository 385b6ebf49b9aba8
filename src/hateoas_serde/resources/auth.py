import collections.abc

from ..envelope import RequestInfo, Response
from ..exceptions import AuthenticationError, MalformedRequestError, RecordNotFoundError
from ..formatter import derive
from ..interfaces import Authenticator
from ..models import REL_SELF, rel
from ..routing import route
from .base import Resource


class AuthResource(Resource):
    """
    Sessions of authenticated customers. Credentials are checked, and sessions
    kept, by the injected :py:class:`Authenticator`.
    """

    class Meta:
        name = "auth"
        fields = ["token"]
        links = [
            {"rel": REL_SELF, "href": "/auth/{token}"},
            {
                "rel": rel("entity", "user"),
                "resource": ("user", "get_user_entity", {"id": "entity_id"}),
            },
        ]

    authenticator: Authenticator

    @route("POST", "/auth")
    def create_session(self, request: RequestInfo) -> Response:
        credentials = self.populator.parse(request.body)
        email, password = credentials.get("email"), credentials.get("password")
        if not isinstance(email, str) or not isinstance(password, str):
            raise MalformedRequestError("Both email and password are required")
        result = self.authenticator.authenticate(email, password)
        if result is None:
            raise AuthenticationError()
        token, user = result
        repr_ = self.format_item(derive(user, token=token))
        return self.ok(self.serialize(repr_), status=201)

    @route("DELETE", "/auth/{token}")
    def delete_session(self, request: RequestInfo, token: str) -> Response:
        if not self.authenticator.end_session(token):
            raise RecordNotFoundError("session", token)
        return Response(status=204)

    def __init__(self, *args, authenticator: Authenticator, **kwargs):
        self.authenticator = authenticator
        super().__init__(*args, **kwargs)
