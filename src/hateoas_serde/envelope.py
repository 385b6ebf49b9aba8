"""
The framework-neutral request and response envelopes the resource handlers
work with. :py:mod:`hateoas_serde.web` translates them to and from Starlette.
"""
import dataclasses
import typing

from .exceptions import HateoasSerdeException

ERROR_HEADER = "X-API-Error"


@dataclasses.dataclass(frozen=True)
class RequestInfo:
    path: str = "/"
    query_params: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    body: typing.Union[str, bytes, None] = None


@dataclasses.dataclass
class Response:
    status: int
    body: str = ""
    headers: typing.Dict[str, str] = dataclasses.field(default_factory=dict)


def error_response(exc: HateoasSerdeException) -> Response:
    """
    Builds the response for a failed request: the status of the error, an
    empty body, and the message in the ``X-API-Error`` header.
    """
    return Response(status=exc.status, headers={ERROR_HEADER: exc.message})
