import dataclasses
import inspect
import typing

from .exceptions import InvalidDeclarationError, UnknownResourceReferenceError
from .interfaces import RoutingRegistry

ROUTE_ATTR = "__hateoas_route__"

F = typing.TypeVar("F", bound=typing.Callable[..., typing.Any])


@dataclasses.dataclass(frozen=True)
class Route:
    method: str
    path: str
    resource_type: str
    operation: str
    """
    The name of the handler method serving the route.
    """


def route(method: str, path: str) -> typing.Callable[[F], F]:
    """
    Marks a resource handler method as the endpoint of ``method`` ``path``.

    .. code-block:: python

       @route("GET", "/product/{id}")
       def get_product_entity(self, request, id):
           ...

    """

    def _(f: F) -> F:
        setattr(f, ROUTE_ATTR, (method.upper(), path))
        return f

    return _


class RouteRegistry(RoutingRegistry):
    _routes: typing.Dict[typing.Tuple[str, str], Route]

    def add(self, route: Route) -> None:
        key = (route.resource_type, route.operation)
        if key in self._routes:
            raise InvalidDeclarationError(
                f'operation "{route.operation}" of resource "{route.resource_type}" is already registered'
            )
        self._routes[key] = route

    def scan(self, resource_type: str, handler_class: typing.Type) -> typing.List[Route]:
        """
        Registers every method of ``handler_class`` decorated with :py:func:`route`.

        :return: the routes found, ordered by operation name.
        """
        retval: typing.List[Route] = []
        for name, member in inspect.getmembers(handler_class, inspect.isfunction):
            spec = getattr(member, ROUTE_ATTR, None)
            if spec is None:
                continue
            method, path = spec
            r = Route(method=method, path=path, resource_type=resource_type, operation=name)
            self.add(r)
            retval.append(r)
        retval.sort(key=lambda r: r.operation)
        return retval

    def resolve_path(self, resource_type: str, operation: str) -> str:
        try:
            return self._routes[(resource_type, operation)].path
        except KeyError:
            raise UnknownResourceReferenceError(resource_type, operation)

    def __iter__(self) -> typing.Iterator[Route]:
        return iter(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)

    def __init__(self):
        self._routes = {}
