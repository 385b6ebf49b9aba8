"""
Wires the resource handlers together.

.. code-block:: python

   settings = get_settings()
   resources, registry = build_resources(stores, settings, authenticator=authenticator)
   app = create_app(resources, registry, settings)

"""
import datetime
import logging
import typing

from .cache import InMemoryCacheBackend, ResponseCache
from .config import Settings
from .formatter import RepresentationFormatter
from .interfaces import Authenticator, BackingStore, CacheBackend
from .links import LinkResolver
from .projection import FieldProjector
from .resources.address import AddressResource
from .resources.auth import AuthResource
from .resources.base import Resource
from .resources.creditcard import CreditCardResource
from .resources.event import EventResource
from .resources.order import OrderResource
from .resources.product import ProductResource
from .resources.reward import RewardResource
from .resources.user import UserResource
from .routing import RouteRegistry
from .serde.renderer import ReprRenderer
from .utils import Clock, utcnow

logger = logging.getLogger(__name__)

STORE_BACKED_RESOURCES: typing.Sequence[typing.Type[Resource]] = (
    ProductResource,
    EventResource,
    UserResource,
    AddressResource,
    CreditCardResource,
    RewardResource,
    OrderResource,
)


def build_registry(resource_classes: typing.Iterable[typing.Type[Resource]]) -> RouteRegistry:
    registry = RouteRegistry()
    for resource_class in resource_classes:
        registry.scan(resource_class.meta.name, resource_class)
    return registry


def build_resources(
    stores: typing.Mapping[str, BackingStore],
    settings: Settings,
    authenticator: typing.Optional[Authenticator] = None,
    cache_backend: typing.Optional[CacheBackend] = None,
    clock: Clock = utcnow,
) -> typing.Tuple[typing.Dict[str, Resource], RouteRegistry]:
    """
    Builds every resource handler over its store.

    :param stores: the backing stores, keyed by resource name (``product``, ``event``, ...).
    :param Settings settings: the application settings.
    :param authenticator: enables the ``auth`` resource when given.
    :param cache_backend: defaults to a process-local :py:class:`InMemoryCacheBackend`.
    :param clock: returns the current, timezone-aware time.
    :return: the handlers keyed by resource name, and the registry of their routes.
    :raises UnknownResourceReferenceError: when a link refers to an unregistered operation.
    """
    resource_classes: typing.List[typing.Type[Resource]] = list(STORE_BACKED_RESOURCES)
    if authenticator is not None:
        resource_classes.append(AuthResource)
    registry = build_registry(resource_classes)

    link_resolver = LinkResolver(registry, settings.base_uri)
    for resource_class in resource_classes:
        link_resolver.validate(resource_class.meta.links)

    common = dict(
        formatter=RepresentationFormatter(FieldProjector(), link_resolver),
        cache=ResponseCache(
            cache_backend if cache_backend is not None else InMemoryCacheBackend(),
            enabled=settings.cache_enabled,
        ),
        renderer=ReprRenderer(assume_naive_timezone_as=datetime.timezone.utc),
    )
    storefront = dict(web_base_url=settings.web_base_url, media_base_url=settings.media_base_url)

    resources: typing.Dict[str, Resource] = {
        "product": ProductResource(stores["product"], **common, **storefront),
        "event": EventResource(stores["event"], **common, **storefront, clock=clock),
        "user": UserResource(stores["user"], **common),
        "address": AddressResource(stores["address"], **common),
        "creditcard": CreditCardResource(stores["creditcard"], **common),
        "reward": RewardResource(stores["reward"], **common),
        "order": OrderResource(
            stores["order"],
            **common,
            provisional_lifetime=settings.provisional_order_lifetime,
            clock=clock,
        ),
    }
    if authenticator is not None:
        resources["auth"] = AuthResource(stores["user"], **common, authenticator=authenticator)

    logger.info("built %d resources serving %d routes", len(resources), len(registry))
    return resources, registry
