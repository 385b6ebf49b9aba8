import collections
import logging
import typing

from .exceptions import TemplateResolutionError
from .interfaces import RoutingRegistry
from .models import Link, ResourceRef
from .serde.models import LinkRepr
from .uritemplate import URITemplate, join
from .utils import assert_not_none

logger = logging.getLogger(__name__)


class LinkResolver:
    """
    Resolves declared :py:class:`Link` entries against the attributes of an entity.

    :param RoutingRegistry registry: resolves resource references to path templates.
    :param str base_uri: the URI relative hrefs are joined onto.
    """

    registry: RoutingRegistry
    base_uri: str

    def _resource_template(self, ref: ResourceRef) -> URITemplate:
        return URITemplate(self.registry.resolve_path(ref.resource_type, ref.operation))

    def _resource_attributes(
        self,
        template: URITemplate,
        ref: ResourceRef,
        attributes: typing.Mapping[str, typing.Any],
    ) -> typing.Mapping[str, typing.Any]:
        if not ref.params:
            return attributes
        params: typing.Dict[str, typing.Any] = {}
        for placeholder, source in ref.params:
            if source not in attributes:
                raise TemplateResolutionError(template.template, source, "missing attribute")
            params[placeholder] = attributes[source]
        return collections.ChainMap(params, attributes)

    def resolve(self, link: Link, attributes: typing.Mapping[str, typing.Any]) -> LinkRepr:
        if link.href is not None:
            template = link.href
        else:
            ref = assert_not_none(link.resource)
            template = self._resource_template(ref)
            attributes = self._resource_attributes(template, ref, attributes)

        href = template.expand(attributes)
        if not template.is_absolute:
            href = join(self.base_uri, href)
        return LinkRepr(rel=link.rel, href=href)

    def resolve_all(
        self, links: typing.Iterable[Link], attributes: typing.Mapping[str, typing.Any]
    ) -> typing.List[LinkRepr]:
        return [self.resolve(link, attributes) for link in links]

    def validate(self, links: typing.Iterable[Link]) -> None:
        """
        Resolves every resource reference in ``links`` against the registry, so that
        a misconfigured link spec fails before any request is served.

        :raises UnknownResourceReferenceError: for the first unregistered reference.
        """
        for link in links:
            if link.resource is not None:
                template = self._resource_template(link.resource)
                logger.debug("link %s resolves to %s", link.rel, template.template)

    def __init__(self, registry: RoutingRegistry, base_uri: str = ""):
        self.registry = registry
        self.base_uri = base_uri
