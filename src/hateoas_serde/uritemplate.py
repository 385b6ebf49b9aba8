"""
:py:mod:`hateoas_serde.uritemplate` substitutes ``{name}`` placeholders in a
URI template with the attributes of an entity.

Synopsis
--------

.. code-block:: python

   from hateoas_serde.uritemplate import URITemplate

   URITemplate("/product/{entity_id}").expand({"entity_id": 567})  # "/product/567"

"""

import collections.abc
import decimal
import re
import typing

from .exceptions import TemplateResolutionError

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

ScalarTypes = (str, int, float, decimal.Decimal)


class URITemplate:
    template: str
    names: typing.Tuple[str, ...]
    """
    The placeholder names in the order they appear in the template.
    """

    @property
    def is_absolute(self) -> bool:
        return "://" in self.template

    def _lookup(self, attributes: typing.Mapping[str, typing.Any], name: str) -> str:
        try:
            value = attributes[name]
        except KeyError:
            raise TemplateResolutionError(self.template, name, "missing attribute")
        if value is None:
            raise TemplateResolutionError(self.template, name, "missing attribute")
        if not isinstance(value, ScalarTypes):
            raise TemplateResolutionError(
                self.template, name, f"non-scalar value of type {type(value).__name__}"
            )
        return str(value)

    def expand(self, attributes: typing.Mapping[str, typing.Any]) -> str:
        return PLACEHOLDER.sub(lambda m: self._lookup(attributes, m.group(1)), self.template)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.template!r})"

    def __eq__(self, other: typing.Any) -> bool:
        return isinstance(other, URITemplate) and other.template == self.template

    def __hash__(self) -> int:
        return hash(self.template)

    def __init__(self, template: str):
        if not isinstance(template, str):
            raise TypeError(f"template must be a str, got {template!r}")
        self.template = template
        self.names = tuple(m.group(1) for m in PLACEHOLDER.finditer(template))


def resolve(template: typing.Union[str, URITemplate], attributes: collections.abc.Mapping) -> str:
    """
    Substitutes every placeholder in ``template`` with the value of the
    attribute of the same name.

    :param Union[str, URITemplate] template: the template.
    :param Mapping attributes: the attributes of the entity.
    :return: the resolved URI.
    :raises TemplateResolutionError: when an attribute is missing or is not a scalar.
    """
    if not isinstance(template, URITemplate):
        template = URITemplate(template)
    return template.expand(attributes)


def join(base_uri: str, path: str) -> str:
    if not base_uri:
        return path
    return base_uri.rstrip("/") + "/" + path.lstrip("/")
