"""
:py:mod:`hateoas_serde.serde.renderer` module contains the class in charge of rendering
the internal representation of entities to JSON-compatible structures.

Synopsis
--------

.. code-block:: python

   import json

   from hateoas_serde.serde.renderer import ReprRenderer

   renderer = ReprRenderer()

   internal_repr = ResourceRepr(
       attributes=[
           ("name", "Bib"),
           ("price", OrderedDict([("price", 8), ("orig", 12)])),
       ],
       links=[
           LinkRepr(rel="self", href="/product/567"),
       ],
   )

   print(json.dumps(renderer(internal_repr)))

"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from ..models import LINKS_KEY
from .models import AttributeValue, LinkRepr, ResourceRepr
from .types import JSONScalar, JSONValue, MutableJSONObject


class TZLocalizer(typing.Protocol):
    def localize(self, dt: datetime.datetime) -> datetime.datetime:
        ...  # pragma: nocover


class ReprRendererContext:
    parent: typing.Optional["ReprRendererContext"]
    path: typing.Tuple[str, ...]

    def __truediv__(self, component: typing.Union[str, int]) -> "ReprRendererContext":
        return ReprRendererContext(parent=self, path=self.path + (str(component),))

    def __str__(self) -> str:
        return "/" + "/".join(self.path)

    def __init__(
        self,
        parent: typing.Optional["ReprRendererContext"],
        path: typing.Tuple[str, ...] = (),
    ):
        self.parent = parent
        self.path = path


class ReprRenderer:
    _render_decimal_as_str: bool = True
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None

    def _dict_factory(self, items: typing.Iterator[typing.Tuple[str, typing.Any]]):
        return OrderedDict(items)

    def _render_datetime(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(datetime.datetime, repr_)
        if _repr.tzinfo is None:
            if self._assume_naive_timezone_as is None:
                raise ValueError(f"{ctx}: naive datetime {_repr}")
            else:
                if hasattr(self._assume_naive_timezone_as, "localize"):
                    _repr = typing.cast(TZLocalizer, self._assume_naive_timezone_as).localize(_repr)
                else:
                    _repr = _repr.replace(tzinfo=self._assume_naive_timezone_as)
        return _repr.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(datetime.date, repr_)
        return _repr.isoformat()

    def _render_decimal(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        _repr = typing.cast(decimal.Decimal, repr_)
        return str(_repr) if self._render_decimal_as_str else float(_repr)

    def _render_bytes(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        return base64.b64encode(typing.cast(bytes, repr_)).decode("ascii")

    def _render_passthrough(
        self: "ReprRenderer", ctx: ReprRendererContext, repr_: AttributeValue
    ) -> JSONScalar:
        return typing.cast(JSONScalar, repr_)

    _supported_types: typing.ClassVar[typing.Dict[type, typing.Callable]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        str: _render_passthrough,
        int: _render_passthrough,
        float: _render_passthrough,
        bool: _render_passthrough,
        None.__class__: _render_passthrough,
    }

    def _render_scalar(self, ctx: ReprRendererContext, repr_: AttributeValue) -> JSONScalar:
        # fast pass
        r = self._supported_types.get(type(repr_))
        if r is not None:
            return r(self, ctx, repr_)

        for type_, r in self._supported_types.items():
            if isinstance(repr_, type_):
                return r(self, ctx, repr_)

        raise TypeError(f"{ctx}: unsupported type {repr_!r}")

    def _render_value(self, ctx: ReprRendererContext, repr_: AttributeValue) -> JSONValue:
        if isinstance(repr_, collections.abc.Mapping):
            return self._dict_factory(
                (k, self._render_value(ctx / k, v)) for k, v in repr_.items()
            )
        elif isinstance(repr_, (str, bytes)):
            return self._render_scalar(ctx, repr_)
        elif isinstance(repr_, (collections.abc.Sequence, collections.abc.Set)):
            return [self._render_value(ctx / i, v) for i, v in enumerate(repr_)]
        else:
            return self._render_scalar(ctx, repr_)

    def _render_link(self, ctx: ReprRendererContext, repr_: LinkRepr) -> MutableJSONObject:
        return {
            "rel": repr_.rel,
            "href": repr_.href,
        }

    def _render_resource(self, ctx: ReprRendererContext, repr_: ResourceRepr) -> MutableJSONObject:
        retval = self._dict_factory(
            (k, self._render_value(ctx / k, v)) for k, v in repr_.attributes.items()
        )
        if repr_.links is not None:
            new_ctx = ctx / LINKS_KEY
            retval[LINKS_KEY] = [
                self._render_link(new_ctx / i, link) for i, link in enumerate(repr_.links)
            ]
        return retval

    def __call__(
        self, repr_: typing.Union[ResourceRepr, typing.Iterable[ResourceRepr]]
    ) -> typing.Union[MutableJSONObject, typing.List[MutableJSONObject]]:
        ctx = ReprRendererContext(None)
        if isinstance(repr_, ResourceRepr):
            return self._render_resource(ctx, repr_)
        else:
            return [self._render_resource(ctx / i, item) for i, item in enumerate(repr_)]

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self._render_decimal_as_str = render_decimal_as_str
        self._assume_naive_timezone_as = assume_naive_timezone_as
