import datetime
import decimal
from collections import OrderedDict

import pytest


@pytest.fixture
def target_class():
    from ..renderer import ReprRenderer

    return ReprRenderer


def test_resource(target_class):
    from ..models import LinkRepr, ResourceRepr

    target = target_class()

    result = target(
        ResourceRepr(
            attributes=[
                ("name", "Bib"),
                ("price", OrderedDict([("price", decimal.Decimal("8.00")), ("orig", 12)])),
                ("department", ["boys", "girls"]),
            ],
            links=[
                LinkRepr(rel="self", href="/product/567"),
                LinkRepr(rel="http://rel.totsy.com/entity/event", href="/event/12"),
            ],
        )
    )
    assert result == {
        "name": "Bib",
        "price": {"price": "8.00", "orig": 12},
        "department": ["boys", "girls"],
        "links": [
            {"rel": "self", "href": "/product/567"},
            {"rel": "http://rel.totsy.com/entity/event", "href": "/event/12"},
        ],
    }
    assert list(result.keys())[-1] == "links"


def test_no_links(target_class):
    from ..models import ResourceRepr

    target = target_class()
    assert target(ResourceRepr(attributes={"quantity": 3})) == {"quantity": 3}
    assert target(ResourceRepr(attributes={"quantity": 3}, links=[])) == {
        "quantity": 3,
        "links": [],
    }


def test_collection(target_class):
    from ..models import ResourceRepr

    target = target_class()
    assert target([ResourceRepr({"a": 1}), ResourceRepr({"a": 2})]) == [{"a": 1}, {"a": 2}]
    assert target([]) == []


def test_scalars(target_class):
    from ..models import ResourceRepr

    target = target_class(render_decimal_as_str=False)
    result = target(
        ResourceRepr(
            attributes={
                "start": datetime.datetime(2012, 6, 1, 9, 0, tzinfo=datetime.timezone(datetime.timedelta(hours=-4))),
                "day": datetime.date(2012, 6, 1),
                "weight": decimal.Decimal("1.5"),
                "blob": b"\x00\x01",
                "hot": True,
                "none": None,
            }
        )
    )
    assert result == {
        "start": "2012-06-01T13:00:00+00:00",
        "day": "2012-06-01",
        "weight": 1.5,
        "blob": "AAE=",
        "hot": True,
        "none": None,
    }


def test_naive_datetime(target_class):
    from ..models import ResourceRepr

    with pytest.raises(ValueError):
        target_class()(ResourceRepr({"start": datetime.datetime(2012, 6, 1)}))

    target = target_class(assume_naive_timezone_as=datetime.timezone.utc)
    assert target(ResourceRepr({"start": datetime.datetime(2012, 6, 1)})) == {
        "start": "2012-06-01T00:00:00+00:00"
    }


def test_unsupported_type(target_class):
    from ..models import ResourceRepr

    with pytest.raises(TypeError):
        target_class()(ResourceRepr({"x": object()}))
