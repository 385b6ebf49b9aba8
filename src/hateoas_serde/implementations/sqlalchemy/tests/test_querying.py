import pytest
import sqlalchemy as sa  # type: ignore

from ..querying import build_condition_expression, build_filter_expression

table = sa.Table(
    "products",
    sa.MetaData(),
    sa.Column("entity_id", sa.Integer, primary_key=True),
    sa.Column("sku", sa.String(64)),
    sa.Column("status", sa.Integer),
)


def compiled(expr) -> str:
    return str(expr.compile(compile_kwargs={"literal_binds": True}))


@pytest.mark.parametrize(
    "condition, expected",
    [
        (1, "products.status = 1"),
        ({"gt": 1}, "products.status > 1"),
        ({"lteq": 2}, "products.status <= 2"),
        ({"in": [1, 2]}, "products.status IN (1, 2)"),
        ({"null": True}, "products.status IS NULL"),
        ({"notnull": True}, "products.status IS NOT NULL"),
        (None, "products.status IS NULL"),
        ({"neq": 2}, "products.status != 2 OR products.status IS NULL"),
    ],
)
def test_build_condition_expression(condition, expected):
    assert compiled(build_condition_expression(table.c.status, condition)) == expected


def test_like():
    assert compiled(build_condition_expression(table.c.sku, {"like": "B-%"})) == "products.sku LIKE 'B-%'"


def test_build_filter_expression():
    assert build_filter_expression({}, {}) is None
    expr = build_filter_expression({"status": table.c.status, "sku": table.c.sku}, {"status": 1, "sku": "B-1"})
    assert compiled(expr) == "products.status = 1 AND products.sku = 'B-1'"


def test_contains_is_rejected_on_unsupported_columns():
    from ....exceptions import InvalidDeclarationError

    column = sa.Column("event_ids", sa.JSON)
    with pytest.raises(InvalidDeclarationError):
        build_condition_expression(column, {"contains": 1})
