import pytest
import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ....exceptions import InvalidDeclarationError, RecordNotFoundError, StoreError
from ....models import Record

Base = orm.declarative_base()


class Address(Base):
    __tablename__ = "addresses"

    entity_id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)
    parent_id = sa.Column(sa.Integer, nullable=False)
    firstname = sa.Column(sa.String(255))
    city = sa.Column(sa.String(255))
    postcode = sa.Column(sa.String(16), unique=True)


class Product(Base):
    __tablename__ = "products"

    entity_id = sa.Column(sa.Integer, primary_key=True)
    event_ids = sa.Column(sa.String(255))


@pytest.fixture
def engine():
    engine = sa.create_engine("sqlite:///")
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session_factory(engine):
    return orm.sessionmaker(bind=engine)


@pytest.fixture
def target(session_factory):
    from ..store import SQLABackingStore

    return SQLABackingStore(session_factory, Address)


@pytest.fixture
def fixture_data(session_factory):
    with session_factory() as session:
        session.add_all(
            [
                Address(entity_id=1, parent_id=5, firstname="Ann", city="New York", postcode="10001"),
                Address(entity_id=2, parent_id=5, firstname="Bob", city="Brooklyn", postcode="11201"),
                Address(entity_id=3, parent_id=6, firstname="Cid", city="New Haven", postcode="06510"),
            ]
        )
        session.commit()


def test_attribute_names(target):
    assert target.attribute_names == ("entity_id", "parent_id", "firstname", "city", "postcode")
    assert target.id_attribute == "entity_id"
    assert target.name == "addresses"


@pytest.mark.usefixtures("fixture_data")
def test_load_by_id(target):
    result = target.load_by_id(2)
    assert isinstance(result, Record)
    assert result == {
        "entity_id": 2,
        "parent_id": 5,
        "firstname": "Bob",
        "city": "Brooklyn",
        "postcode": "11201",
    }
    with pytest.raises(RecordNotFoundError):
        target.load_by_id(100)


@pytest.mark.usefixtures("fixture_data")
def test_query_collection(target):
    assert [r["entity_id"] for r in target.query_collection()] == [1, 2, 3]
    assert [r["entity_id"] for r in target.query_collection({"parent_id": 5})] == [1, 2]
    assert [
        r["entity_id"]
        for r in target.query_collection({"city": {"like": "New%"}, "parent_id": {"in": [5, 6]}})
    ] == [1, 3]
    assert [r["entity_id"] for r in target.query_collection({"entity_id": {"gteq": 2}})] == [2, 3]
    assert [r["entity_id"] for r in target.query_collection({"firstname": {"neq": "Ann"}})] == [2, 3]
    with pytest.raises(InvalidDeclarationError):
        target.query_collection({"street": "Main St"})


def test_insert(target, session_factory):
    record = target.new_record()
    record.update(parent_id=5, firstname="Dee", city="Queens", postcode="11101", number="4111")
    result = target.save(record)
    assert result["entity_id"] is not None
    with session_factory() as session:
        assert session.get(Address, result["entity_id"]).firstname == "Dee"


@pytest.mark.usefixtures("fixture_data")
def test_update(target, session_factory):
    record = target.load_by_id(1)
    record["city"] = "Hoboken"
    target.save(record)
    with session_factory() as session:
        assert session.get(Address, 1).city == "Hoboken"
        assert session.query(Address).count() == 3


@pytest.mark.usefixtures("fixture_data")
def test_integrity_error(target):
    record = target.new_record()
    record.update(parent_id=5, firstname="Eve", postcode="10001")
    with pytest.raises(StoreError) as e:
        target.save(record)
    assert e.value.sensitive
    assert [r["entity_id"] for r in target.query_collection()] == [1, 2, 3]


def test_composite_primary_key_is_rejected(session_factory):
    from ..store import SQLABackingStore

    class Pair(Base):
        __tablename__ = "pairs"

        a = sa.Column(sa.Integer, primary_key=True)
        b = sa.Column(sa.Integer, primary_key=True)

    with pytest.raises(InvalidDeclarationError):
        SQLABackingStore(session_factory, Pair)


def test_contains_matches_whole_list_elements(session_factory):
    from ..store import SQLABackingStore

    with session_factory() as session:
        session.add_all(
            [
                Product(entity_id=1, event_ids="12,30"),
                Product(entity_id=2, event_ids="1"),
                Product(entity_id=3, event_ids="10,1,21"),
                Product(entity_id=4, event_ids=None),
            ]
        )
        session.commit()
    target = SQLABackingStore(session_factory, Product)

    def ids(operand):
        return [r["entity_id"] for r in target.query_collection({"event_ids": {"contains": operand}})]

    assert ids(1) == [2, 3]
    assert ids(12) == [1]
    assert ids(2) == []
    assert ids("%") == []
