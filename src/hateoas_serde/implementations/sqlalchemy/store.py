import logging
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...exceptions import InvalidDeclarationError, RecordNotFoundError, StoreError
from ...interfaces import BackingStore, Filters
from ...models import Record
from .querying import build_filter_expression

logger = logging.getLogger(__name__)


class SQLABackingStore(BackingStore):
    """
    A :py:class:`BackingStore` over a declaratively mapped SQLAlchemy class.
    Records carry the values of the column attributes of the mapper, keyed by
    attribute name.

    :param session_factory: a callable returning a new :py:class:`sqlalchemy.orm.Session`.
    :param model: the mapped class.
    :param record_class: the :py:class:`Record` subclass handed out.
    """

    session_factory: typing.Callable[[], orm.Session]
    model: typing.Type[typing.Any]
    record_class: typing.Type[Record]
    mapper: orm.Mapper
    attribute_names: typing.Tuple[str, ...]
    id_attribute: str

    @property
    def name(self) -> str:
        return self.mapper.local_table.name

    def _to_record(self, obj: typing.Any) -> Record:
        return self.record_class((name, getattr(obj, name)) for name in self.attribute_names)

    def _apply(self, obj: typing.Any, record: Record) -> None:
        for name in self.attribute_names:
            if name in record:
                setattr(obj, name, record[name])

    def new_record(self) -> Record:
        return self.record_class()

    def load_by_id(self, id: typing.Any) -> Record:
        with self.session_factory() as session:
            obj = session.get(self.model, id)
            if obj is None:
                raise RecordNotFoundError(self.name, id)
            return self._to_record(obj)

    def query_collection(self, filters: Filters = {}) -> typing.Iterable[Record]:
        unknown = [name for name in filters if name not in self.attribute_names]
        if unknown:
            raise InvalidDeclarationError(f"cannot filter {self.name} by {', '.join(unknown)}")
        columns = {name: getattr(self.model, name) for name in filters}
        with self.session_factory() as session:
            q = session.query(self.model)
            expr = build_filter_expression(columns, filters)
            if expr is not None:
                q = q.filter(expr)
            q = q.order_by(getattr(self.model, self.id_attribute))
            return [self._to_record(obj) for obj in q]

    def save(self, record: Record) -> Record:
        with self.session_factory() as session:
            try:
                id = record.get(self.id_attribute)
                obj = session.get(self.model, id) if id is not None else None
                if obj is None:
                    obj = self.model()
                    session.add(obj)
                self._apply(obj, record)
                session.commit()
                record.update(self._to_record(obj))
            except sa.exc.SQLAlchemyError as e:
                session.rollback()
                logger.debug("rolled back a failed save on %s", self.name, exc_info=True)
                raise StoreError(str(e), sensitive=True) from e
        return record

    def __init__(
        self,
        session_factory: typing.Callable[[], orm.Session],
        model: typing.Type[typing.Any],
        record_class: typing.Type[Record] = Record,
    ):
        self.session_factory = session_factory
        self.model = model
        self.record_class = record_class
        self.mapper = sa.inspect(model)
        self.attribute_names = tuple(prop.key for prop in self.mapper.column_attrs)
        pk = self.mapper.primary_key
        if len(pk) != 1:
            raise InvalidDeclarationError(f"{model.__name__} must have a single-column primary key")
        self.id_attribute = self.mapper.get_property_by_column(pk[0]).key
