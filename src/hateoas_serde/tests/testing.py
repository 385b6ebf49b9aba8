import datetime
import typing

from ..conditions import matches
from ..exceptions import RecordNotFoundError
from ..interfaces import Authenticator, BackingStore, Filters
from ..models import Record
from ..routing import Route, RouteRegistry


class PlainBackingStore(BackingStore):
    """
    An in-memory :py:class:`BackingStore` keyed by ``entity_id``. Setting
    ``fail_with`` makes every subsequent save raise it.
    """

    name: str
    records: typing.Dict[int, Record]
    fail_with: typing.Optional[Exception] = None
    saves: int

    def new_record(self) -> Record:
        return Record()

    def load_by_id(self, id: typing.Any) -> Record:
        try:
            return Record(self.records[id])
        except KeyError:
            raise RecordNotFoundError(self.name, id)

    def query_collection(self, filters: Filters = {}) -> typing.Iterable[Record]:
        return [
            Record(record)
            for _, record in sorted(self.records.items())
            if matches(record, filters)
        ]

    def save(self, record: Record) -> Record:
        if self.fail_with is not None:
            raise self.fail_with
        if record.get("entity_id") is None:
            record["entity_id"] = max(self.records, default=0) + 1
        self.records[record["entity_id"]] = dict(record)
        self.saves += 1
        return record

    def __init__(self, name: str = "entity", records: typing.Iterable[typing.Mapping[str, typing.Any]] = ()):
        self.name = name
        self.records = {r["entity_id"]: dict(r) for r in records}
        self.saves = 0


class PlainAuthenticator(Authenticator):
    users: typing.Mapping[str, typing.Tuple[str, Record]]
    sessions: typing.Dict[str, Record]

    def authenticate(self, email: str, password: str) -> typing.Optional[typing.Tuple[str, Record]]:
        entry = self.users.get(email)
        if entry is None or entry[0] != password:
            return None
        token = f"token-{len(self.sessions) + 1}"
        self.sessions[token] = entry[1]
        return token, entry[1]

    def end_session(self, token: str) -> bool:
        return self.sessions.pop(token, None) is not None

    def __init__(self, users: typing.Mapping[str, typing.Tuple[str, typing.Mapping[str, typing.Any]]]):
        self.users = {email: (password, Record(user)) for email, (password, user) in users.items()}
        self.sessions = {}


class FrozenClock:
    now: datetime.datetime

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)

    def __call__(self) -> datetime.datetime:
        return self.now

    def __init__(self, now: typing.Optional[datetime.datetime] = None):
        self.now = now or datetime.datetime(2012, 6, 1, 12, 0, tzinfo=datetime.timezone.utc)


def registry_of(*routes: typing.Tuple[str, str, str, str]) -> RouteRegistry:
    registry = RouteRegistry()
    for method, path, resource_type, operation in routes:
        registry.add(Route(method, path, resource_type, operation))
    return registry


STORE_NAMES = ("product", "event", "user", "address", "creditcard", "reward", "order")

TEST_SETTINGS = dict(
    base_uri="https://api.totsy.test",
    web_base_url="https://www.totsy.test/",
    media_base_url="https://media.totsy.test",
    provisional_order_lifetime=900,
)


def make_resources(
    records: typing.Mapping[str, typing.Iterable[typing.Mapping[str, typing.Any]]] = {},
    env: str = "production",
    **kwargs: typing.Any,
):
    """
    Builds every resource handler over :py:class:`PlainBackingStore` instances
    holding ``records``, keyed by resource name.

    :return: the handlers, the registry and the stores.
    """
    from ..bootstrap import build_resources
    from ..config import Settings

    stores = {name: PlainBackingStore(name, records.get(name, ())) for name in STORE_NAMES}
    resources, registry = build_resources(stores, Settings(env=env, **TEST_SETTINGS), **kwargs)
    return resources, registry, stores
