import collections.abc
import json
import logging
import typing

from .exceptions import (
    MalformedRequestError,
    PersistenceError,
    StoreError,
    ValidationError,
)
from .interfaces import BackingStore, Validatable
from .models import LINKS_KEY, EmbeddedFieldDescriptor, FieldDescriptor, FieldSpec, Record

logger = logging.getLogger(__name__)

Payload = typing.Union[str, bytes, typing.Mapping[str, typing.Any], None]


class WritePathPopulator:
    """
    Applies inbound representations onto backing records and persists them.

    The same :py:class:`FieldSpec` that drives projection is used in reverse:
    output names are mapped back to the attribute names the store knows.
    """

    store: BackingStore
    id_attribute: str

    def parse(self, payload: Payload) -> typing.Mapping[str, typing.Any]:
        if isinstance(payload, (str, bytes, bytearray)):
            try:
                payload = json.loads(payload)
            except ValueError:
                raise MalformedRequestError()
        if not isinstance(payload, collections.abc.Mapping):
            raise MalformedRequestError()
        return payload

    def _rewrite_into(
        self,
        target: typing.MutableMapping[str, typing.Any],
        inbound: typing.Mapping[str, typing.Any],
        fields: FieldSpec,
    ) -> None:
        for entry in fields:
            if entry.name not in inbound:
                continue
            value = inbound[entry.name]
            if isinstance(entry, EmbeddedFieldDescriptor):
                if not isinstance(value, collections.abc.Mapping):
                    raise MalformedRequestError(f'"{entry.name}" must be an embedded object')
                self._rewrite_into(target, value, entry.spec)
            else:
                assert isinstance(entry, FieldDescriptor)
                target[entry.source] = value

    def rewrite(
        self, inbound: typing.Mapping[str, typing.Any], fields: FieldSpec
    ) -> typing.Dict[str, typing.Any]:
        """
        Returns a copy of ``inbound`` keyed by backing attribute names. Keys the
        spec does not declare pass through unchanged.
        """
        declared = set(fields.names)
        retval = {
            k: v for k, v in inbound.items() if k not in declared and k != LINKS_KEY
        }
        self._rewrite_into(retval, inbound, fields)
        return retval

    def populate(
        self,
        target: Record,
        inbound: Payload,
        fields: FieldSpec,
        on_merge: typing.Optional[typing.Callable[[Record], None]] = None,
    ) -> Record:
        """
        Merges ``inbound`` onto ``target``, validates and persists the result.

        :param Record target: the record to update; attributes absent from ``inbound`` are kept.
        :param Payload inbound: the inbound representation, raw or already parsed.
        :param FieldSpec fields: the field spec of the resource.
        :param on_merge: called with the merged record before validation.
        :return: the record as saved by the store.
        :raises MalformedRequestError: when ``inbound`` is not a JSON object.
        :raises ValidationError: with the first message reported by ``target.validate()``.
        :raises PersistenceError: when the store fails to save the record.
        """
        data = self.rewrite(self.parse(inbound), fields)

        target.update(data)
        if on_merge is not None:
            on_merge(target)

        if isinstance(target, Validatable):
            errors = target.validate()
            if errors:
                logger.warning(
                    "entity validation failed: %s",
                    errors[0],
                    extra={"key": target.get(self.id_attribute)},
                )
                raise ValidationError(errors)

        try:
            return self.store.save(target)
        except StoreError as e:
            logger.error(e.message, extra={"key": target.get(self.id_attribute)})
            if e.sensitive:
                raise PersistenceError("Unable to save the entity", 500) from e
            raise PersistenceError(e.message, 400) from e
        except Exception as e:
            logger.exception("unexpected failure while saving an entity")
            raise PersistenceError("Unable to save the entity", 500) from e

    def __init__(self, store: BackingStore, id_attribute: str = "entity_id"):
        self.store = store
        self.id_attribute = id_attribute
