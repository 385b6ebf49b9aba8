import typing
from collections import OrderedDict

from .models import EmbeddedFieldDescriptor, FieldDescriptor, FieldSpec
from .serde.models import AttributeValue


class FieldProjector:
    """
    Projects a backing record through a :py:class:`FieldSpec`.

    Projection is a pure function of the record and the spec: an attribute the
    record lacks comes out as :py:const:`None`, and an embedded entry re-projects
    the same record through its nested spec.
    """

    def project(
        self, record: typing.Mapping[str, typing.Any], spec: FieldSpec
    ) -> "OrderedDict[str, AttributeValue]":
        retval: "OrderedDict[str, AttributeValue]" = OrderedDict()
        for entry in spec:
            if isinstance(entry, EmbeddedFieldDescriptor):
                retval[entry.name] = self.project(record, entry.spec)
            else:
                assert isinstance(entry, FieldDescriptor)
                retval[entry.name] = record.get(entry.source)
        return retval

    __call__ = project
