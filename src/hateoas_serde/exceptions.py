import abc
import typing

from .utils import english_enumerate


class HateoasSerdeException(Exception, metaclass=abc.ABCMeta):
    status: int = 500
    """
    The HTTP status code the resource handlers report for the error.
    """

    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class InvalidDeclarationError(HateoasSerdeException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        self._message = message


class TemplateResolutionError(HateoasSerdeException):
    status = 400
    template: str
    name: str
    detail: typing.Optional[str]

    @property
    def message(self) -> str:
        return f'cannot resolve field ({self.name}) in "{self.template}"{": " + self.detail if self.detail is not None else ""}'

    def __init__(self, template: str, name: str, detail: typing.Optional[str] = None):
        self.template = template
        self.name = name
        self.detail = detail


class UnknownResourceReferenceError(HateoasSerdeException):
    resource_type: str
    operation: str

    @property
    def message(self) -> str:
        return f'no operation "{self.operation}" registered for resource "{self.resource_type}"'

    def __init__(self, resource_type: str, operation: str):
        self.resource_type = resource_type
        self.operation = operation


class MalformedRequestError(HateoasSerdeException):
    status = 400
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str = "Malformed entity representation in request body"):
        self._message = message


class ValidationError(HateoasSerdeException):
    status = 400
    errors: typing.Sequence[str]

    @property
    def message(self) -> str:
        return f"Entity Validation Error: {self.errors[0]}"

    def __init__(self, errors: typing.Sequence[str]):
        assert len(errors) > 0
        self.errors = errors


class PersistenceError(HateoasSerdeException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str, status: int = 400):
        self._message = message
        self.status = status


class RecordNotFoundError(HateoasSerdeException):
    status = 404
    resource: str
    id: typing.Any

    @property
    def message(self) -> str:
        return f"no {self.resource} found for {self.id}"

    def __init__(self, resource: str, id: typing.Any):
        self.resource = resource
        self.id = id


class AuthenticationError(HateoasSerdeException):
    status = 401
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str = "Invalid credentials"):
        self._message = message


class StoreError(HateoasSerdeException):
    """
    Raised by :py:class:`BackingStore` implementations when a record cannot be persisted.
    A ``sensitive`` error carries a message that must never reach the client.
    """

    _message: str
    sensitive: bool

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str, sensitive: bool = False):
        self._message = message
        self.sensitive = sensitive


class DuplicateNameError(InvalidDeclarationError):
    names: typing.Sequence[str]

    def __init__(self, names: typing.Sequence[str]):
        super().__init__(f"duplicate output names: {english_enumerate(names)}")
        self.names = names


class ConflictError(HateoasSerdeException):
    status = 409
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        self._message = message
