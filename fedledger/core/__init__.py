from .exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    ErrorKind,
    GatewayError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
    TrainingFinishedError,
    TrainingNotFinishedError,
    error_for_kind,
)
from .interfaces import (
    EventCallback,
    EventSinkProtocol,
    EventSourceProtocol,
    LedgerProtocol,
    LedgerStub,
)
from .types import (
    ClientUpdate,
    EndRoundModel,
    Event,
    KeyValue,
    ModelMetadata,
    ModelStatus,
    OriginalModel,
    OriginalModelList,
    PersonalInfo,
)

__all__ = [
    # Exceptions
    "ErrorKind",
    "LedgerError",
    "NotFoundError",
    "AlreadyExistsError",
    "AccessDeniedError",
    "TrainingNotFinishedError",
    "TrainingFinishedError",
    "InvalidArgumentError",
    "GatewayError",
    "error_for_kind",
    # Interfaces
    "LedgerStub",
    "LedgerProtocol",
    "EventCallback",
    "EventSinkProtocol",
    "EventSourceProtocol",
    # Types
    "ModelStatus",
    "ModelMetadata",
    "ClientUpdate",
    "OriginalModel",
    "EndRoundModel",
    "OriginalModelList",
    "PersonalInfo",
    "KeyValue",
    "Event",
]
