from typing import Callable, ContextManager, Iterable, Iterator, Protocol

from .types import Event, KeyValue


class LedgerStub(Protocol):
    """Per-transaction view of the ledger handed to contract operations."""

    @property
    def tx_id(self) -> str: ...
    def get_state(self, key: str) -> str | None: ...
    def put_state(self, key: str, value: str) -> None: ...
    def get_state_by_prefix(self, prefix: str) -> Iterator[KeyValue]: ...
    def set_event(self, name: str, payload: bytes) -> None: ...


class LedgerProtocol(Protocol):
    """Protocol for the key-value substrate the contract runs on."""

    @property
    def height(self) -> int: ...
    @property
    def notifier(self) -> "EventSourceProtocol": ...
    def transaction(
        self, tx_id: str | None = None
    ) -> ContextManager[LedgerStub]: ...
    def evaluate(
        self, tx_id: str | None = None
    ) -> ContextManager[LedgerStub]: ...
    def __len__(self) -> int: ...


EventCallback = Callable[[Event], None]


class EventSinkProtocol(Protocol):
    """Protocol for delivering committed events."""

    def publish(self, event: Event) -> None: ...


class EventSourceProtocol(EventSinkProtocol, Protocol):
    """Protocol for subscribing to committed events."""

    def subscribe(
        self,
        callback: EventCallback,
        names: Iterable[str] | None = None,
    ) -> Callable[[], None]: ...
