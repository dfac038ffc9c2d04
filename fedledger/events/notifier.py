import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from fedledger.config.logging import get_logger
from fedledger.core.interfaces import EventCallback
from fedledger.core.types import Event


class EventType(str, Enum):
    """Domain events emitted on state transitions."""

    CREATE_MODEL_METADATA = "CREATE_MODEL_METADATA_EVENT"
    START_TRAINING = "START_TRAINING_EVENT"
    ORIGINAL_MODEL_ADDED = "ORIGINAL_MODEL_ADDED_EVENT"
    ROUND_FINISHED = "ROUND_FINISHED_EVENT"
    TRAINING_FINISHED = "TRAINING_FINISHED_EVENT"


@dataclass(slots=True, frozen=True)
class _Subscription:
    callback: EventCallback
    names: frozenset[str] | None

    def matches(self, event: Event) -> bool:
        return self.names is None or event.name in self.names


class EventNotifier:
    """Fan-out of committed events to in-process subscribers."""

    def __init__(self) -> None:
        self._subscriptions: dict[int, _Subscription] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()
        self._logger = get_logger("fedledger.events")

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        callback: EventCallback,
        names: Iterable[str | EventType] | None = None,
    ) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        selected = (
            None
            if names is None
            else frozenset(
                n.value if isinstance(n, EventType) else n for n in names
            )
        )
        with self._lock:
            sub_id = next(self._ids)
            self._subscriptions[sub_id] = _Subscription(callback, selected)

        def unsubscribe() -> None:
            with self._lock:
                self._subscriptions.pop(sub_id, None)

        return unsubscribe

    def publish(self, event: Event) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions.values())

        self._logger.debug(
            f"Publishing {event.name} from tx {event.tx_id} "
            f"to {len(subscriptions)} subscriber(s)"
        )
        for subscription in subscriptions:
            if not subscription.matches(event):
                continue
            try:
                subscription.callback(event)
            except Exception:
                # The transaction is already committed at this point.
                self._logger.exception(
                    f"Subscriber failed while handling {event.name}"
                )
