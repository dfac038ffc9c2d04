import bisect
import threading
from contextlib import contextmanager
from typing import Iterator, Mapping
from uuid import uuid4

from fedledger.config.logging import get_logger
from fedledger.core.exceptions import InvalidArgumentError
from fedledger.core.types import Event, KeyValue
from fedledger.events import EventNotifier


class LedgerTransaction:
    """Buffered view of the ledger for one unit of work.

    Reads see the committed state overlaid with this unit's own writes.
    Nothing is visible to other units until the ledger commits the buffer.
    """

    def __init__(
        self, ledger: "InMemoryLedger", tx_id: str, read_only: bool = False
    ) -> None:
        self._ledger = ledger
        self._tx_id = tx_id
        self._read_only = read_only
        self._writes: dict[str, str] = {}
        self._event: tuple[str, bytes] | None = None

    @property
    def tx_id(self) -> str:
        return self._tx_id

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def writes(self) -> dict[str, str]:
        return dict(self._writes)

    @property
    def event(self) -> Event | None:
        if self._event is None:
            return None
        name, payload = self._event
        return Event(name=name, payload=payload, tx_id=self._tx_id)

    def get_state(self, key: str) -> str | None:
        if key in self._writes:
            return self._writes[key]
        entry = self._ledger._entry(key)
        return entry.value if entry else None

    def _check_writable(self) -> None:
        if self._read_only:
            raise InvalidArgumentError(
                f"Transaction {self._tx_id} is read-only",
                {"tx_id": self._tx_id},
            )

    def put_state(self, key: str, value: str) -> None:
        self._check_writable()
        self._writes[key] = value

    def get_state_by_prefix(self, prefix: str) -> Iterator[KeyValue]:
        """Entries whose key starts with prefix, in key order."""
        pending_version = self._ledger.height + 1
        committed = {kv.key: kv for kv in self._ledger._scan(prefix)}
        for key, value in self._writes.items():
            if key.startswith(prefix):
                committed[key] = KeyValue(key, value, pending_version)
        for key in sorted(committed):
            yield committed[key]

    def set_event(self, name: str, payload: bytes) -> None:
        self._check_writable()
        # One event per unit; the last call wins.
        self._event = (name, payload)


class InMemoryLedger:
    """Single-process ledger with atomic, serialized units of work."""

    def __init__(
        self,
        notifier: EventNotifier | None = None,
        initial: Mapping[str, str] | None = None,
    ) -> None:
        self._notifier = (
            notifier if notifier is not None else EventNotifier()
        )
        self._entries: dict[str, KeyValue] = {}
        self._keys: list[str] = []
        self._height = 0
        self._lock = threading.RLock()
        self._logger = get_logger("fedledger.ledger")

        for key, value in (initial or {}).items():
            self._apply(KeyValue(key, value, 0))

    @property
    def notifier(self) -> EventNotifier:
        return self._notifier

    @property
    def height(self) -> int:
        return self._height

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> KeyValue | None:
        """Committed entry for key."""
        return self._entry(key)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return {key: self._entries[key].value for key in self._keys}

    def _entry(self, key: str) -> KeyValue | None:
        return self._entries.get(key)

    def _scan(self, prefix: str) -> Iterator[KeyValue]:
        with self._lock:
            start = bisect.bisect_left(self._keys, prefix)
            matched = []
            for key in self._keys[start:]:
                if not key.startswith(prefix):
                    break
                matched.append(self._entries[key])
        return iter(matched)

    def _apply(self, entry: KeyValue) -> None:
        if entry.key not in self._entries:
            bisect.insort(self._keys, entry.key)
        self._entries[entry.key] = entry

    def _restore(self, key: str, previous: KeyValue | None) -> None:
        if previous is not None:
            self._entries[key] = previous
            return
        self._entries.pop(key, None)
        index = bisect.bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            del self._keys[index]

    def _flush(self) -> None:
        """Persist committed state; no-op for the in-memory ledger."""

    def _commit(self, tx: LedgerTransaction) -> None:
        writes = tx.writes
        if not writes:
            return

        height = self._height + 1
        previous = {key: self._entries.get(key) for key in writes}
        for key, value in writes.items():
            self._apply(KeyValue(key, value, height))
        self._height = height

        try:
            self._flush()
        except Exception:
            for key, entry in previous.items():
                self._restore(key, entry)
            self._height = height - 1
            self._logger.error(
                f"Failed to persist tx {tx.tx_id}; rolled back"
            )
            raise

        self._logger.debug(
            f"Committed tx {tx.tx_id} at height {height} "
            f"({len(writes)} write(s))"
        )

    @contextmanager
    def transaction(
        self, tx_id: str | None = None
    ) -> Iterator[LedgerTransaction]:
        """Run one unit of work; commit on success, discard on error."""
        with self._lock:
            tx = LedgerTransaction(self, tx_id or uuid4().hex)
            try:
                yield tx
            except Exception:
                self._logger.debug(f"Discarded tx {tx.tx_id}")
                raise
            self._commit(tx)

        # Published outside the lock so subscribers may query the ledger.
        event = tx.event
        if event is not None:
            self._notifier.publish(event)

    @contextmanager
    def evaluate(
        self, tx_id: str | None = None
    ) -> Iterator[LedgerTransaction]:
        """Read-only unit; writes and events are rejected."""
        with self._lock:
            yield LedgerTransaction(
                self, tx_id or uuid4().hex, read_only=True
            )
