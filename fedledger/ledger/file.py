import json
import os
import tempfile
from pathlib import Path
from typing import Any

from fedledger.core.types import KeyValue
from fedledger.events import EventNotifier
from fedledger.ledger.memory import InMemoryLedger


class FileLedger(InMemoryLedger):
    """Ledger whose committed state is kept in a JSON file."""

    def __init__(
        self, path: Path, notifier: EventNotifier | None = None
    ) -> None:
        super().__init__(notifier=notifier)
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if self._path.exists():
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        with open(self._path) as f:
            data = json.load(f)

        for item in data.get("entries", []):
            self._apply(
                KeyValue(
                    key=item["key"],
                    value=item["value"],
                    version=item["version"],
                )
            )
        self._height = data.get("height", 0)
        self._logger.info(
            f"Loaded {len(self)} key(s) at height {self._height} "
            f"from {self._path}"
        )

    def _to_dict(self) -> dict[str, Any]:
        return {
            "height": self._height,
            "entries": [
                {
                    "key": entry.key,
                    "value": entry.value,
                    "version": entry.version,
                }
                for entry in (self._entries[key] for key in self._keys)
            ],
        }

    def _flush(self) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(self._to_dict(), f)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
