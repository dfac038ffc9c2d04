import json
from pathlib import Path

import pytest

from fedledger.core.exceptions import InvalidArgumentError
from fedledger.ledger import FileLedger


def test_persists_after_each_commit(tmp_path: Path):
    path = tmp_path / "ledger" / "state.json"
    ledger = FileLedger(path)

    with ledger.transaction() as stub:
        stub.put_state("b", "2")
        stub.put_state("a", "1")

    data = json.loads(path.read_text())
    assert data["height"] == 1
    assert [entry["key"] for entry in data["entries"]] == ["a", "b"]
    assert data["entries"][0] == {"key": "a", "value": "1", "version": 1}


def test_reloads_committed_state(tmp_path: Path):
    path = tmp_path / "state.json"
    ledger = FileLedger(path)
    with ledger.transaction() as stub:
        stub.put_state("a", "1")
    with ledger.transaction() as stub:
        stub.put_state("a", "2")

    reloaded = FileLedger(path)

    assert reloaded.height == 2
    assert reloaded.snapshot() == {"a": "2"}
    assert reloaded.get("a").version == 2


def test_evaluate_does_not_touch_file(tmp_path: Path):
    path = tmp_path / "state.json"
    ledger = FileLedger(path)

    with pytest.raises(InvalidArgumentError):
        with ledger.evaluate() as stub:
            stub.put_state("a", "1")

    assert not path.exists()


def test_leaves_no_temporary_files(tmp_path: Path):
    ledger = FileLedger(tmp_path / "state.json")
    with ledger.transaction() as stub:
        stub.put_state("a", "1")

    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]
