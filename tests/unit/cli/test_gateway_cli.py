import asyncio
from pathlib import Path

import pytest

from fedledger.cli.gateway import (
    build_ledger,
    build_settings,
    parse_args,
    serve,
)
from fedledger.ledger import FileLedger, InMemoryLedger


def test_flags_override_yaml(tmp_path: Path):
    config = tmp_path / "gateway.yaml"
    config.write_text("host: 0.0.0.0\nport: 7051\nlog_level: debug\n")

    settings = build_settings(
        parse_args(["--config", str(config), "--port", "9100"])
    )

    assert settings.host == "0.0.0.0"
    assert settings.port == 9100
    assert settings.log_level == "DEBUG"


def test_ledger_selection(tmp_path: Path):
    in_memory = build_settings(parse_args([]))
    on_disk = build_settings(
        parse_args(["--ledger-path", str(tmp_path / "state.json")])
    )

    assert type(build_ledger(in_memory)) is InMemoryLedger
    assert isinstance(build_ledger(on_disk), FileLedger)


def test_rejects_unknown_log_level():
    with pytest.raises(SystemExit):
        parse_args(["--log-level", "verbose"])


@pytest.mark.asyncio
async def test_serve_until_stopped(unused_tcp_port: int):
    settings = build_settings(
        parse_args(["--host", "127.0.0.1", "--port", str(unused_tcp_port)])
    )
    stop = asyncio.Event()

    task = asyncio.create_task(serve(settings, stop))
    await asyncio.sleep(0.1)
    reader, writer = await asyncio.open_connection(
        "127.0.0.1", unused_tcp_port
    )
    writer.close()
    await writer.wait_closed()

    stop.set()
    await asyncio.wait_for(task, timeout=5)
