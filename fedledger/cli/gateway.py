import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Sequence

from fedledger.communication.http.server import HTTPGateway
from fedledger.config.logging import configure_logging, get_logger
from fedledger.config.settings import Settings, load_yaml_settings
from fedledger.contract import FedAvgContract
from fedledger.core.interfaces import LedgerProtocol
from fedledger.ledger import FileLedger, InMemoryLedger

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve the federated averaging contract over HTTP"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML settings file"
    )
    parser.add_argument("--host", type=str, default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument(
        "--ledger-path",
        type=Path,
        default=None,
        help="Persist the ledger to this JSON file",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default=None, choices=LOG_LEVELS
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Merge the YAML file and command line flags over the environment.

    Command line flags win over the file, which wins over ``FEDLEDGER_*``
    environment variables.
    """
    overrides: dict[str, Any] = (
        load_yaml_settings(args.config) if args.config else {}
    )
    for field in ("host", "port", "ledger_path", "log_level"):
        value = getattr(args, field)
        if value is not None:
            overrides[field] = value
    return Settings(**overrides)


def build_ledger(settings: Settings) -> LedgerProtocol:
    if settings.ledger_path is not None:
        return FileLedger(settings.ledger_path)
    return InMemoryLedger()


async def serve(
    settings: Settings, stop_event: asyncio.Event | None = None
) -> None:
    """Run the gateway until ``stop_event`` is set or the task is cancelled."""
    contract = FedAvgContract(build_ledger(settings))
    gateway = HTTPGateway(
        settings.host,
        settings.port,
        contract,
        max_request_size=settings.max_request_size,
    )
    stop_event = stop_event or asyncio.Event()

    await gateway.start()
    try:
        await stop_event.wait()
    finally:
        await gateway.stop()


def main(argv: Sequence[str] | None = None) -> int:
    settings = build_settings(parse_args(argv))
    configure_logging(settings)
    logger = get_logger("fedledger.cli")

    storage = settings.ledger_path or "memory"
    logger.info(
        f"Starting gateway on {settings.host}:{settings.port} "
        f"(ledger: {storage})"
    )
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Gateway interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
