from importlib.metadata import PackageNotFoundError, version

from fedledger.communication import (
    HeaderIdentityResolver,
    HTTPGateway,
    LedgerHTTPClient,
)
from fedledger.contract import FedAvgContract
from fedledger.events import EventNotifier, EventType
from fedledger.identity import ClientIdentity, Role
from fedledger.ledger import FileLedger, InMemoryLedger

__all__ = [
    "FedAvgContract",
    "ClientIdentity",
    "Role",
    "InMemoryLedger",
    "FileLedger",
    "EventNotifier",
    "EventType",
    "HTTPGateway",
    "HeaderIdentityResolver",
    "LedgerHTTPClient",
]


try:
    __version__ = version("fedledger")
except PackageNotFoundError:
    __version__ = "unknown"
