from .aggregates import EndRoundAggregateStore
from .context import Context, Contract, Intent, transaction
from .fedavg import OPERATIONS, FedAvgContract, Operation, to_jsonable
from .general import IdentityQueries
from .metadata import ModelMetadataLifecycle
from .updates import ClientUpdateLedger

__all__ = [
    "Context",
    "Contract",
    "Intent",
    "transaction",
    "ModelMetadataLifecycle",
    "ClientUpdateLedger",
    "EndRoundAggregateStore",
    "IdentityQueries",
    "FedAvgContract",
    "Operation",
    "OPERATIONS",
    "to_jsonable",
]
