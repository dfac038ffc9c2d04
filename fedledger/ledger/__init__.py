from .file import FileLedger
from .keys import (
    CompositeKey,
    Namespace,
    client_selected_for_round_key,
    end_round_model_key,
    model_metadata_key,
    original_model_key,
)
from .memory import InMemoryLedger, LedgerTransaction

__all__ = [
    "CompositeKey",
    "Namespace",
    "model_metadata_key",
    "original_model_key",
    "end_round_model_key",
    "client_selected_for_round_key",
    "InMemoryLedger",
    "LedgerTransaction",
    "FileLedger",
]
