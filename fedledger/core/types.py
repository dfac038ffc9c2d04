import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ModelStatus(str, Enum):
    """Lifecycle status of a model."""

    INITIATED = "initiated"
    STARTED = "started"
    FINISHED = "finished"


class LedgerRecord(BaseModel):
    """Flat ledger record serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        protected_namespaces=(),
    )

    def serialize(self, **kwargs: Any) -> str:
        return self.model_dump_json(by_alias=True, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ModelMetadata(LedgerRecord):
    """Metadata and round state of a model under training."""

    model_id: str
    name: str
    clients_per_round: int = Field(gt=0)
    status: ModelStatus = ModelStatus.INITIATED
    training_rounds: int = Field(gt=0)
    current_round: int = Field(default=0, ge=0)

    @classmethod
    def deserialize(cls, raw: str) -> "ModelMetadata":
        return cls.model_validate_json(raw)

    @property
    def is_finished(self) -> bool:
        return self.status is ModelStatus.FINISHED

    def with_status(self, status: ModelStatus) -> "ModelMetadata":
        return self.model_copy(update={"status": status})

    def advanced(self) -> "ModelMetadata":
        """Metadata after the current round's aggregate is published."""
        next_round = self.current_round + 1
        status = (
            ModelStatus.FINISHED
            if next_round >= self.training_rounds
            else ModelStatus.STARTED
        )
        return self.model_copy(
            update={"current_round": next_round, "status": status}
        )


class ClientUpdate(LedgerRecord):
    """One trainer's contribution for one round."""

    model_id: str
    round: int = Field(ge=0)
    weights: str | None = None
    dataset_size: int = Field(gt=0)

    @classmethod
    def deserialize(cls, raw: str) -> "ClientUpdate":
        return cls.model_validate_json(raw)

    def redacted(self) -> str:
        """Serialized form without the weights, for broadcasting."""
        return self.serialize(exclude={"weights"})


# Alias kept for callers using the ledger's record name.
OriginalModel = ClientUpdate


class EndRoundModel(LedgerRecord):
    """Aggregated result published for one round."""

    model_id: str
    round: str
    weights: str

    @classmethod
    def deserialize(cls, raw: str) -> "EndRoundModel":
        return cls.model_validate_json(raw)


class OriginalModelList(LedgerRecord):
    """Client updates of one round, in key order."""

    original_model_list: list[ClientUpdate] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.original_model_list)


class PersonalInfo(LedgerRecord):
    """Caller identity view, derived on every request."""

    client_id: str
    role: str
    msp_id: str
    username: str
    selected_for_round: bool | None = None


@dataclass(slots=True, frozen=True)
class KeyValue:
    """A committed ledger entry."""

    key: str
    value: str
    version: int


@dataclass(slots=True, frozen=True)
class Event:
    """Named event emitted by a committed transaction."""

    name: str
    payload: bytes
    tx_id: str

    def json(self) -> Any:
        return json.loads(self.payload.decode("utf-8"))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "txId": self.tx_id, "payload": self.json()}
