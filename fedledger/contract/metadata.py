from fedledger.core.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    TrainingFinishedError,
)
from fedledger.core.types import ModelMetadata, ModelStatus
from fedledger.events import EventType
from fedledger.identity import Role, require_role
from fedledger.utils import Validators

from .context import Context, Contract, Intent, transaction


class ModelMetadataLifecycle(Contract):
    """Creation and start of models.

    Round advancement and completion happen in
    :class:`~fedledger.contract.aggregates.EndRoundAggregateStore`, in the
    same unit of work that publishes the round's aggregate.
    """

    @transaction(Intent.SUBMIT)
    def create_model_metadata(
        self,
        ctx: Context,
        model_id: str,
        name: str,
        clients_per_round: int | str,
        training_rounds: int | str,
    ) -> ModelMetadata:
        """Register a new model in the INITIATED state."""
        require_role(ctx.identity, Role.FL_ADMIN)

        if not isinstance(model_id, str) or not model_id:
            raise self._error(
                InvalidArgumentError, "modelId must be a non-empty string"
            )
        if not isinstance(name, str):
            raise self._error(InvalidArgumentError, "name must be a string")
        clients = Validators.parse_positive_int(
            clients_per_round, "clientsPerRound"
        )
        rounds = Validators.parse_positive_int(
            training_rounds, "trainingRounds"
        )

        if self._model_exists(ctx, model_id):
            raise self._error(
                AlreadyExistsError,
                f"ModelMetadata {model_id} already exists",
                model_id=model_id,
            )

        metadata = ModelMetadata(
            model_id=model_id,
            name=name,
            clients_per_round=clients,
            status=ModelStatus.INITIATED,
            training_rounds=rounds,
            current_round=0,
        )
        raw = self._write_metadata(ctx, metadata)
        ctx.stub.set_event(
            EventType.CREATE_MODEL_METADATA.value, raw.encode()
        )

        return metadata

    @transaction(Intent.SUBMIT)
    def start_training(self, ctx: Context, model_id: str) -> ModelMetadata:
        """Move a model to STARTED.

        Re-running on a started model rewrites the same status.
        """
        require_role(ctx.identity, Role.FL_ADMIN)

        metadata = self._read_metadata(ctx, model_id)
        if metadata.is_finished:
            raise self._error(
                TrainingFinishedError,
                f"Training of ModelMetadata {model_id} is already finished",
                model_id=model_id,
            )

        started = metadata.with_status(ModelStatus.STARTED)
        raw = self._write_metadata(ctx, started)
        ctx.stub.set_event(EventType.START_TRAINING.value, raw.encode())

        return started

    @transaction(Intent.EVALUATE)
    def get_model_metadata(
        self, ctx: Context, model_id: str
    ) -> ModelMetadata:
        return self._read_metadata(ctx, model_id)
