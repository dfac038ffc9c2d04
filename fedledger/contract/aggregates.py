from fedledger.core.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    TrainingFinishedError,
    TrainingNotFinishedError,
)
from fedledger.core.types import EndRoundModel, ModelMetadata
from fedledger.events import EventType
from fedledger.identity import Role, require_role
from fedledger.ledger.keys import end_round_model_key

from .context import Context, Contract, Intent, transaction


class EndRoundAggregateStore(Contract):
    """Aggregates published by the lead aggregator, one per round."""

    @transaction(Intent.SUBMIT)
    def add_end_round_model(
        self, ctx: Context, model_id: str, weights: str
    ) -> ModelMetadata:
        """Publish the current round's aggregate and advance the round.

        The aggregate and the advanced metadata are written in the same
        unit of work. The emitted event carries the metadata as it was
        before the advance.

        Returns
        -------
        ModelMetadata
            Metadata after the advance; FINISHED once the new round
            reaches ``training_rounds``.
        """
        require_role(ctx.identity, Role.LEAD_AGGREGATOR)

        if not isinstance(weights, str):
            raise self._error(
                InvalidArgumentError, "weights must be a string"
            )
        previous_raw = self._read_metadata_json(ctx, model_id)
        metadata = ModelMetadata.deserialize(previous_raw)
        if metadata.is_finished:
            raise self._error(
                TrainingFinishedError,
                f"Training of ModelMetadata {model_id} is already finished",
                model_id=model_id,
            )

        round_str = str(metadata.current_round)
        aggregate = EndRoundModel(
            model_id=model_id, round=round_str, weights=weights
        )
        key = end_round_model_key(model_id, round_str).encode()
        ctx.stub.put_state(key, aggregate.serialize())

        advanced = metadata.advanced()
        self._write_metadata(ctx, advanced)

        if advanced.is_finished:
            ctx.stub.set_event(
                EventType.TRAINING_FINISHED.value, previous_raw.encode()
            )
            self._logger.info(f"Training of {model_id} finished")
        else:
            ctx.stub.set_event(
                EventType.ROUND_FINISHED.value, previous_raw.encode()
            )
            self._logger.info(
                f"Round {round_str} of {model_id} finished, "
                f"next round {advanced.current_round}"
            )

        return advanced

    def _read_aggregate(
        self, ctx: Context, model_id: str, round_number: int
    ) -> EndRoundModel:
        key = end_round_model_key(model_id, round_number).encode()
        raw = ctx.stub.get_state(key)
        if not raw:
            raise self._error(
                NotFoundError,
                f"EndRoundModel not found. modelId: {model_id}, "
                f"round: {round_number}",
                model_id=model_id,
                round=round_number,
            )
        return EndRoundModel.deserialize(raw)

    @transaction(Intent.EVALUATE)
    def get_end_round_model(
        self, ctx: Context, model_id: str
    ) -> EndRoundModel:
        """Aggregate of the previous round, the start point of the
        current one."""
        metadata = self._read_metadata(ctx, model_id)
        return self._read_aggregate(
            ctx, model_id, metadata.current_round - 1
        )

    @transaction(Intent.EVALUATE)
    def get_trained_model(self, ctx: Context, model_id: str) -> EndRoundModel:
        metadata = self._read_metadata(ctx, model_id)
        if not metadata.is_finished:
            raise self._error(
                TrainingNotFinishedError,
                f"Training of ModelMetadata {model_id} is not finished yet",
                model_id=model_id,
                status=metadata.status.value,
            )
        # Rounds are numbered from 0, so the last one is training_rounds - 1.
        return self._read_aggregate(
            ctx, model_id, metadata.training_rounds - 1
        )
