from pydantic import ValidationError

from fedledger.core.exceptions import InvalidArgumentError
from fedledger.core.types import (
    ClientUpdate,
    ModelMetadata,
    OriginalModelList,
)
from fedledger.events import EventType
from fedledger.identity import Role, require_role
from fedledger.ledger.keys import original_model_key
from fedledger.utils import Validators

from .context import Context, Contract, Intent, transaction


class ClientUpdateLedger(Contract):
    """Per-round client updates and quorum detection."""

    @transaction(Intent.SUBMIT)
    def add_original_model(
        self,
        ctx: Context,
        model_id: str,
        weights: str,
        dataset_size: int | str,
    ) -> ModelMetadata:
        """Store the caller's update for the model's current round.

        The slot is keyed by the caller's enrollment id, so a second
        submission in the same round replaces the first. The round is not
        checked for being open.
        """
        require_role(ctx.identity, Role.TRAINER)

        if not isinstance(weights, str):
            raise self._error(
                InvalidArgumentError, "weights must be a string"
            )
        size = Validators.parse_positive_int(dataset_size, "datasetSize")
        metadata = self._read_metadata(ctx, model_id)

        update = ClientUpdate(
            model_id=model_id,
            round=metadata.current_round,
            weights=weights,
            dataset_size=size,
        )
        client_id = ctx.identity.enrollment_id
        key = original_model_key(
            model_id, metadata.current_round, client_id
        ).encode()
        ctx.stub.put_state(key, update.serialize())

        ctx.stub.set_event(
            EventType.ORIGINAL_MODEL_ADDED.value, update.redacted().encode()
        )
        self._logger.info(
            f"ModelUpdate of {client_id} for round "
            f"{metadata.current_round} of {model_id} stored"
        )

        return metadata

    def _count_received(self, ctx: Context, metadata: ModelMetadata) -> int:
        prefix = original_model_key(
            metadata.model_id, metadata.current_round
        ).encode()
        # Presence only; contents are not validated here.
        return sum(
            1 for kv in ctx.stub.get_state_by_prefix(prefix) if kv.value
        )

    @transaction(Intent.EVALUATE)
    def get_number_of_received_original_models(
        self, ctx: Context, model_id: str
    ) -> int:
        metadata = self._read_metadata(ctx, model_id)
        return self._count_received(ctx, metadata)

    @transaction(Intent.EVALUATE)
    def get_number_of_required_original_models(
        self, ctx: Context, model_id: str
    ) -> int:
        return self._read_metadata(ctx, model_id).clients_per_round

    @transaction(Intent.EVALUATE)
    def check_all_original_models_received(
        self, ctx: Context, model_id: str
    ) -> bool:
        """True iff exactly clientsPerRound updates are stored."""
        metadata = self._read_metadata(ctx, model_id)
        received = self._count_received(ctx, metadata)
        required = metadata.clients_per_round

        if received == required:
            self._logger.info(
                f"All {required} updates received for round "
                f"{metadata.current_round} of {model_id}"
            )
            return True
        if received > required:
            self._logger.warning(
                f"Received {received} updates for round "
                f"{metadata.current_round} of {model_id}, "
                f"expected {required}"
            )
        else:
            self._logger.info(
                f"Waiting for updates of {model_id}: "
                f"{received} of {required}"
            )
        return False

    def _list_updates(
        self, ctx: Context, model_id: str, round_number: int
    ) -> OriginalModelList:
        prefix = original_model_key(model_id, round_number).encode()
        updates: list[ClientUpdate] = []
        for kv in ctx.stub.get_state_by_prefix(prefix):
            if not kv.value:
                self._logger.error(f"Empty ModelUpdate at {kv.key!r}")
                continue
            try:
                update = ClientUpdate.deserialize(kv.value)
            except ValidationError as e:
                self._logger.error(
                    f"Invalid ModelUpdate at {kv.key!r}: "
                    f"{e.error_count()} error(s)"
                )
                continue
            updates.append(update)

        self._logger.info(
            f"Read {len(updates)} update(s) for round {round_number} "
            f"of {model_id}"
        )
        return OriginalModelList(original_model_list=updates)

    @transaction(Intent.EVALUATE)
    def get_original_model_list(
        self, ctx: Context, model_id: str, round_number: int | str
    ) -> OriginalModelList:
        require_role(ctx.identity, Role.LEAD_AGGREGATOR)
        parsed = Validators.parse_non_negative_int(round_number, "round")
        return self._list_updates(ctx, model_id, parsed)

    @transaction(Intent.EVALUATE)
    def get_original_model_list_for_current_round(
        self, ctx: Context, model_id: str
    ) -> OriginalModelList:
        require_role(ctx.identity, Role.LEAD_AGGREGATOR)
        metadata = self._read_metadata(ctx, model_id)
        return self._list_updates(ctx, model_id, metadata.current_round)
