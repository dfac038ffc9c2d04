import pytest

from fedledger.contract import FedAvgContract
from fedledger.core.exceptions import (
    AccessDeniedError,
    InvalidArgumentError,
    NotFoundError,
)
from fedledger.core.types import ClientUpdate, Event, ModelStatus
from fedledger.identity import ClientIdentity, Role
from fedledger.ledger import InMemoryLedger, original_model_key


def _put(ledger: InMemoryLedger, key: str, value: str) -> None:
    with ledger.transaction() as stub:
        stub.put_state(key, value)


class TestAddOriginalModel:
    def test_stores_update_under_caller_slot(
        self,
        contract: FedAvgContract,
        ledger: InMemoryLedger,
        trainer_a: ClientIdentity,
        started_model: str,
    ):
        metadata = contract.add_original_model(
            trainer_a, started_model, "weights-a", "600"
        )

        assert metadata.current_round == 0
        raw = ledger.get(original_model_key(started_model, 0, "A").encode())
        assert ClientUpdate.deserialize(raw.value) == ClientUpdate(
            model_id=started_model,
            round=0,
            weights="weights-a",
            dataset_size=600,
        )

    def test_event_payload_omits_weights(
        self,
        contract: FedAvgContract,
        trainer_a: ClientIdentity,
        started_model: str,
        events: list[Event],
    ):
        contract.add_original_model(trainer_a, started_model, "secret", 10)

        assert events[-1].name == "ORIGINAL_MODEL_ADDED_EVENT"
        assert events[-1].json() == {
            "modelId": started_model,
            "round": 0,
            "datasetSize": 10,
        }

    def test_resubmission_overwrites(
        self,
        contract: FedAvgContract,
        admin: ClientIdentity,
        aggregator: ClientIdentity,
        trainer_a: ClientIdentity,
        started_model: str,
    ):
        contract.add_original_model(trainer_a, started_model, "first", 10)
        contract.add_original_model(trainer_a, started_model, "second", 20)

        updates = contract.get_original_model_list_for_current_round(
            aggregator, started_model
        )
        assert [u.weights for u in updates.original_model_list] == [
            "second"
        ]
        assert (
            contract.get_number_of_received_original_models(
                admin, started_model
            )
            == 1
        )

    def test_round_status_is_not_checked(
        self,
        contract: FedAvgContract,
        admin: ClientIdentity,
        trainer_a: ClientIdentity,
    ):
        created = contract.create_model_metadata(admin, "m1", "mnist", 2, 1)
        assert created.status is ModelStatus.INITIATED

        metadata = contract.add_original_model(trainer_a, "m1", "w", 1)

        assert metadata.status is ModelStatus.INITIATED
        assert contract.get_number_of_received_original_models(
            admin, "m1"
        ) == 1

    def test_requires_trainer(
        self,
        contract: FedAvgContract,
        ledger: InMemoryLedger,
        aggregator: ClientIdentity,
        started_model: str,
    ):
        height = ledger.height
        with pytest.raises(AccessDeniedError):
            contract.add_original_model(aggregator, started_model, "w", 1)
        assert ledger.height == height

    @pytest.mark.parametrize("dataset_size", [0, -1, "many", "1.5"])
    def test_rejects_bad_dataset_size(
        self,
        contract: FedAvgContract,
        trainer_a: ClientIdentity,
        started_model: str,
        dataset_size: object,
    ):
        with pytest.raises(InvalidArgumentError):
            contract.add_original_model(
                trainer_a, started_model, "w", dataset_size
            )

    def test_missing_model(
        self, contract: FedAvgContract, trainer_a: ClientIdentity
    ):
        with pytest.raises(NotFoundError):
            contract.add_original_model(trainer_a, "missing", "w", 1)


class TestQuorum:
    def test_required_is_clients_per_round(
        self,
        contract: FedAvgContract,
        outsider: ClientIdentity,
        started_model: str,
    ):
        assert (
            contract.get_number_of_required_original_models(
                outsider, started_model
            )
            == 2
        )

    def test_short_exact_and_overshoot(
        self,
        contract: FedAvgContract,
        admin: ClientIdentity,
        trainer_a: ClientIdentity,
        trainer_b: ClientIdentity,
        started_model: str,
    ):
        trainer_c = ClientIdentity.with_roles(
            "x509::CN=trainerC", Role.TRAINER, enrollment_id="C"
        )

        contract.add_original_model(trainer_a, started_model, "a", 1)
        assert not contract.check_all_original_models_received(
            admin, started_model
        )

        contract.add_original_model(trainer_b, started_model, "b", 1)
        assert contract.check_all_original_models_received(
            admin, started_model
        )

        contract.add_original_model(trainer_c, started_model, "c", 1)
        assert not contract.check_all_original_models_received(
            admin, started_model
        )
        assert (
            contract.get_number_of_received_original_models(
                admin, started_model
            )
            == 3
        )

    def test_counts_only_current_round(
        self,
        contract: FedAvgContract,
        admin: ClientIdentity,
        aggregator: ClientIdentity,
        trainer_a: ClientIdentity,
        trainer_b: ClientIdentity,
        started_model: str,
    ):
        contract.add_original_model(trainer_a, started_model, "a", 1)
        contract.add_original_model(trainer_b, started_model, "b", 1)
        contract.add_end_round_model(aggregator, started_model, "agg-0")

        assert (
            contract.get_number_of_received_original_models(
                admin, started_model
            )
            == 0
        )

    def test_malformed_values_count_but_are_not_listed(
        self,
        contract: FedAvgContract,
        ledger: InMemoryLedger,
        admin: ClientIdentity,
        aggregator: ClientIdentity,
        trainer_a: ClientIdentity,
        started_model: str,
    ):
        contract.add_original_model(trainer_a, started_model, "a", 1)
        _put(ledger, original_model_key(started_model, 0, "B").encode(), "{")
        _put(ledger, original_model_key(started_model, 0, "C").encode(), "")

        received = contract.get_number_of_received_original_models(
            admin, started_model
        )
        listed = contract.get_original_model_list(
            aggregator, started_model, 0
        )

        assert received == 2
        assert len(listed) == 1


class TestOriginalModelList:
    def test_ordered_by_client_id(
        self,
        contract: FedAvgContract,
        aggregator: ClientIdentity,
        trainer_a: ClientIdentity,
        trainer_b: ClientIdentity,
        started_model: str,
    ):
        contract.add_original_model(trainer_b, started_model, "b", 2)
        contract.add_original_model(trainer_a, started_model, "a", 1)

        listed = contract.get_original_model_list(
            aggregator, started_model, "0"
        )

        assert [u.weights for u in listed.original_model_list] == ["a", "b"]
        assert listed == contract.get_original_model_list_for_current_round(
            aggregator, started_model
        )

    def test_unknown_round_is_empty(
        self, contract: FedAvgContract, aggregator: ClientIdentity
    ):
        listed = contract.get_original_model_list(aggregator, "missing", 7)
        assert listed.original_model_list == []

    @pytest.mark.parametrize("round_number", [-1, "x"])
    def test_rejects_bad_round(
        self,
        contract: FedAvgContract,
        aggregator: ClientIdentity,
        started_model: str,
        round_number: object,
    ):
        with pytest.raises(InvalidArgumentError):
            contract.get_original_model_list(
                aggregator, started_model, round_number
            )

    def test_requires_lead_aggregator(
        self,
        contract: FedAvgContract,
        trainer_a: ClientIdentity,
        started_model: str,
    ):
        with pytest.raises(AccessDeniedError):
            contract.get_original_model_list(trainer_a, started_model, 0)
        with pytest.raises(AccessDeniedError):
            contract.get_original_model_list_for_current_round(
                trainer_a, started_model
            )
