from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from fedledger.core.exceptions import InvalidArgumentError, NotFoundError
from fedledger.core.interfaces import LedgerProtocol
from fedledger.core.types import LedgerRecord
from fedledger.identity import ClientIdentity
from fedledger.ledger import InMemoryLedger

from .aggregates import EndRoundAggregateStore
from .context import Intent
from .general import IdentityQueries
from .metadata import ModelMetadataLifecycle
from .updates import ClientUpdateLedger


@dataclass(slots=True, frozen=True)
class Operation:
    """Externally invocable operation.

    Parameters
    ----------
    name : str
        Operation name as seen by callers.
    method : str
        Contract method implementing it.
    params : tuple[str, ...]
        Argument names as seen by callers, in positional order.
    """

    name: str
    method: str
    params: tuple[str, ...] = ()

    def bind(
        self, args: Sequence[Any] | Mapping[str, Any] | None
    ) -> list[Any]:
        """Order caller arguments positionally."""
        if args is None:
            args = ()
        if isinstance(args, Mapping):
            unknown = set(args) - set(self.params)
            if unknown:
                raise InvalidArgumentError(
                    f"{self.name} got unexpected argument(s): "
                    f"{', '.join(sorted(unknown))}"
                )
            missing = [p for p in self.params if p not in args]
            if missing:
                raise InvalidArgumentError(
                    f"{self.name} is missing argument(s): "
                    f"{', '.join(missing)}"
                )
            return [args[p] for p in self.params]

        if not isinstance(args, (list, tuple)):
            raise InvalidArgumentError(
                f"{self.name} arguments must be a list or an object, "
                f"got {type(args).__name__}"
            )
        if len(args) != len(self.params):
            raise InvalidArgumentError(
                f"{self.name} takes {len(self.params)} argument(s) "
                f"({', '.join(self.params)})"
            )
        return list(args)


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation(
            "createModelMetadata",
            "create_model_metadata",
            ("modelId", "name", "clientsPerRound", "trainingRounds"),
        ),
        Operation("startTraining", "start_training", ("modelId",)),
        Operation("getModelMetadata", "get_model_metadata", ("modelId",)),
        Operation(
            "addOriginalModel",
            "add_original_model",
            ("modelId", "weights", "datasetSize"),
        ),
        Operation(
            "getNumberOfReceivedOriginalModels",
            "get_number_of_received_original_models",
            ("modelId",),
        ),
        Operation(
            "getNumberOfRequiredOriginalModels",
            "get_number_of_required_original_models",
            ("modelId",),
        ),
        Operation(
            "checkAllOriginalModelsReceived",
            "check_all_original_models_received",
            ("modelId",),
        ),
        Operation(
            "addEndRoundModel", "add_end_round_model", ("modelId", "weights")
        ),
        Operation("getEndRoundModel", "get_end_round_model", ("modelId",)),
        Operation("getTrainedModel", "get_trained_model", ("modelId",)),
        Operation(
            "getOriginalModelList",
            "get_original_model_list",
            ("modelId", "round"),
        ),
        Operation(
            "getOriginalModelListForCurrentRound",
            "get_original_model_list_for_current_round",
            ("modelId",),
        ),
        Operation("getPersonalInfo", "get_personal_info"),
        Operation("getRole", "get_role"),
        Operation("checkHasFlAdminAttribute", "check_has_fl_admin_attribute"),
        Operation("checkHasTrainerAttribute", "check_has_trainer_attribute"),
        Operation(
            "checkHasLeadAggregatorAttribute",
            "check_has_lead_aggregator_attribute",
        ),
    )
}


def to_jsonable(result: Any) -> Any:
    if isinstance(result, LedgerRecord):
        return result.to_dict()
    return result


class FedAvgContract(
    ModelMetadataLifecycle,
    ClientUpdateLedger,
    EndRoundAggregateStore,
    IdentityQueries,
):
    """Federated averaging coordination contract.

    Every operation takes the caller's :class:`ClientIdentity` as its first
    argument and runs as one unit of work on the ledger.

    Examples
    --------
    >>> contract = FedAvgContract()
    >>> admin = ClientIdentity.with_roles("admin", Role.FL_ADMIN)
    >>> metadata = contract.create_model_metadata(admin, "m1", "mnist", 2, 1)
    """

    def __init__(self, ledger: LedgerProtocol | None = None) -> None:
        super().__init__(ledger if ledger is not None else InMemoryLedger())

    @staticmethod
    def operation(name: str) -> Operation:
        try:
            return OPERATIONS[name]
        except KeyError:
            raise NotFoundError(
                f"Unknown operation {name}", {"operation": name}
            ) from None

    def intent_of(self, name: str) -> Intent:
        method = getattr(self, self.operation(name).method)
        return getattr(method, "intent")

    def invoke(
        self,
        identity: ClientIdentity,
        name: str,
        args: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> Any:
        """Run an operation by name and return a JSON-compatible result."""
        op = self.operation(name)
        bound = op.bind(args)
        result = getattr(self, op.method)(identity, *bound)
        return to_jsonable(result)
