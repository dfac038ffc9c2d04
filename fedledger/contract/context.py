from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from functools import wraps
from typing import Callable, Concatenate, ParamSpec, TypeVar

from fedledger.config.logging import get_logger
from fedledger.core.exceptions import LedgerError, NotFoundError
from fedledger.core.interfaces import LedgerProtocol, LedgerStub
from fedledger.core.types import ModelMetadata
from fedledger.identity import ClientIdentity
from fedledger.ledger.keys import model_metadata_key

P = ParamSpec("P")
R = TypeVar("R")
C = TypeVar("C", bound="Contract")
E = TypeVar("E", bound=LedgerError)


class Intent(Enum):
    """Whether an operation commits (submit) or only reads (evaluate)."""

    SUBMIT = auto()
    EVALUATE = auto()


@dataclass(slots=True, frozen=True)
class Context:
    """Caller identity and ledger view for one operation."""

    identity: ClientIdentity
    stub: LedgerStub


def transaction(
    intent: Intent = Intent.SUBMIT,
) -> Callable[
    [Callable[Concatenate[C, Context, P], R]],
    Callable[Concatenate[C, ClientIdentity, P], R],
]:
    """Run an operation inside one ledger unit of work.

    The decorated handler receives a Context; callers pass the
    ClientIdentity instead. Submit units commit when the handler returns
    and are discarded when it raises. Evaluate units never commit.
    """

    def decorator(
        func: Callable[Concatenate[C, Context, P], R],
    ) -> Callable[Concatenate[C, ClientIdentity, P], R]:
        @wraps(func)
        def wrapper(
            self: C,
            identity: ClientIdentity,
            *args: P.args,
            **kwargs: P.kwargs,
        ) -> R:
            unit = (
                self.ledger.transaction
                if intent is Intent.SUBMIT
                else self.ledger.evaluate
            )
            try:
                with unit() as stub:
                    ctx = Context(identity, stub)
                    result = func(self, ctx, *args, **kwargs)
                    tx_id = stub.tx_id
            except LedgerError as e:
                self._logger.info(
                    f"{func.__name__} rejected for {identity.id}: "
                    f"{e.kind.value}"
                )
                raise

            if intent is Intent.SUBMIT:
                self._logger.info(
                    f"{func.__name__} committed tx {tx_id} for {identity.id}"
                )
            else:
                self._logger.debug(
                    f"{func.__name__} evaluated for {identity.id}"
                )
            return result

        setattr(wrapper, "intent", intent)
        return wrapper

    return decorator


class Contract:
    """Base class for contract components sharing one ledger."""

    def __init__(self, ledger: LedgerProtocol) -> None:
        self._ledger = ledger
        self._logger = get_logger("fedledger.contract")

    @property
    def ledger(self) -> LedgerProtocol:
        return self._ledger

    def _error(
        self, error_cls: type[E], message: str, **details: object
    ) -> E:
        """Log and build an error for the caller to raise."""
        self._logger.error(message)
        return error_cls(message, dict(details))

    def _model_exists(self, ctx: Context, model_id: str) -> bool:
        raw = ctx.stub.get_state(model_metadata_key(model_id).encode())
        return bool(raw)

    def _read_metadata_json(self, ctx: Context, model_id: str) -> str:
        raw = ctx.stub.get_state(model_metadata_key(model_id).encode())
        if not raw:
            raise self._error(
                NotFoundError,
                f"ModelMetadata {model_id} does not exist",
                model_id=model_id,
            )
        return raw

    def _read_metadata(self, ctx: Context, model_id: str) -> ModelMetadata:
        return ModelMetadata.deserialize(
            self._read_metadata_json(ctx, model_id)
        )

    def _write_metadata(self, ctx: Context, metadata: ModelMetadata) -> str:
        raw = metadata.serialize()
        key = model_metadata_key(metadata.model_id).encode()
        ctx.stub.put_state(key, raw)
        return raw
