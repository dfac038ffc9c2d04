from fedledger.core.types import PersonalInfo
from fedledger.identity import Role, has_role, resolve_role
from fedledger.ledger.keys import client_selected_for_round_key

from .context import Context, Contract, Intent, transaction


class IdentityQueries(Contract):
    """Read-only views of the caller's identity."""

    @transaction(Intent.EVALUATE)
    def get_personal_info(self, ctx: Context) -> PersonalInfo:
        identity = ctx.identity
        username = identity.enrollment_id
        role = resolve_role(identity)

        selected: bool | None = None
        if role == Role.TRAINER.value:
            # Written by the round-selection service, never by this contract.
            key = client_selected_for_round_key(username).encode()
            selected = bool(ctx.stub.get_state(key))

        return PersonalInfo(
            client_id=identity.id,
            role=role,
            msp_id=identity.msp_id,
            username=username,
            selected_for_round=selected,
        )

    @transaction(Intent.EVALUATE)
    def get_role(self, ctx: Context) -> str:
        return resolve_role(ctx.identity)

    @transaction(Intent.EVALUATE)
    def check_has_fl_admin_attribute(self, ctx: Context) -> bool:
        return has_role(ctx.identity, Role.FL_ADMIN)

    @transaction(Intent.EVALUATE)
    def check_has_trainer_attribute(self, ctx: Context) -> bool:
        return has_role(ctx.identity, Role.TRAINER)

    @transaction(Intent.EVALUATE)
    def check_has_lead_aggregator_attribute(self, ctx: Context) -> bool:
        return has_role(ctx.identity, Role.LEAD_AGGREGATOR)
