from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from fedledger.config.logging import get_logger
from fedledger.core.exceptions import AccessDeniedError

ENROLLMENT_ID_ATTRIBUTE = "hf.EnrollmentID"
UNKNOWN_ROLE = "unknown"

logger = get_logger("fedledger.identity")


class Role(str, Enum):
    """Boolean attributes that gate contract operations."""

    FL_ADMIN = "flAdmin"
    TRAINER = "trainer"
    LEAD_AGGREGATOR = "leadAggregator"


@dataclass(slots=True, frozen=True)
class ClientIdentity:
    """Verified caller identity as asserted by the membership service.

    Parameters
    ----------
    id : str
        Unique identity of the caller (e.g. certificate subject).
    msp_id : str
        Organization the caller belongs to.
    attributes : Mapping[str, str]
        Attribute values issued with the caller's enrollment.
    """

    id: str
    msp_id: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "attributes", MappingProxyType(dict(self.attributes))
        )

    @classmethod
    def with_roles(
        cls,
        id: str,
        *roles: Role,
        msp_id: str = "",
        enrollment_id: str | None = None,
    ) -> "ClientIdentity":
        attributes = {role.value: "true" for role in roles}
        if enrollment_id is not None:
            attributes[ENROLLMENT_ID_ATTRIBUTE] = enrollment_id
        return cls(id=id, msp_id=msp_id, attributes=attributes)

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def assert_attribute_value(self, name: str, value: str) -> bool:
        return self.attributes.get(name) == value

    @property
    def enrollment_id(self) -> str:
        """Stable client identifier used in update keys."""
        return self.attributes.get(ENROLLMENT_ID_ATTRIBUTE) or self.id


def has_role(identity: ClientIdentity, role: Role) -> bool:
    return identity.assert_attribute_value(role.value, "true")


def require_role(identity: ClientIdentity, role: Role) -> None:
    """Fail with AccessDeniedError unless the caller holds role."""
    if has_role(identity, role):
        return
    message = f"User {identity.id} has no {role.value} attribute"
    logger.error(message)
    raise AccessDeniedError(
        message, {"identity": identity.id, "role": role.value}
    )


def resolve_role(identity: ClientIdentity) -> str:
    for role in (Role.LEAD_AGGREGATOR, Role.TRAINER, Role.FL_ADMIN):
        if has_role(identity, role):
            return role.value
    return UNKNOWN_ROLE
