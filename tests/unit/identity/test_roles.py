import pytest

from fedledger.core.exceptions import AccessDeniedError, ErrorKind
from fedledger.identity import (
    ENROLLMENT_ID_ATTRIBUTE,
    ClientIdentity,
    Role,
    has_role,
    require_role,
    resolve_role,
)


def test_with_roles_sets_true_attributes():
    identity = ClientIdentity.with_roles(
        "alice", Role.TRAINER, Role.FL_ADMIN, enrollment_id="alice-enroll"
    )

    assert identity.get_attribute("trainer") == "true"
    assert identity.get_attribute("flAdmin") == "true"
    assert identity.get_attribute(ENROLLMENT_ID_ATTRIBUTE) == "alice-enroll"
    assert identity.enrollment_id == "alice-enroll"


def test_enrollment_id_falls_back_to_id():
    assert ClientIdentity(id="bob").enrollment_id == "bob"


def test_attributes_are_read_only():
    identity = ClientIdentity(id="bob", attributes={"trainer": "true"})
    with pytest.raises(TypeError):
        identity.attributes["trainer"] = "false"  # type: ignore[index]


@pytest.mark.parametrize("value", ["false", "TRUE", "1", ""])
def test_only_exact_true_grants_role(value: str):
    identity = ClientIdentity(id="bob", attributes={"trainer": value})
    assert not has_role(identity, Role.TRAINER)


def test_require_role_denies_with_details():
    identity = ClientIdentity(id="bob")

    with pytest.raises(AccessDeniedError) as exc_info:
        require_role(identity, Role.LEAD_AGGREGATOR)

    error = exc_info.value
    assert error.kind is ErrorKind.ACCESS_DENIED
    assert error.details == {"identity": "bob", "role": "leadAggregator"}


def test_require_role_passes_silently():
    require_role(ClientIdentity.with_roles("a", Role.FL_ADMIN), Role.FL_ADMIN)


@pytest.mark.parametrize(
    "roles, expected",
    [
        ((Role.LEAD_AGGREGATOR, Role.TRAINER), "leadAggregator"),
        ((Role.TRAINER, Role.FL_ADMIN), "trainer"),
        ((Role.FL_ADMIN,), "flAdmin"),
        ((), "unknown"),
    ],
)
def test_resolve_role_precedence(roles: tuple[Role, ...], expected: str):
    assert resolve_role(ClientIdentity.with_roles("c", *roles)) == expected
