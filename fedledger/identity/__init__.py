from .roles import (
    ENROLLMENT_ID_ATTRIBUTE,
    ClientIdentity,
    Role,
    has_role,
    require_role,
    resolve_role,
)

__all__ = [
    "ENROLLMENT_ID_ATTRIBUTE",
    "ClientIdentity",
    "Role",
    "has_role",
    "require_role",
    "resolve_role",
]
