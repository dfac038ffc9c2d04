import json
from typing import Protocol

from aiohttp import web

from fedledger.core.exceptions import InvalidArgumentError
from fedledger.identity import ClientIdentity


class IdentityResolver(Protocol):
    """Resolves the verified caller of a request."""

    def resolve(self, request: web.Request) -> ClientIdentity | None: ...


class HeaderIdentityResolver:
    """Reads the caller identity from headers set by a trusted proxy.

    The gateway must only be reachable through a membership proxy that
    authenticates callers and overwrites these headers.
    """

    ID_HEADER = "X-Client-Id"
    MSP_HEADER = "X-MSP-Id"
    ATTRIBUTES_HEADER = "X-Client-Attributes"

    def resolve(self, request: web.Request) -> ClientIdentity | None:
        client_id = request.headers.get(self.ID_HEADER)
        if not client_id:
            return None

        raw = request.headers.get(self.ATTRIBUTES_HEADER, "{}")
        try:
            attributes = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidArgumentError(
                f"{self.ATTRIBUTES_HEADER} must be a JSON object"
            ) from None
        if not isinstance(attributes, dict) or not all(
            isinstance(k, str) and isinstance(v, str)
            for k, v in attributes.items()
        ):
            raise InvalidArgumentError(
                f"{self.ATTRIBUTES_HEADER} must map strings to strings"
            )

        return ClientIdentity(
            id=client_id,
            msp_id=request.headers.get(self.MSP_HEADER, ""),
            attributes=attributes,
        )

    @classmethod
    def headers_for(cls, identity: ClientIdentity) -> dict[str, str]:
        return {
            cls.ID_HEADER: identity.id,
            cls.MSP_HEADER: identity.msp_id,
            cls.ATTRIBUTES_HEADER: json.dumps(dict(identity.attributes)),
        }
