from .client import ClientEndpoints, LedgerHTTPClient
from .identity import HeaderIdentityResolver, IdentityResolver
from .server import (
    STATUS_BY_KIND,
    EventSubscriber,
    GatewayEndpoints,
    HTTPGateway,
)

__all__ = [
    "ClientEndpoints",
    "LedgerHTTPClient",
    "HeaderIdentityResolver",
    "IdentityResolver",
    "EventSubscriber",
    "GatewayEndpoints",
    "HTTPGateway",
    "STATUS_BY_KIND",
]
