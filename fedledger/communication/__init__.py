from .http import HeaderIdentityResolver, HTTPGateway, LedgerHTTPClient

__all__ = ["HTTPGateway", "HeaderIdentityResolver", "LedgerHTTPClient"]
