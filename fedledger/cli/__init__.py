from .gateway import build_ledger, build_settings, main, serve

__all__ = ["build_ledger", "build_settings", "main", "serve"]
