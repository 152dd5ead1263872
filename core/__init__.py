"""
Storefront Core Module

This package contains the core components:
- config: process settings (signing secret, work factor, token TTL)
- auth: password hashing, session tokens, auth gate dependency
- cart: per-user cart manager
- services: models, repositories, account service, image store
- routers: FastAPI routers

Note: Imports are lazy so that importing a leaf module does not pull in the
whole web stack.
"""

__all__ = [
    "get_settings",
    "get_logger",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "get_settings":
        from core.config import get_settings
        return get_settings
    elif name == "get_logger":
        from core.logging import get_logger
        return get_logger
    raise AttributeError(f"module 'core' has no attribute '{name}'")
