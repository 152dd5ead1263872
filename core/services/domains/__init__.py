"""Domain services wrapping repositories."""
from .users import AccountService

__all__ = [
    "AccountService",
]
