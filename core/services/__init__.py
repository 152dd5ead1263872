# Services Module
from .models import Product, UserIdentity

__all__ = ["Product", "UserIdentity"]
