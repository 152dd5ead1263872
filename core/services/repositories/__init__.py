"""
Repository Pattern for Storage Operations

- UserRepository / InMemoryUserRepository: credential store (users + carts)
- ProductRepository / InMemoryProductRepository: product catalog
"""
from .base import BaseRepository
from .user_repo import InMemoryUserRepository, UserRepository, UserStore
from .product_repo import InMemoryProductRepository, ProductRepository, ProductStore

__all__ = [
    "BaseRepository",
    "UserStore",
    "UserRepository",
    "InMemoryUserRepository",
    "ProductStore",
    "ProductRepository",
    "InMemoryProductRepository",
]
