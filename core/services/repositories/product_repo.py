"""Product Repository - catalog record store (find/insert/delete).

The catalog has no invariants beyond existence. Products get sequential
integer ids: last id + 1, or 1 for an empty catalog. ``add`` allocates the id
under a lock, and the ``products.id`` primary key rejects an id another
instance took first, in which case allocation is retried.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from postgrest.exceptions import APIError
from supabase._async.client import AsyncClient

from core.config import DEFAULT_STORE_TIMEOUT_SECONDS
from core.errors import ProductIdTaken, StorefrontError, StoreUnavailable
from core.logging import get_logger
from core.services.models import Product

from .base import BaseRepository

logger = get_logger(__name__)

# Postgres unique_violation
_UNIQUE_VIOLATION = "23505"

MAX_ID_ATTEMPTS = 3


class ProductStore(ABC):
    """Catalog store contract."""

    def __init__(self) -> None:
        self._id_lock = asyncio.Lock()

    @abstractmethod
    async def list_all(self) -> List[Product]:
        """All products in insertion (id) order."""

    @abstractmethod
    async def insert(self, product: Product) -> Product:
        """Persist a product. Raises ProductIdTaken if the id exists."""

    @abstractmethod
    async def delete(self, product_id: int) -> Optional[Product]:
        """Remove a product, returning it, or None if it did not exist."""

    async def next_id(self) -> int:
        products = await self.list_all()
        return products[-1].id + 1 if products else 1

    async def by_category(self, category: str) -> List[Product]:
        return [p for p in await self.list_all() if p.category == category]

    async def add(self, **fields: Any) -> Product:
        """Insert a new product under the next free id."""
        async with self._id_lock:
            for _ in range(MAX_ID_ATTEMPTS):
                product = Product(id=await self.next_id(), **fields)
                try:
                    return await self.insert(product)
                except ProductIdTaken:
                    logger.warning("Product id %d taken concurrently, retrying", product.id)
        raise StoreUnavailable("could not allocate a product id")


class InMemoryProductRepository(ProductStore):
    def __init__(self) -> None:
        super().__init__()
        self._products: dict[int, Product] = {}

    async def list_all(self) -> List[Product]:
        return [p.model_copy() for _, p in sorted(self._products.items())]

    async def insert(self, product: Product) -> Product:
        if product.id in self._products:
            raise ProductIdTaken()
        self._products[product.id] = product.model_copy()
        return product

    async def delete(self, product_id: int) -> Optional[Product]:
        return self._products.pop(product_id, None)


class ProductRepository(BaseRepository, ProductStore):
    """Supabase ``products`` table (``id`` is the primary key)."""

    table = "products"

    def __init__(self, client: AsyncClient, timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS) -> None:
        BaseRepository.__init__(self, client, timeout)
        ProductStore.__init__(self)

    def _map_error(self, exc: Exception, operation: str) -> StorefrontError | None:
        if isinstance(exc, APIError) and exc.code == _UNIQUE_VIOLATION:
            return ProductIdTaken()
        return None

    async def list_all(self) -> List[Product]:
        result = await self._execute(
            self.client.table(self.table).select("*").order("id"), "list_all"
        )
        return [Product(**p) for p in result.data]

    async def by_category(self, category: str) -> List[Product]:
        result = await self._execute(
            self.client.table(self.table).select("*").eq("category", category).order("id"),
            "by_category",
        )
        return [Product(**p) for p in result.data]

    async def insert(self, product: Product) -> Product:
        result = await self._execute(
            self.client.table(self.table).insert(product.model_dump(mode="json")), "insert"
        )
        return Product(**result.data[0]) if result.data else product

    async def delete(self, product_id: int) -> Optional[Product]:
        result = await self._execute(
            self.client.table(self.table).delete().eq("id", product_id), "delete"
        )
        return Product(**result.data[0]) if result.data else None
