"""Cart manager: per-user item -> quantity state stored on the user record."""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.errors import NotFound, NothingToRemove
from core.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from core.services.models import UserIdentity
from core.services.repositories import UserStore

from .models import Cart, CartUpdate

logger = get_logger(__name__)


class UserLocks:
    """One asyncio.Lock per user id, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if not self._users[user_id]:
                del self._users[user_id]
                del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._locks)


class CartManager:
    """
    Reads and mutates carts through the credential store.

    Each mutation is one load-mutate-save of the whole user record, held
    under the user's lock so concurrent requests for the same user cannot
    lose an update. The change is applied to a copy and written in a single
    ``save``; a request cancelled before that write leaves the stored record
    untouched.

    Quantities move by +1/-1 only and never go below 0. A key that reaches 0
    stays in the mapping as an explicit zero.
    """

    def __init__(self, store: UserStore) -> None:
        self.store = store
        self._locks = UserLocks()

    async def _load(self, user_id: str) -> UserIdentity:
        record = await self.store.find_by_id(user_id)
        if record is None:
            raise NotFound()
        return record

    async def get_cart(self, user_id: str) -> Cart:
        """User's cart as stored; absent keys are implicitly 0."""
        record = await self._load(user_id)
        return dict(record.cart)

    async def add_item(self, user_id: str, item_key: str) -> Cart:
        """Increment item_key by one and return the updated cart."""
        if not item_key:
            raise ValueError("item_key must be a non-empty string")

        async with self._locks.hold(user_id):
            record = await self._load(user_id)
            cart = dict(record.cart)
            cart[item_key] = record.quantity_of(item_key) + 1
            await self.store.save(record.model_copy(update={"cart": cart}))

        logger.info(
            "Cart add: user=%s item=%s qty=%d",
            sanitize_id_for_logging(user_id),
            sanitize_string_for_logging(item_key),
            cart[item_key],
        )
        return cart

    async def remove_item(self, user_id: str, item_key: str) -> CartUpdate:
        """
        Decrement item_key by one.

        When the quantity is already 0 (or the key is absent) nothing is
        written and the returned CartUpdate carries NothingToRemove.
        """
        if not item_key:
            raise ValueError("item_key must be a non-empty string")

        async with self._locks.hold(user_id):
            record = await self._load(user_id)
            cart = dict(record.cart)
            current = record.quantity_of(item_key)
            if current <= 0:
                return CartUpdate(cart=cart, changed=False, error=NothingToRemove())
            cart[item_key] = current - 1
            await self.store.save(record.model_copy(update={"cart": cart}))

        logger.info(
            "Cart remove: user=%s item=%s qty=%d",
            sanitize_id_for_logging(user_id),
            sanitize_string_for_logging(item_key),
            cart[item_key],
        )
        return CartUpdate(cart=cart, changed=True)
