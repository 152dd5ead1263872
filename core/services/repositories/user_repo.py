"""User Repository - credential store for UserIdentity records.

Two backends share the UserStore interface:
- InMemoryUserRepository: process-local dict, used by default and in tests
- UserRepository: Supabase ``users`` table, cart kept in the ``cart_data`` JSON column

Both enforce email uniqueness (exact, case-sensitive match) and implement
``save`` as a whole-record overwrite (last-writer-wins).
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from uuid import uuid4

from postgrest.exceptions import APIError

from core.errors import DuplicateEmail, NotFound, StorefrontError
from core.logging import get_logger, mask_email_for_logging, sanitize_id_for_logging
from core.services.models import UserIdentity

from .base import BaseRepository

logger = get_logger(__name__)

# Postgres unique_violation
_UNIQUE_VIOLATION = "23505"


def _new_user_id() -> str:
    return uuid4().hex


class UserStore(ABC):
    """Credential store contract."""

    @abstractmethod
    async def find_by_email(self, email: str) -> UserIdentity | None: ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> UserIdentity | None: ...

    @abstractmethod
    async def create(self, record: UserIdentity) -> UserIdentity:
        """Persist a new record, assigning ``id`` and ``created_at``.

        Raises DuplicateEmail if a record with the same email exists.
        """

    @abstractmethod
    async def save(self, record: UserIdentity) -> None:
        """Overwrite the stored record with ``record``. Raises NotFound for unknown ids."""


class InMemoryUserRepository(UserStore):
    """Process-local credential store.

    Operations never await between check and write, so each one is atomic
    with respect to other coroutines on the same event loop. Records are
    copied in and out; callers never hold a reference to stored state.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, UserIdentity] = {}
        self._id_by_email: dict[str, str] = {}

    async def find_by_email(self, email: str) -> UserIdentity | None:
        user_id = self._id_by_email.get(email)
        if user_id is None:
            return None
        return self._by_id[user_id].model_copy(deep=True)

    async def find_by_id(self, user_id: str) -> UserIdentity | None:
        record = self._by_id.get(user_id)
        return record.model_copy(deep=True) if record else None

    async def create(self, record: UserIdentity) -> UserIdentity:
        if record.email in self._id_by_email:
            raise DuplicateEmail()

        stored = record.model_copy(
            deep=True,
            update={"id": _new_user_id(), "created_at": datetime.now(timezone.utc)},
        )
        self._by_id[stored.id] = stored
        self._id_by_email[stored.email] = stored.id
        logger.info("Created user %s", sanitize_id_for_logging(stored.id))
        return stored.model_copy(deep=True)

    async def save(self, record: UserIdentity) -> None:
        current = self._by_id.get(record.id) if record.id else None
        if current is None:
            raise NotFound()
        # Email is the unique key; keep the index in step if it ever changes
        if current.email != record.email:
            if record.email in self._id_by_email:
                raise DuplicateEmail()
            del self._id_by_email[current.email]
            self._id_by_email[record.email] = record.id
        self._by_id[record.id] = record.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._by_id)


class UserRepository(BaseRepository, UserStore):
    """Supabase-backed credential store.

    Expects a ``users`` table with a unique index on ``email``.
    """

    table = "users"

    @staticmethod
    def _to_row(record: UserIdentity) -> dict:
        return {
            "id": record.id,
            "name": record.display_name,
            "email": record.email,
            "password_hash": record.password_hash,
            "cart_data": dict(record.cart),
            "created_at": record.created_at.isoformat() if record.created_at else None,
        }

    @staticmethod
    def _from_row(row: dict) -> UserIdentity:
        return UserIdentity(
            id=str(row["id"]),
            display_name=row.get("name"),
            email=row["email"],
            password_hash=row["password_hash"],
            cart=row.get("cart_data") or {},
            created_at=row.get("created_at"),
        )

    def _map_error(self, exc: Exception, operation: str) -> StorefrontError | None:
        if isinstance(exc, APIError) and exc.code == _UNIQUE_VIOLATION:
            return DuplicateEmail()
        return None

    async def find_by_email(self, email: str) -> UserIdentity | None:
        result = await self._execute(
            self.client.table(self.table).select("*").eq("email", email).limit(1),
            "find_by_email",
        )
        return self._from_row(result.data[0]) if result.data else None

    async def find_by_id(self, user_id: str) -> UserIdentity | None:
        result = await self._execute(
            self.client.table(self.table).select("*").eq("id", user_id).limit(1),
            "find_by_id",
        )
        return self._from_row(result.data[0]) if result.data else None

    async def create(self, record: UserIdentity) -> UserIdentity:
        if await self.find_by_email(record.email) is not None:
            raise DuplicateEmail()

        stored = record.model_copy(
            update={"id": _new_user_id(), "created_at": datetime.now(timezone.utc)}
        )
        # The unique index still guards the gap between lookup and insert
        result = await self._execute(
            self.client.table(self.table).insert(self._to_row(stored)), "create"
        )
        logger.info(
            "Created user %s (%s)",
            sanitize_id_for_logging(stored.id),
            mask_email_for_logging(stored.email),
        )
        return self._from_row(result.data[0]) if result.data else stored

    async def save(self, record: UserIdentity) -> None:
        if not record.id:
            raise NotFound()
        row = self._to_row(record)
        row.pop("id")
        row.pop("created_at")  # set once at creation
        result = await self._execute(
            self.client.table(self.table).update(row).eq("id", record.id), "save"
        )
        if not result.data:
            raise NotFound()

