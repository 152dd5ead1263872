"""Base repository with shared Supabase client and bounded query execution."""

import asyncio
from typing import Any

from supabase._async.client import AsyncClient

from core.config import DEFAULT_STORE_TIMEOUT_SECONDS
from core.errors import StorefrontError, StoreUnavailable
from core.logging import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """Base class for Supabase-backed repositories.

    Every query goes through ``_execute`` so that a slow or failing backend
    surfaces as StoreUnavailable after ``timeout`` seconds instead of hanging
    the request. Retries, if any, belong to the client library.
    """

    table: str = ""

    def __init__(self, client: AsyncClient, timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS) -> None:
        self.client = client
        self.timeout = timeout

    async def _execute(self, query: Any, operation: str) -> Any:
        try:
            return await asyncio.wait_for(query.execute(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("%s.%s timed out after %.1fs", self.table, operation, self.timeout)
            raise StoreUnavailable()
        except StorefrontError:
            raise
        except Exception as e:
            mapped = self._map_error(e, operation)
            if mapped is not None:
                raise mapped from e
            logger.error(
                "%s.%s failed: %s", self.table, operation, type(e).__name__, exc_info=True
            )
            raise StoreUnavailable() from e

    def _map_error(self, exc: Exception, operation: str) -> StorefrontError | None:
        """Translate a backend error into a domain error, or None for StoreUnavailable."""
        return None
