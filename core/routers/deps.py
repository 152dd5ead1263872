"""
Shared Dependencies for Routers

Lazy-loaded process-wide singletons. The in-memory backend is built on first
use; the Supabase backend needs an async client, so ``init_services()`` must
run at startup (the app lifespan does this).
"""

from typing import Optional

from core.auth.passwords import PasswordHasher
from core.auth.tokens import TokenService
from core.cart import CartManager
from core.config import get_settings
from core.logging import get_logger
from core.services.domains import AccountService
from core.services.repositories import (
    InMemoryProductRepository,
    InMemoryUserRepository,
    ProductRepository,
    ProductStore,
    UserRepository,
    UserStore,
)
from core.services.uploads import ImageStore

logger = get_logger(__name__)

# ==================== LAZY SINGLETONS ====================

_user_store: Optional[UserStore] = None
_product_store: Optional[ProductStore] = None
_password_hasher: Optional[PasswordHasher] = None
_token_service: Optional[TokenService] = None
_cart_manager: Optional[CartManager] = None
_account_service: Optional[AccountService] = None
_image_store: Optional[ImageStore] = None


async def init_services() -> None:
    """Build the storage backends. Call once at startup."""
    global _user_store, _product_store
    settings = get_settings()

    if settings.store_backend == "supabase":
        from core.db import get_supabase

        client = await get_supabase()
        if _user_store is None:
            _user_store = UserRepository(client, timeout=settings.store_timeout_seconds)
        if _product_store is None:
            _product_store = ProductRepository(client, timeout=settings.store_timeout_seconds)

    logger.info("Storage backend: %s", settings.store_backend)


def get_user_store() -> UserStore:
    global _user_store
    if _user_store is None:
        if get_settings().store_backend != "memory":
            raise RuntimeError("init_services() must run before the Supabase store is used")
        _user_store = InMemoryUserRepository()
    return _user_store


def get_product_store() -> ProductStore:
    global _product_store
    if _product_store is None:
        if get_settings().store_backend != "memory":
            raise RuntimeError("init_services() must run before the Supabase store is used")
        _product_store = InMemoryProductRepository()
    return _product_store


def get_password_hasher() -> PasswordHasher:
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = PasswordHasher(work_factor=get_settings().password_work_factor)
    return _password_hasher


def get_token_service() -> TokenService:
    global _token_service
    if _token_service is None:
        settings = get_settings()
        _token_service = TokenService(settings.jwt_secret, ttl_seconds=settings.token_ttl_seconds)
    return _token_service


def get_cart_manager() -> CartManager:
    global _cart_manager
    if _cart_manager is None:
        _cart_manager = CartManager(get_user_store())
    return _cart_manager


def get_account_service() -> AccountService:
    global _account_service
    if _account_service is None:
        _account_service = AccountService(
            get_user_store(), get_password_hasher(), get_token_service()
        )
    return _account_service


def get_image_store() -> ImageStore:
    global _image_store
    if _image_store is None:
        settings = get_settings()
        _image_store = ImageStore(settings.upload_dir, settings.public_base_url)
    return _image_store


# ==================== TEST HELPERS ====================

def configure_services(
    *,
    user_store: Optional[UserStore] = None,
    product_store: Optional[ProductStore] = None,
    password_hasher: Optional[PasswordHasher] = None,
    token_service: Optional[TokenService] = None,
    image_store: Optional[ImageStore] = None,
) -> None:
    """Replace singletons (tests). Dependent services are rebuilt on next use."""
    global _user_store, _product_store, _password_hasher, _token_service, _image_store
    global _cart_manager, _account_service
    if user_store is not None:
        _user_store = user_store
    if product_store is not None:
        _product_store = product_store
    if password_hasher is not None:
        _password_hasher = password_hasher
    if token_service is not None:
        _token_service = token_service
    if image_store is not None:
        _image_store = image_store
    _cart_manager = None
    _account_service = None


def reset_services() -> None:
    """Drop every singleton so the next call rebuilds from settings."""
    global _user_store, _product_store, _password_hasher, _token_service
    global _cart_manager, _account_service, _image_store
    _user_store = None
    _product_store = None
    _password_hasher = None
    _token_service = None
    _cart_manager = None
    _account_service = None
    _image_store = None
