"""
Storefront errors.

Message constants are centralized here to avoid string duplication, next to
the exception hierarchy the services raise. Every error is request-scoped:
the HTTP layer maps it to a status code and a JSON body, nothing terminates
the process.

    StorefrontError
    ├── ValidationError       DuplicateEmail, WrongEmail, WrongPassword
    ├── AuthError             MissingToken, InvalidSignature, Expired
    ├── StateError            NotFound, NothingToRemove, ProductIdTaken
    └── InfrastructureError   StoreUnavailable, CorruptHash
"""

# User errors
ERROR_DUPLICATE_EMAIL = "Existing user found with the same email address"
ERROR_WRONG_EMAIL = "Wrong Email"
ERROR_WRONG_PASSWORD = "Wrong Password"
ERROR_USER_NOT_FOUND = "User not found"

# Auth errors
ERROR_MISSING_TOKEN = "Please authenticate with a valid token"
ERROR_INVALID_TOKEN = "Invalid token"
ERROR_TOKEN_EXPIRED = "Token expired"

# Cart errors
ERROR_NOTHING_TO_REMOVE = "Item not in cart or quantity is already zero"

# Product errors
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_PRODUCT_ID_TAKEN = "Product id already taken"
ERROR_NO_FILE = "No file uploaded"

# Generic errors
ERROR_INTERNAL = "Internal server error"
ERROR_STORE_UNAVAILABLE = "Storage unavailable"
ERROR_CORRUPT_HASH = "Stored password hash is malformed"


class StorefrontError(Exception):
    """Base class for all request-scoped storefront errors."""

    code = "error"
    status_code = 500
    default_message = ERROR_INTERNAL

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ==================== VALIDATION ====================

class ValidationError(StorefrontError):
    """User input rejected. Surfaced verbatim, never retried."""

    status_code = 400


class DuplicateEmail(ValidationError):
    code = "DuplicateEmail"
    default_message = ERROR_DUPLICATE_EMAIL


class WrongEmail(ValidationError):
    code = "WrongEmail"
    default_message = ERROR_WRONG_EMAIL


class WrongPassword(ValidationError):
    code = "WrongPassword"
    default_message = ERROR_WRONG_PASSWORD


# ==================== AUTH ====================

class AuthError(StorefrontError):
    """Caller must re-authenticate."""

    status_code = 401


class MissingToken(AuthError):
    code = "MissingToken"
    default_message = ERROR_MISSING_TOKEN


class InvalidSignature(AuthError):
    code = "InvalidSignature"
    default_message = ERROR_INVALID_TOKEN


class Expired(AuthError):
    code = "Expired"
    default_message = ERROR_TOKEN_EXPIRED


# ==================== STATE ====================

class StateError(StorefrontError):
    """Reported failure; retrying without new input won't change the outcome."""

    status_code = 400


class NotFound(StateError):
    code = "NotFound"
    status_code = 404
    default_message = ERROR_USER_NOT_FOUND


class NothingToRemove(StateError):
    code = "NothingToRemove"
    default_message = ERROR_NOTHING_TO_REMOVE


class ProductIdTaken(StateError):
    code = "ProductIdTaken"
    status_code = 409
    default_message = ERROR_PRODUCT_ID_TAKEN


# ==================== INFRASTRUCTURE ====================

class InfrastructureError(StorefrontError):
    """Fatal for the current request only. Detail is logged, never returned."""

    status_code = 500
    public_message = ERROR_INTERNAL


class StoreUnavailable(InfrastructureError):
    code = "StoreUnavailable"
    default_message = ERROR_STORE_UNAVAILABLE


class CorruptHash(InfrastructureError):
    code = "CorruptHash"
    default_message = ERROR_CORRUPT_HASH
