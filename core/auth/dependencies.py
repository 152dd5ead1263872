"""FastAPI dependencies for identity-scoped endpoints.

``require_user`` is the auth gate: it runs before the endpoint body, and any
token failure raises an AuthError that the app turns into a 401 without the
endpoint ever executing. It keeps no state between requests.

Usage:
    @router.get("/getcart")
    async def get_cart(user_id: str = Depends(require_user)):
        ...
"""

from fastapi import Header, Request

# Header used by the storefront client; Authorization: Bearer is also accepted
TOKEN_HEADER = "auth-token"


def extract_bearer_token(auth_token: str | None, authorization: str | None) -> str | None:
    """Prefer the auth-token header, fall back to ``Authorization: Bearer <token>``."""
    if auth_token and auth_token.strip():
        return auth_token.strip()
    if authorization:
        parts = authorization.split(" ")
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
            return parts[1]
    return None


async def require_user(
    request: Request,
    auth_token: str | None = Header(None, alias=TOKEN_HEADER),
    authorization: str | None = Header(None, alias="Authorization"),
) -> str:
    """Verify the bearer token and attach the user id to ``request.state``."""
    from core.routers.deps import get_token_service

    token = extract_bearer_token(auth_token, authorization)
    user_id = get_token_service().verify(token)
    request.state.user_id = user_id
    return user_id
