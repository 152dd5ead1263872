"""
Auth Router

Signup and login. Both return a signed session token; the client sends it
back in the ``auth-token`` header on cart requests.
"""
from fastapi import APIRouter

from core.routers.deps import get_account_service
from .models import LoginRequest, SignupRequest, TokenResponse

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=TokenResponse)
async def signup(request: SignupRequest):
    """Register a user. Fails with DuplicateEmail when the email is taken."""
    token = await get_account_service().signup(
        display_name=request.username,
        email=request.email,
        password=request.password,
    )
    return TokenResponse(token=token)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """Exchange email and password for a token (WrongEmail / WrongPassword on failure)."""
    token = await get_account_service().login(request.email, request.password)
    return TokenResponse(token=token)
