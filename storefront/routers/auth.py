# storefront/routers/auth.py
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from storefront.core.auth import get_auth_service, get_token, require_auth
from storefront.database import get_session
from storefront.schemas.user import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UserRead,
)
from storefront.services.auth_service import AuthService

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Create a new account (access_level=1, empty cart).
    """
    user = service.register(session, payload)
    return RegisterResponse(id=user.id, msg="User created successfully")


@router.post("/login", response_model=UserRead)
def login(
    payload: LoginRequest,
    response: Response,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Log in with email + password.

    The session token is returned in the `Authorization` response header;
    the body is the user without the password.
    """
    token, user = service.login(session, payload)
    response.headers["Authorization"] = token
    return user


@router.get("/checkauth", response_model=UserRead)
def check_auth(current_user: UserRead = Depends(require_auth)):
    """
    Return the user behind the request token.
    """
    return current_user


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: UserRead = Depends(require_auth),
    token: str | None = Depends(get_token),
    service: AuthService = Depends(get_auth_service),
):
    """
    Invalidate the current session (both token and user entries).
    """
    service.logout(token, current_user.id)
    return MessageResponse(msg="User logged out successfully")
