"""
Account endpoints: register, login, logout and current user.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from ..auth import token_lifetime_seconds
from ..dependencies import get_account_service, get_token_claims
from ..schemas import (
    CurrentUserResponse,
    LogoutRequest,
    MessageResponse,
    RegistrationResponse,
    Token,
    UserCreate,
    UserLogin,
    UserOut,
)
from ..services.accounts import AccountService

router = APIRouter(prefix="/api", tags=["accounts"])


@router.post("/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, request: Request, service: AccountService = Depends(get_account_service)):
    user = service.register(payload, request)
    return RegistrationResponse(data=UserOut.model_validate(user))


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, request: Request, service: AccountService = Depends(get_account_service)):
    token = service.login(credentials, request)
    return Token(token=token, expires_in=token_lifetime_seconds())


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    payload: Optional[LogoutRequest] = None,
    service: AccountService = Depends(get_account_service),
):
    service.logout(payload.token if payload else None, request)
    return MessageResponse(message="User has been logged out")


@router.get("/user", response_model=CurrentUserResponse)
def get_user(claims: dict = Depends(get_token_claims), service: AccountService = Depends(get_account_service)):
    """
    Return the authenticated user.
    Requires JWT authentication.
    """
    return CurrentUserResponse(user=UserOut.model_validate(service.get_current_user(claims)))
