"""
Account operations: registration, login, logout and current user lookup.
"""
import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import (
    TokenError,
    authenticate_user,
    create_access_token,
    hash_password,
    invalidate_token,
)
from ..errors import InternalError, InvalidCredentials, NotFound, TokenCreationFailed, ValidationFailed
from ..models import User
from ..schemas import UserCreate, UserLogin
from ..utils.event_logger import log_account_event

logger = logging.getLogger(__name__)


class AccountService:
    """Owns the Credential Store and delegates token work to ``auth``."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, payload: UserCreate, request: Request) -> User:
        """
        Create a user with a hashed password.

        Raises:
            ValidationFailed: If the email is already taken
            InternalError: If the store rejects the insert
        """
        if self.db.query(User).filter(User.email == payload.email).first():
            raise ValidationFailed({"email": ["The email has already been taken."]})

        user = User(
            name=payload.name,
            email=payload.email,
            password=hash_password(payload.password),
        )
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            # Includes a uniqueness race lost after the pre-check
            self.db.rollback()
            logger.exception("Registration failed for email=%s", payload.email)
            raise InternalError("Failed to create user") from exc

        log_account_event("register", user.email, request, self.db, user_id=user.id)
        return user

    def login(self, payload: UserLogin, request: Request) -> str:
        """
        Exchange credentials for a bearer token.

        Raises:
            InvalidCredentials: If the email/password pair matches no user
            TokenCreationFailed: If the token cannot be signed
        """
        user = authenticate_user(self.db, payload.email, payload.password)
        if user is None:
            known = self.db.query(User).filter(User.email == payload.email).first()
            if known:
                log_account_event("login_failure", known.email, request, self.db, user_id=known.id)
            raise InvalidCredentials()

        try:
            token = create_access_token(user)
        except TokenError as exc:
            logger.error("Token creation failed for user_id=%s: %s", user.id, exc)
            raise TokenCreationFailed() from exc

        log_account_event("login_success", user.email, request, self.db, user_id=user.id)
        return token

    def logout(self, token: Optional[str], request: Request) -> None:
        """
        Revoke ``token``.

        Raises:
            ValidationFailed: If no token was supplied
            InternalError: If the token is malformed, expired or already revoked
        """
        if not token or not token.strip():
            raise ValidationFailed(
                {"token": ["The token field is required."]},
                message="Invalid token or missing token",
            )

        try:
            claims = invalidate_token(token.strip(), self.db)
        except (TokenError, SQLAlchemyError) as exc:
            logger.warning("Logout rejected: %s", exc)
            raise InternalError("Failed to log out user") from exc

        log_account_event(
            "logout", claims.get("email", ""), request, self.db, user_id=int(claims["sub"])
        )

    def get_current_user(self, claims: Optional[dict]) -> User:
        """
        Load the user a verified token refers to.

        Raises:
            NotFound: If no identity is attached or the user no longer exists
            InternalError: If the lookup itself fails
        """
        if not claims or not claims.get("sub"):
            raise NotFound("User not found")
        try:
            user = self.db.query(User).filter(User.id == int(claims["sub"])).first()
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed")
            raise InternalError("Failed to retrieve user") from exc
        if not user:
            raise NotFound("User not found")
        return user
