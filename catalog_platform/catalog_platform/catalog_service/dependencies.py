"""
FastAPI dependencies resolving the caller identity from a bearer token.
"""
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import TokenError, decode_access_token
from .db import get_db
from .errors import InternalError, Unauthorized
from .models import User
from .services.accounts import AccountService
from .services.catalog import CatalogService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False, description="JWT access token")


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> dict:
    """Verify the bearer token. Any failure rejects the request with 401."""
    if credentials is None:
        raise Unauthorized("Not authenticated")
    try:
        return decode_access_token(credentials.credentials, db)
    except TokenError as exc:
        raise Unauthorized(str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception("Token revocation lookup failed")
        raise InternalError("Failed to verify token") from exc


def get_current_user(
    claims: dict = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == int(claims["sub"])).first()
    if not user:
        raise Unauthorized("User no longer exists")
    return user


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_catalog_service(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CatalogService:
    """Build a CatalogService bound to the authenticated caller."""
    return CatalogService(db, user)
