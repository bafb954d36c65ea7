from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import settings
from .models import RevokedToken, User

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenError(Exception):
    """Raised when a token cannot be minted, verified or revoked."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def token_lifetime_seconds() -> int:
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user owning ``email`` if ``password`` matches its digest."""
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password):
        return None
    return user


def create_access_token(user: User) -> str:
    """
    Mint a signed bearer token for ``user``.

    Claims: sub (user id as string), email, jti (revocation handle), iat, exp.

    Raises:
        TokenError: If the signing key is missing or signing fails
    """
    if not settings.SECRET_KEY:
        raise TokenError("Signing key is not configured")

    now = datetime.utcnow()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(seconds=token_lifetime_seconds()),
    }
    try:
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
        raise TokenError("Could not sign token") from exc


def decode_access_token(token: str, db: Session) -> dict:
    """
    Verify signature, expiry and revocation status of ``token``.

    Returns:
        The token claims

    Raises:
        TokenError: If the token is malformed, expired, tampered with or revoked
    """
    if not settings.SECRET_KEY:
        raise TokenError("Signing key is not configured")
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "sub", "jti"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.PyJWTError as exc:
        raise TokenError("Invalid token") from exc

    if not str(claims["sub"]).isdigit():
        raise TokenError("Invalid token subject")

    revoked = db.query(RevokedToken).filter(RevokedToken.jti == claims["jti"]).first()
    if revoked:
        raise TokenError("Token has been revoked")
    return claims


def invalidate_token(token: str, db: Session) -> dict:
    """
    Add ``token`` to the revocation list so later verification fails before expiry.

    Returns:
        The claims of the revoked token

    Raises:
        TokenError: If the token is already invalid or revoked
    """
    claims = decode_access_token(token, db)
    entry = RevokedToken(
        jti=claims["jti"],
        user_id=int(claims["sub"]),
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc).replace(tzinfo=None),
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError as exc:
        # Concurrent logout with the same token
        db.rollback()
        raise TokenError("Token has been revoked") from exc

    logger.info("Revoked token jti=%s user_id=%s", entry.jti, entry.user_id)
    return claims
