"""
Unit tests for password hashing and the token issuer.
"""
from datetime import datetime, timedelta

import jwt
import pytest

from catalog_platform.catalog_platform.catalog_service.auth import (
    TokenError,
    authenticate_user,
    create_access_token,
    decode_access_token,
    hash_password,
    invalidate_token,
    verify_password,
)
from catalog_platform.catalog_platform.catalog_service.config import settings
from catalog_platform.catalog_platform.catalog_service.models import RevokedToken, User


@pytest.fixture
def user(db_session):
    u = User(name="Alice", email="alice@shop.io", password=hash_password("secret1"))
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


def test_hash_password_is_salted():
    first = hash_password("secret1")
    second = hash_password("secret1")
    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second)
    assert not verify_password("secret2", first)


def test_authenticate_user(db_session, user):
    assert authenticate_user(db_session, "alice@shop.io", "secret1").id == user.id
    assert authenticate_user(db_session, "alice@shop.io", "nope123") is None
    assert authenticate_user(db_session, "bob@shop.io", "secret1") is None


def test_token_carries_identity_and_expiry(db_session, user):
    token = create_access_token(user)
    claims = decode_access_token(token, db_session)
    assert claims["sub"] == str(user.id)
    assert claims["email"] == "alice@shop.io"
    assert claims["exp"] - claims["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert claims["jti"]


def test_expired_token_is_rejected(db_session, user):
    past = datetime.utcnow() - timedelta(hours=2)
    token = jwt.encode(
        {"sub": str(user.id), "jti": "old", "iat": past, "exp": past + timedelta(minutes=1)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(TokenError, match="expired"):
        decode_access_token(token, db_session)


def test_token_signed_with_other_key_is_rejected(db_session, user):
    token = jwt.encode(
        {"sub": str(user.id), "jti": "x", "exp": datetime.utcnow() + timedelta(minutes=5)},
        "some-other-key",
        algorithm="HS256",
    )
    with pytest.raises(TokenError, match="Invalid token"):
        decode_access_token(token, db_session)


def test_token_without_jti_is_rejected(db_session, user):
    token = jwt.encode(
        {"sub": str(user.id), "exp": datetime.utcnow() + timedelta(minutes=5)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(TokenError):
        decode_access_token(token, db_session)


def test_invalidate_adds_to_revocation_list(db_session, user):
    token = create_access_token(user)
    claims = invalidate_token(token, db_session)

    entry = db_session.query(RevokedToken).filter(RevokedToken.jti == claims["jti"]).one()
    assert entry.user_id == user.id
    assert entry.expires_at > datetime.utcnow()

    with pytest.raises(TokenError, match="revoked"):
        decode_access_token(token, db_session)
    with pytest.raises(TokenError, match="revoked"):
        invalidate_token(token, db_session)


def test_missing_signing_key(db_session, user, monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY", "")
    with pytest.raises(TokenError):
        create_access_token(user)


def test_purge_expired_revocations(db_session):
    from catalog_platform.catalog_platform.catalog_service.db import purge_expired_revocations

    db_session.add_all([
        RevokedToken(jti="stale", user_id=1, expires_at=datetime.utcnow() - timedelta(minutes=1)),
        RevokedToken(jti="live", user_id=1, expires_at=datetime.utcnow() + timedelta(minutes=30)),
    ])
    db_session.commit()

    assert purge_expired_revocations(db_session) == 1
    assert [r.jti for r in db_session.query(RevokedToken).all()] == ["live"]
