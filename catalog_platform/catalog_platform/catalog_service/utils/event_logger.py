"""
Event logger utility for account events.
"""
from datetime import datetime
from typing import Optional
import logging

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import AccountEvent

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register",
    "login_success",
    "login_failure",
    "logout",
}


def client_ip(request: Request) -> Optional[str]:
    """Client address, falling back to the first X-Forwarded-For hop."""
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()
    return None


def log_account_event(
    event_type: str,
    email: str,
    request: Request,
    db: Session,
    user_id: Optional[int] = None,
) -> None:
    """
    Record an account event in the database and the service log.

    Args:
        event_type: One of: register, login_success, login_failure, logout
        email: Account email the event refers to
        request: FastAPI Request object
        db: Database session
        user_id: Id of the account, when known

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    ip_address = client_ip(request)

    try:
        event = AccountEvent(
            user_id=user_id,
            email=email,
            event_type=event_type,
            ip_address=ip_address,
            user_agent=request.headers.get("user-agent"),
            timestamp=datetime.utcnow(),
        )
        db.add(event)
        db.commit()

        logger.info(
            "ACCOUNT %s user_id=%s email=%s ip=%s",
            event_type, user_id, email, ip_address
        )

    except SQLAlchemyError as e:
        # Audit failure must not break the account flow
        logger.warning(
            "Failed to log account event - user_id=%s, event_type=%s, error=%s",
            user_id, event_type, e
        )
        db.rollback()
