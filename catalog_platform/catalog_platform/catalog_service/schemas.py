from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .config import settings


def _check_password_length(v: str) -> str:
    if not settings.PASSWORD_MIN_LENGTH <= len(v) <= settings.PASSWORD_MAX_LENGTH:
        raise ValueError(
            f"The password must be between {settings.PASSWORD_MIN_LENGTH} "
            f"and {settings.PASSWORD_MAX_LENGTH} characters."
        )
    return v


# Accounts
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_length(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_length(v)


class LogoutRequest(BaseModel):
    token: Optional[str] = None

    @field_validator("token", mode="before")
    @classmethod
    def stringify_token(cls, v):
        # Any supplied value is handed to the issuer, which rejects non-tokens
        if v is None or isinstance(v, str):
            return v
        return str(v)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str = "User created successfully"
    data: UserOut


class Token(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_in: int


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: UserOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# Products
class ProductIn(BaseModel):
    """Product fields accepted by both create and update."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., ge=0)

    @field_validator("sku", mode="before")
    @classmethod
    def coerce_sku(cls, v):
        # Numeric SKUs are accepted and stored as text
        if isinstance(v, bool):
            raise ValueError("The sku must be a string or a number.")
        if isinstance(v, (int, float)):
            return str(v)
        return v


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    sku: str
    price: float
    quantity: int
    created_at: datetime
    updated_at: datetime


class ProductResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: ProductOut


class ProductListResponse(BaseModel):
    success: bool = True
    data: List[ProductOut]
