"""Request/response schemas and records for accounts and tokens."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_email(email: str) -> str:
    """Trim and lowercase; emails are unique in this form."""
    return email.strip().lower()


def email_local_part(email: str) -> str:
    local, sep, _ = email.partition("@")
    return local if sep and local else email


class Claims(BaseModel):
    """Authenticated identity carried by an access token."""

    model_config = ConfigDict(frozen=True)

    subject: str
    roles: frozenset[str]
    issued_at: datetime
    expires_at: datetime


class AccountDraft(BaseModel):
    """Input to AccountStore.create; the password is already hashed."""

    email: str
    password_hash: str
    username: str | None = None
    roles: list[str] = Field(default_factory=list)


class Account(BaseModel):
    """Stored user account. password_hash is never serialized in responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str
    password_hash: str = Field(exclude=True)
    roles: list[str]
    created_at: datetime
    updated_at: datetime


class RegisterRequest(BaseModel):
    """Body of POST /auth/register."""

    email: str = Field(..., max_length=255, description="Email, unique case-insensitively")
    password: str = Field(..., min_length=8, max_length=128, description="Password")
    username: str | None = Field(default=None, max_length=255, description="Defaults to the email local part")
    roles: list[str] | None = Field(default=None, description="Defaults to ['editor']")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = normalize_email(v)
        local, sep, domain = v.partition("@")
        if not (local and sep and domain):
            raise ValueError("email must look like name@domain")
        return v

    @field_validator("roles")
    @classmethod
    def validate_roles(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        roles = [r.strip() for r in v]
        if any(not r for r in roles):
            raise ValueError("roles must be non-empty names")
        return roles


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class RegisterResponse(BaseModel):
    status: Literal["success"] = "success"
    data: RegisterData


class TokenData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken", description="JWT access token")
    token_type: str = Field(default="bearer", alias="tokenType", description="Token type")


class TokenResponse(BaseModel):
    """Access token returned after successful login."""

    status: Literal["success"] = "success"
    data: TokenData
