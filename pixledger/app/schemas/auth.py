"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, Optional
from pixledger.app.models.enums import AccountType


class AccountRegister(BaseModel):
    """
    Schema for account registration.

    Used by POST /auth/register endpoint. New accounts are always NORMAL and
    start with a zero balance; money only arrives through the ledger.
    """
    name: str = Field(..., min_length=1, max_length=255, description="Account holder name")
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=6, max_length=72, description="Password (6-72 characters)")
    configuration: Dict[str, Any] = Field(default_factory=dict, description="Free-form account settings")
    agent: Optional[Dict[str, Any]] = Field(default=None, description="Free-form agent attributes")


class AccountLogin(BaseModel):
    """
    Schema for account login.

    Used by POST /auth/login endpoint.
    """
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.

    Returned by successful login/register operations.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    account_id: int = Field(..., description="Account ID")
    email: str = Field(..., description="Email address")
    role: AccountType = Field(..., description="Account type")
