"""
Account and PIX key Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pixledger.app.models.enums import AccountType, PixKeyType


class PixKeyCreate(BaseModel):
    """Schema for registering a PIX key. The type is inferred when omitted."""
    key: str = Field(..., min_length=1, max_length=255, description="PIX key (email, phone, document, random...)")
    type: Optional[PixKeyType] = Field(default=None, description="Key type (descriptive only)")


class PixKeyResponse(BaseModel):
    id: int
    key: str
    type: PixKeyType
    created_at: datetime

    class Config:
        from_attributes = True


class AccountUpdate(BaseModel):
    """
    Schema for updating the caller's own account.

    Balance is not part of this schema: it only changes through the ledger.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    configuration: Optional[Dict[str, Any]] = None
    agent: Optional[Dict[str, Any]] = None


class ScoreUpdate(BaseModel):
    """Schema for the admin score adjustment."""
    score: int = Field(..., ge=0, le=1000, description="Credit score (0-1000)")


class AccountResponse(BaseModel):
    """Schema for account information response."""
    id: int
    type: AccountType
    name: str
    email: str
    balance: Decimal
    score: int
    configuration: Dict[str, Any]
    agent: Dict[str, Any] = Field(default_factory=dict)
    pix_keys: List[PixKeyResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountSummaryResponse(BaseModel):
    """Public view of an account, as seen when resolving a PIX key."""
    id: int
    name: str
    pix_key: str
    pix_key_type: PixKeyType
