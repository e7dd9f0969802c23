"""
Access tokens.

A token names one account: `sub` is the login email, `account_id` the
trusted sender identity used by transfers, and `role` the account type at
issue time (refreshed from the database on every request).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from pixledger.app.core.config import settings
from pixledger.app.models.enums import AccountType


def create_access_token(
    account_id: int,
    email: str,
    role: AccountType,
    expires_delta: Optional[timedelta] = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": email,
        "account_id": account_id,
        "role": AccountType(role).value,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify signature and expiry and return the claims.

    Returns None for a bad or expired token, and for a token that does not
    carry an integer `account_id`, so callers never see a half-valid payload.
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    account_id = claims.get("account_id")
    if isinstance(account_id, bool) or not isinstance(account_id, int):
        return None
    return claims
