"""
Authentication and service dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT
authentication and for building the domain services from `app.state`.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from pixledger.app.core.jwt import decode_access_token
from pixledger.app.core.token_revocation import is_token_revoked, are_account_tokens_revoked
from pixledger.app.db.session import get_db, get_database
from pixledger.app.domain.ledger.ledger_service import LedgerService
from pixledger.app.domain.transfers.transfer_engine import TransferEngine
from pixledger.app.models.account import Account
from pixledger.app.services.agent_profiles import AgentProfileStore

# HTTP Bearer security scheme
security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Security checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been explicitly revoked (logout)
    3. Checks if all account tokens have been revoked (account deleted)
    4. Verifies the account still exists (real-time check)

    The returned payload carries the account type read from the database,
    so a role change applies without a new token.

    Raises:
        HTTPException: 401 if authentication fails for any reason
    """
    token = credentials.credentials
    redis_client = request.app.state.redis

    # 1. Decode and validate JWT (signature, expiry, account_id claim)
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    account_id = payload["account_id"]

    # 2. Check if this specific token has been revoked
    if await is_token_revoked(redis_client, token):
        raise _unauthorized("Token has been revoked")

    # 3. Check if all account tokens have been revoked
    if await are_account_tokens_revoked(redis_client, account_id):
        raise _unauthorized("Account access has been revoked")

    # 4. Real-time database check
    account = await db.get(Account, account_id)
    if account is None:
        raise _unauthorized("Account not found")

    payload["role"] = account.type.value
    payload["token"] = token
    request.state.account_id = account_id
    return payload


def get_transfer_engine(request: Request) -> TransferEngine:
    return TransferEngine(get_database(request), request.app.state.account_locks)


def get_ledger_service(request: Request) -> LedgerService:
    return LedgerService(get_database(request), request.app.state.account_locks)


def get_agent_profiles(request: Request) -> AgentProfileStore:
    return AgentProfileStore(request.app.state.redis)
