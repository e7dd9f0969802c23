"""
Authentication API endpoints.

Provides register, login, logout and account info endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from pixledger.app.db.session import get_db
from pixledger.app.models.enums import AccountType
from pixledger.app.schemas.auth import AccountRegister, AccountLogin, TokenResponse
from pixledger.app.schemas.account import AccountResponse
from pixledger.app.core.security import get_password_hash, verify_password
from pixledger.app.core.jwt import create_access_token
from pixledger.app.core.dependencies import get_current_user, get_agent_profiles
from pixledger.app.core.redis_client import get_redis
from pixledger.app.core.token_revocation import revoke_token
from pixledger.app.services.account_store import AccountStore
from pixledger.app.services.agent_profiles import AgentProfileStore
from pixledger.app.services.audit import log_event, log_auth_event, AuditAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(account) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(account.id, account.email, account.type),
        token_type="bearer",
        account_id=account.id,
        email=account.email,
        role=account.type,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    account_data: AccountRegister,
    db: AsyncSession = Depends(get_db),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """
    Register a new account.

    Accounts created through the API are always NORMAL with a zero balance.
    Agent attributes, when given, go to the agent profile store and only the
    document id is kept on the account.
    """
    agent_document_id = None
    if account_data.agent:
        agent_document_id = await agent_profiles.save(account_data.agent)

    try:
        account = await AccountStore(db).create(
            name=account_data.name,
            email=account_data.email,
            password_hash=get_password_hash(account_data.password),
            account_type=AccountType.NORMAL,
            configuration=account_data.configuration,
            agent_document_id=agent_document_id,
        )
        await log_event(
            db,
            AuditAction.ACCOUNT_CREATED,
            actor_id=account.id,
            actor_email=account.email,
            target_account_id=account.id,
        )
        await db.commit()
    except Exception:
        await agent_profiles.delete(agent_document_id)
        raise

    logger.info("Account %s registered", account.id)
    return _issue_token(account)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: AccountLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login and return a JWT token.

    Logs successful and failed login attempts for security monitoring.
    """
    ip_address = request.client.host if request.client else None
    account = await AccountStore(db).find_by_email(credentials.email)

    if account is None or not verify_password(credentials.password, account.password_hash):
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            account_id=account.id if account else None,
            email=credentials.email,
            ip_address=ip_address,
            metadata={"reason": "Account not found" if account is None else "Invalid password"}
        )
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    await log_auth_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        account_id=account.id,
        email=account.email,
        ip_address=ip_address
    )
    await db.commit()

    return _issue_token(account)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis)
):
    """Revoke the token used for this request."""
    await revoke_token(redis_client, current_user["token"], current_user["account_id"])
    await log_auth_event(
        db=db,
        action=AuditAction.LOGOUT,
        account_id=current_user["account_id"],
        email=current_user.get("sub")
    )
    await db.commit()


@router.get("/me", response_model=AccountResponse)
async def get_current_account_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """
    Get the authenticated account, including PIX keys and agent attributes.
    """
    account = await AccountStore(db).find_by_id(current_user["account_id"])
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found"
        )

    response = AccountResponse.model_validate(account)
    response.agent = await agent_profiles.get(account.agent_document_id)
    return response
