"""
Account API endpoints.

Profile management, PIX key management, PIX key lookup and the admin views.
Balances are read-only here: they only move through transfers and ledger
entries.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from pixledger.app.db.session import get_db
from pixledger.app.schemas.account import (
    AccountResponse,
    AccountSummaryResponse,
    AccountUpdate,
    PixKeyCreate,
    PixKeyResponse,
    ScoreUpdate,
)
from pixledger.app.core.dependencies import get_current_user, get_agent_profiles
from pixledger.app.core.exceptions import PixKeyNotFoundError, ResourceNotFoundError
from pixledger.app.core.guards import require_admin, ownership_guard
from pixledger.app.core.redis_client import get_redis
from pixledger.app.core.security import get_password_hash
from pixledger.app.core.token_revocation import revoke_all_account_tokens
from pixledger.app.models.account import Account
from pixledger.app.services.account_store import AccountStore
from pixledger.app.services.agent_profiles import AgentProfileStore
from pixledger.app.services.audit import log_event, AuditAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["Accounts"])


async def _render(account: Account, agent_profiles: AgentProfileStore) -> AccountResponse:
    response = AccountResponse.model_validate(account)
    response.agent = await agent_profiles.get(account.agent_document_id)
    return response


async def _load_own_account(db: AsyncSession, current_user: dict) -> Account:
    account = await AccountStore(db).find_by_id(current_user["account_id"])
    if account is None:
        raise ResourceNotFoundError("Account", current_user["account_id"])
    return account


# Admin

@router.get("", response_model=List[AccountResponse])
async def list_accounts(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """List every account (admin only)."""
    accounts = await AccountStore(db).list_all()
    return [await _render(account, agent_profiles) for account in accounts]


@router.patch("/{account_id}/score", response_model=AccountResponse)
async def update_score(
    account_id: int,
    score_data: ScoreUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """Set an account's credit score (admin only)."""
    store = AccountStore(db)
    account = await store.find_by_id(account_id)
    if account is None:
        raise ResourceNotFoundError("Account", account_id)

    old_score = account.score
    await store.update_profile(account, score=score_data.score)
    await log_event(
        db,
        AuditAction.SCORE_CHANGED,
        actor_id=admin["account_id"],
        actor_email=admin.get("sub"),
        target_account_id=account.id,
        metadata={"old_score": old_score, "new_score": score_data.score},
    )
    await db.commit()
    return await _render(account, agent_profiles)


# Own account

@router.patch("/me", response_model=AccountResponse)
async def update_my_account(
    update_data: AccountUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """
    Update the caller's profile.

    `agent` replaces the whole agent document; a new document is created if
    the account had none.
    """
    store = AccountStore(db)
    account = await _load_own_account(db, current_user)

    new_document_id = None
    if update_data.agent is not None:
        document_id = await agent_profiles.save(update_data.agent, account.agent_document_id)
        if document_id != account.agent_document_id:
            new_document_id = document_id
        account.agent_document_id = document_id

    try:
        await store.update_profile(
            account,
            name=update_data.name,
            email=update_data.email,
            password_hash=get_password_hash(update_data.password) if update_data.password else None,
            configuration=update_data.configuration,
        )
        await log_event(
            db,
            AuditAction.ACCOUNT_UPDATED,
            actor_id=account.id,
            actor_email=account.email,
            target_account_id=account.id,
            metadata={"fields": sorted(update_data.model_dump(exclude_unset=True, exclude={"password"}).keys())},
        )
        await db.commit()
    except Exception:
        # No committed account points at a document created by this request
        await agent_profiles.delete(new_document_id)
        raise
    return await _render(account, agent_profiles)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_account(
    request: Request,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """
    Delete the caller's account.

    PIX keys, ledger entries and expenses are deleted with it, every token of
    the account is revoked, and the agent document is removed.
    """
    account_id = current_user["account_id"]

    # No transfer may be mid-flight on this account while it disappears
    async with request.app.state.account_locks.acquire(account_id):
        store = AccountStore(db)
        account = await _load_own_account(db, current_user)
        agent_document_id = account.agent_document_id
        email = account.email

        await store.delete(account)
        await log_event(
            db,
            AuditAction.ACCOUNT_DELETED,
            actor_id=account_id,
            actor_email=email,
            target_account_id=account_id,
        )
        await db.commit()

    await agent_profiles.delete(agent_document_id)
    await revoke_all_account_tokens(redis_client, account_id)
    logger.info("Account %s deleted", account_id)


# PIX keys

@router.get("/me/pix-keys", response_model=List[PixKeyResponse])
async def list_my_pix_keys(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await AccountStore(db).list_pix_keys(current_user["account_id"])


@router.post("/me/pix-keys", response_model=PixKeyResponse, status_code=status.HTTP_201_CREATED)
async def add_my_pix_key(
    key_data: PixKeyCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Register a PIX key on the caller's account.

    A key already registered anywhere (this account included) is a 409.
    """
    pix_key = await AccountStore(db).add_pix_key(current_user["account_id"], key_data.key, key_data.type)
    await log_event(
        db,
        AuditAction.PIX_KEY_ADDED,
        actor_id=current_user["account_id"],
        actor_email=current_user.get("sub"),
        target_account_id=current_user["account_id"],
        metadata={"key": pix_key.key, "type": pix_key.type.value},
    )
    await db.commit()
    return pix_key


@router.delete("/me/pix-keys/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_my_pix_key(
    key: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    removed = await AccountStore(db).remove_pix_key(current_user["account_id"], key)
    if not removed:
        raise PixKeyNotFoundError(key)

    await log_event(
        db,
        AuditAction.PIX_KEY_REMOVED,
        actor_id=current_user["account_id"],
        actor_email=current_user.get("sub"),
        target_account_id=current_user["account_id"],
        metadata={"key": key},
    )
    await db.commit()


@router.get("/pix/{key}", response_model=AccountSummaryResponse)
async def resolve_pix_key(
    key: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Resolve a PIX key to the name of its owner, so a payer can confirm the
    recipient before transferring. Balances and emails are not exposed.
    """
    store = AccountStore(db)
    pix_key = await store.find_pix_key(key)
    account = await store.find_by_id(pix_key.account_id) if pix_key else None
    if account is None:
        raise PixKeyNotFoundError(key)

    return AccountSummaryResponse(
        id=account.id,
        name=account.name,
        pix_key=pix_key.key,
        pix_key_type=pix_key.type,
    )


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    agent_profiles: AgentProfileStore = Depends(get_agent_profiles)
):
    """Get one account. Only the owner or an admin may read it."""
    ownership_guard.enforce(account_id, current_user, "account")

    account = await AccountStore(db).find_by_id(account_id)
    if account is None:
        raise ResourceNotFoundError("Account", account_id)
    return await _render(account, agent_profiles)
