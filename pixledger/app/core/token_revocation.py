"""
Token Revocation System using Redis.

Implements token blacklisting so a logged-out JWT stops working immediately,
and a per-account flag that invalidates every token of a deleted account.
"""

import logging

from pixledger.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
ACCOUNT_TOKENS_PREFIX = "account:tokens:"


def _ttl_seconds() -> int:
    # Tokens expire on their own after this, so the blacklist entry can too
    return settings.access_token_expire_minutes * 60


async def revoke_token(redis_client, token: str, account_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        redis_client: Async Redis client
        token: The JWT token string to revoke
        account_id: Account that owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_client.setex(key, _ttl_seconds(), str(account_id))
        return True
    except Exception as e:
        logger.error("Error revoking token for account %s: %s", account_id, e)
        return False


async def is_token_revoked(redis_client, token: str) -> bool:
    """
    Check if a token has been revoked.

    Fails open: if Redis is unreachable the token is treated as valid.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_client.exists(key)
        return exists > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        return False


async def revoke_all_account_tokens(redis_client, account_id: int) -> bool:
    """
    Revoke all active tokens for an account.

    Called when an account is deleted to terminate every session at once.
    """
    try:
        key = f"{ACCOUNT_TOKENS_PREFIX}{account_id}:revoked"
        await redis_client.setex(key, _ttl_seconds(), "1")
        return True
    except Exception as e:
        logger.error("Error revoking all tokens for account %s: %s", account_id, e)
        return False


async def are_account_tokens_revoked(redis_client, account_id: int) -> bool:
    """Check if all tokens for an account have been revoked."""
    try:
        key = f"{ACCOUNT_TOKENS_PREFIX}{account_id}:revoked"
        exists = await redis_client.exists(key)
        return exists > 0
    except Exception as e:
        logger.warning("Error checking account token revocation: %s", e)
        return False
