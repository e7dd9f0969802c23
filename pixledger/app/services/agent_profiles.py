"""
Agent profile store.

Free-form "agent" attributes live in Redis as JSON documents, outside the
relational schema. Accounts only keep the document id, so the reference may
dangle: a missing or unreadable document reads as an empty profile.
"""

import json
import logging
import uuid
from typing import Any, Dict, Optional

from pixledger.app.core.exceptions import AgentProfileUnavailableError

logger = logging.getLogger(__name__)

AGENT_PROFILE_PREFIX = "agent:profile:"


def _key(document_id: str) -> str:
    return f"{AGENT_PROFILE_PREFIX}{document_id}"


class AgentProfileStore:

    def __init__(self, redis_client):
        self.redis = redis_client

    async def get(self, document_id: Optional[str]) -> Dict[str, Any]:
        """
        Load the attributes stored under `document_id`.

        Returns an empty dict when there is no id, no document, a corrupt
        payload or no reachable Redis.
        """
        if not document_id:
            return {}

        try:
            raw = await self.redis.get(_key(document_id))
        except Exception as exc:
            logger.warning("Agent profile %s unavailable: %s", document_id, exc)
            return {}

        if raw is None:
            return {}
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")

        try:
            attributes = json.loads(raw)
        except ValueError:
            logger.warning("Agent profile %s is not valid JSON, ignoring", document_id)
            return {}

        if not isinstance(attributes, dict):
            logger.warning("Agent profile %s is not a JSON object, ignoring", document_id)
            return {}
        return attributes

    async def save(self, attributes: Dict[str, Any], document_id: Optional[str] = None) -> str:
        """
        Store `attributes`, replacing any previous document with the same id.

        Returns:
            The document id (newly generated when none was given)

        Raises:
            AgentProfileUnavailableError: Redis rejected or could not take the write
        """
        document_id = document_id or uuid.uuid4().hex
        try:
            await self.redis.set(_key(document_id), json.dumps(attributes, default=str))
        except Exception as exc:
            logger.error("Could not save agent profile %s: %s", document_id, exc)
            raise AgentProfileUnavailableError(exc) from exc
        return document_id

    async def delete(self, document_id: Optional[str]) -> bool:
        """Delete a document. Errors are logged, never raised."""
        if not document_id:
            return False
        try:
            return bool(await self.redis.delete(_key(document_id)))
        except Exception as exc:
            logger.warning("Could not delete agent profile %s: %s", document_id, exc)
            return False
