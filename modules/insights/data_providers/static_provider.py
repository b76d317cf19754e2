"""
Static record provider implementation.

Serves in-memory collections; used for tests, demos and defaults.
Self-registers with RecordProviderRegistry.
"""

import copy
import uuid
from typing import Dict, Any, List

from modules.insights.core.exceptions import RecordProviderException
from modules.insights.core.interfaces import IRecordProvider
from modules.insights.core.registry import register_record_provider
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


@register_record_provider("static")
class StaticRecordProvider(IRecordProvider):
    """
    Static record provider.

    Config:
        {"users": {"<user_id>": {"<collection>": [record, ...]}}}

    Unknown users and collections yield empty lists.
    """

    def __init__(self, config: Dict[str, Any]):
        """Initialize static record provider."""
        super().__init__(config)
        self.users: Dict[str, Dict[str, List[Dict[str, Any]]]] = copy.deepcopy(config.get("users", {}))
        logger.info(f"Initialized StaticRecordProvider with {len(self.users)} users")

    async def fetch_collection(
        self,
        collection: str,
        user_id: str
    ) -> List[Dict[str, Any]]:
        """
        Fetch a user's records from memory.

        Returns:
            Copies of the stored records
        """
        if not user_id:
            raise RecordProviderException("user_id is required")

        records = self.users.get(user_id, {}).get(collection, [])
        logger.debug(f"Fetched {len(records)} {collection} records for {user_id}")
        return copy.deepcopy(records)

    async def save_record(
        self,
        collection: str,
        record: Dict[str, Any]
    ) -> str:
        """Store a record under its userId."""
        user_id = record.get("userId")
        if not user_id:
            raise RecordProviderException("Record must carry a userId")

        record_id = record.get("id") or str(uuid.uuid4())
        stored = {**copy.deepcopy(record), "id": record_id}
        self.users.setdefault(user_id, {}).setdefault(collection, []).append(stored)

        logger.info(f"Saved {collection} record {record_id} for {user_id}")
        return record_id

    async def health_check(self) -> bool:
        """Check if provider is healthy (always true for static)."""
        return True
