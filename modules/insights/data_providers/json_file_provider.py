"""
JSON file record provider implementation.

Reads per-user JSON exports: <export_dir>/<user_id>.json holding
{"<collection>": [record, ...], ...}.
Self-registers with RecordProviderRegistry.
"""

import json
import uuid
from pathlib import Path
from typing import Dict, Any, List

from modules.insights.core.exceptions import RecordProviderException
from modules.insights.core.interfaces import IRecordProvider
from modules.insights.core.registry import register_record_provider
from shared.utils.config import settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


@register_record_provider("json_file")
class JsonFileRecordProvider(IRecordProvider):
    """
    Record provider backed by JSON export files.

    Config:
        {"export_dir": "data/exports"}  # defaults to INSIGHTS_EXPORT_DIR
    """

    def __init__(self, config: Dict[str, Any]):
        """Initialize JSON file record provider."""
        super().__init__(config)
        self.export_dir = Path(config.get("export_dir") or settings.INSIGHTS_EXPORT_DIR)
        logger.info(f"Initialized JsonFileRecordProvider at {self.export_dir}")

    def _export_path(self, user_id: str) -> Path:
        if not user_id or "/" in user_id or "\\" in user_id or user_id.startswith("."):
            raise RecordProviderException(f"Invalid user_id: {user_id!r}")
        return self.export_dir / f"{user_id}.json"

    def _read_export(self, user_id: str) -> Dict[str, Any]:
        export_path = self._export_path(user_id)

        if not export_path.exists():
            raise RecordProviderException(f"No export found for user {user_id}: {export_path}")

        try:
            with open(export_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordProviderException(f"Failed to read export {export_path}: {e}") from e

        if not isinstance(data, dict):
            raise RecordProviderException(f"Export {export_path} must be a JSON object")

        return data

    async def fetch_collection(
        self,
        collection: str,
        user_id: str
    ) -> List[Dict[str, Any]]:
        """
        Fetch one collection from the user's export file.

        Raises:
            RecordProviderException: If the export is missing or malformed
        """
        records = self._read_export(user_id).get(collection, [])

        if not isinstance(records, list):
            raise RecordProviderException(f"Collection {collection} for {user_id} is not a list")

        logger.debug(f"Read {len(records)} {collection} records for {user_id}")
        return records

    async def save_record(
        self,
        collection: str,
        record: Dict[str, Any]
    ) -> str:
        """Append a record to the user's export file, creating it if needed."""
        user_id = record.get("userId")
        if not user_id:
            raise RecordProviderException("Record must carry a userId")

        export_path = self._export_path(user_id)
        data = self._read_export(user_id) if export_path.exists() else {}

        record_id = record.get("id") or str(uuid.uuid4())
        data.setdefault(collection, []).append({**record, "id": record_id})

        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            with open(export_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, default=str)
        except OSError as e:
            raise RecordProviderException(f"Failed to write export {export_path}: {e}") from e

        logger.info(f"Saved {collection} record {record_id} for {user_id}")
        return record_id

    async def health_check(self) -> bool:
        """Check that the export directory is readable."""
        return self.export_dir.is_dir()
