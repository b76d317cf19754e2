"""
Core interfaces for the insights module.

The record store is an external collaborator; the engine only talks to it
through IRecordProvider.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List


# ==============================================================================
# COLLECTION NAMES
# ==============================================================================

ACADEMIC_COLLECTION = "academicRecords"
EXTRACURRICULAR_COLLECTION = "extracurricular"
SPORTS_COLLECTION = "sportsRecords"
JOURNAL_COLLECTION = "journals"
GOALS_COLLECTION = "goals"
FEEDBACK_COLLECTION = "feedback"
PROFILE_COLLECTION = "profiles"

RECORD_COLLECTIONS = (
    ACADEMIC_COLLECTION,
    EXTRACURRICULAR_COLLECTION,
    SPORTS_COLLECTION,
    JOURNAL_COLLECTION,
    GOALS_COLLECTION,
    FEEDBACK_COLLECTION,
    PROFILE_COLLECTION,
)


# ==============================================================================
# RECORD PROVIDER INTERFACE
# ==============================================================================

class IRecordProvider(ABC):
    """
    Abstract interface for record providers.

    Record providers fetch one student's raw records per collection from:
    - Cloud document stores
    - JSON exports
    - Static data

    Providers self-register with the RecordProviderRegistry.

    Example:
        @register_record_provider("static")
        class StaticRecordProvider(IRecordProvider):
            async def fetch_collection(self, collection, user_id):
                # Implementation
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize record provider with configuration.

        Args:
            config: Provider configuration
        """
        self.config = config
        self.provider_name = config.get('name', self.__class__.__name__)

    @abstractmethod
    async def fetch_collection(
        self,
        collection: str,
        user_id: str
    ) -> List[Dict[str, Any]]:
        """
        Fetch all records of one collection belonging to a user.

        Args:
            collection: Collection name (see RECORD_COLLECTIONS)
            user_id: Student/user identifier

        Returns:
            List of loosely-typed records

        Raises:
            RecordProviderException: If fetch fails
        """
        pass

    @abstractmethod
    async def save_record(
        self,
        collection: str,
        record: Dict[str, Any]
    ) -> str:
        """
        Persist a new record.

        Args:
            collection: Collection name
            record: Record to store

        Returns:
            Identifier assigned to the record

        Raises:
            RecordProviderException: If the write fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if provider is healthy and accessible.

        Returns:
            True if healthy, False otherwise
        """
        pass
