"""
Core components for insights module.
"""

from modules.insights.core.interfaces import (
    IRecordProvider,
    RECORD_COLLECTIONS,
    ACADEMIC_COLLECTION,
    EXTRACURRICULAR_COLLECTION,
    SPORTS_COLLECTION,
    JOURNAL_COLLECTION,
    GOALS_COLLECTION,
    FEEDBACK_COLLECTION,
    PROFILE_COLLECTION,
)

from modules.insights.core.registry import (
    RecordProviderRegistry,
    register_record_provider,
)

from modules.insights.core.exceptions import (
    InsightsException,
    UpstreamFetchException,
    RecordProviderException,
    RuleConfigurationException,
)

__all__ = [
    # Interfaces
    "IRecordProvider",
    "RECORD_COLLECTIONS",
    "ACADEMIC_COLLECTION",
    "EXTRACURRICULAR_COLLECTION",
    "SPORTS_COLLECTION",
    "JOURNAL_COLLECTION",
    "GOALS_COLLECTION",
    "FEEDBACK_COLLECTION",
    "PROFILE_COLLECTION",
    # Registry
    "RecordProviderRegistry",
    "register_record_provider",
    # Exceptions
    "InsightsException",
    "UpstreamFetchException",
    "RecordProviderException",
    "RuleConfigurationException",
]
