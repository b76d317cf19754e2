"""
Record providers for insights generation.

Importing this package registers every bundled provider.
"""

from modules.insights.core.registry import RecordProviderRegistry
from modules.insights.core.interfaces import IRecordProvider
from modules.insights.data_providers.static_provider import StaticRecordProvider
from modules.insights.data_providers.json_file_provider import JsonFileRecordProvider


def get_record_provider(name: str, config: dict = None) -> IRecordProvider:
    """
    Build a registered record provider.

    Args:
        name: Provider name ("static", "json_file")
        config: Provider configuration

    Returns:
        IRecordProvider instance
    """
    return RecordProviderRegistry.get(name, config or {})


__all__ = [
    "StaticRecordProvider",
    "JsonFileRecordProvider",
    "get_record_provider",
]
