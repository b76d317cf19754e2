"""
Registry for record providers.

Providers self-register with @register_record_provider.
"""

from typing import Dict, Callable, Any, List
from modules.insights.core.interfaces import IRecordProvider
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


class RecordProviderRegistry:
    """
    Registry for record providers.

    Record providers self-register using @register_record_provider decorator.
    """

    _REGISTRY: Dict[str, Callable[[dict], IRecordProvider]] = {}

    @classmethod
    def register(
        cls,
        name: str,
        factory_func: Callable[[dict], IRecordProvider]
    ) -> None:
        """Register a record provider factory function"""
        if name in cls._REGISTRY:
            logger.warning(f"Record provider '{name}' already registered, overwriting")

        cls._REGISTRY[name] = factory_func
        logger.debug(f"Registered record provider: {name}")

    @classmethod
    def get(cls, name: str, config: Dict[str, Any]) -> IRecordProvider:
        """
        Get record provider instance from registry.

        Args:
            name: Provider name
            config: Provider configuration

        Returns:
            IRecordProvider instance

        Raises:
            ValueError: If provider not registered
        """
        factory_func = cls._REGISTRY.get(name)

        if not factory_func:
            available = list(cls._REGISTRY.keys())
            raise ValueError(
                f"Record provider '{name}' not registered. "
                f"Available: {available}. "
                f"Make sure the provider module has been imported."
            )

        logger.debug(f"Creating record provider instance: {name}")
        return factory_func(config)

    @classmethod
    def list_providers(cls) -> List[str]:
        """Get list of registered record providers"""
        return list(cls._REGISTRY.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if record provider is registered"""
        return name in cls._REGISTRY


def register_record_provider(name: str):
    """
    Decorator to register a record provider.

    Usage:
        @register_record_provider("static")
        class StaticRecordProvider(IRecordProvider):
            async def fetch_collection(self, collection, user_id):
                # Implementation
    """
    def decorator(cls):
        def factory(config):
            return cls(config)
        RecordProviderRegistry.register(name, factory)
        return cls
    return decorator
