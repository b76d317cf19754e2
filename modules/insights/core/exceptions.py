"""
Custom exceptions for insights module.
"""


class InsightsException(Exception):
    """Base exception for insights module."""
    pass


class UpstreamFetchException(InsightsException):
    """Exception raised when student records cannot be fetched."""
    pass


class RecordProviderException(UpstreamFetchException):
    """Exception raised by record providers."""
    pass


class RuleConfigurationException(InsightsException):
    """Exception raised for malformed rule configuration."""
    pass
