"""
Student Insights Module.

Config-driven, rule-based insight reports for a student's record
collections: academic, extracurricular, sports, journal, goals, feedback
and profile.

Quick Start:
    >>> from modules.insights import InsightsService, get_record_provider
    >>> provider = get_record_provider("static", {"users": {"user-123": {...}}})
    >>> service = InsightsService(provider)
    >>> report = await service.generate_insights("user-123")
    >>> print(report.child_snapshot.growth_score)
    87

Architecture:
    - Config-driven: Suggestion, forecast and action-plan rules in YAML
    - Rule-based: Fast, deterministic, no LLM dependency
    - Pure core: compose_insights() works on already-fetched collections
    - Pluggable storage: Record providers registered by name

Components:
    - InsightsService: Main service (public API)
    - compose_insights: Pure report composition
    - InsightsConfigLoader: Loads the rule set
    - RuleEngine: Evaluates rules against a metric snapshot
"""

from modules.insights.insights_service import InsightsService, compose_insights
from modules.insights.config_loader import InsightsConfigLoader, load_rule_set
from modules.insights.rule_engine import RuleEngine
from modules.insights.data_providers import get_record_provider

__all__ = [
    "InsightsService",
    "compose_insights",
    "InsightsConfigLoader",
    "load_rule_set",
    "RuleEngine",
    "get_record_provider",
]

__version__ = "1.0.0"
