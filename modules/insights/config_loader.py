"""
Insights Configuration Loader.

Loads suggestion, forecast and action-plan rule definitions from YAML into
an immutable RuleSet. Rules are data, maintained outside the code.
"""

import yaml
from typing import Dict, Any, List, Optional
from pathlib import Path
from pydantic import ValidationError

from modules.insights.core.exceptions import RuleConfigurationException
from modules.insights.core.types import RuleSet
from shared.utils.config import settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# rule file -> top-level key inside the file and RuleSet field
RULE_FILES = {
    "suggestions.yaml": "suggestions",
    "forecasts.yaml": "forecasts",
    "action_plans.yaml": "action_plans",
}


class InsightsConfigLoader:
    """
    Loads rule configuration for insights generation.

    The rules directory holds:
    - suggestions.yaml: Suggestion rules (one condition each, union)
    - forecasts.yaml: Forecast rules (condition lists, first match)
    - action_plans.yaml: Action plan rules (tiered, deduplicated)
    """

    def __init__(self, config_base_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_base_path: Rules directory (defaults to INSIGHTS_RULES_PATH,
                then config/insights/rules/)
        """
        if config_base_path is None and settings.INSIGHTS_RULES_PATH:
            config_base_path = Path(settings.INSIGHTS_RULES_PATH)

        if config_base_path is None:
            # Default: config/insights/rules/
            project_root = Path(__file__).parent.parent.parent
            config_base_path = project_root / "config" / "insights" / "rules"

        self.config_base_path = Path(config_base_path)

        # Cached configs
        self._raw_configs: Dict[str, Dict[str, Any]] = {}
        self._rule_set: Optional[RuleSet] = None

    def load_rule_file(self, file_name: str) -> Dict[str, Any]:
        """
        Load one rule file.

        Args:
            file_name: File name inside the rules directory

        Returns:
            Parsed YAML mapping

        Raises:
            FileNotFoundError: If config file doesn't exist
            RuleConfigurationException: If the file is not valid YAML
        """
        if file_name in self._raw_configs:
            return self._raw_configs[file_name]

        config_path = self.config_base_path / file_name

        if not config_path.exists():
            raise FileNotFoundError(
                f"Rule config not found: {config_path}. "
                f"Create {file_name} in {self.config_base_path}"
            )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse rule config {file_name}: {e}")
            raise RuleConfigurationException(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise RuleConfigurationException(
                f"Rule config {config_path} must be a mapping, got {type(config).__name__}"
            )

        self._raw_configs[file_name] = config
        logger.info(f"Loaded rule config: {file_name}")
        return config

    def load_rule_set(self) -> RuleSet:
        """
        Load all rule files into an immutable RuleSet.

        Returns:
            RuleSet with suggestions, forecasts and action plans

        Raises:
            FileNotFoundError: If a rule file is missing
            RuleConfigurationException: If a rule definition is malformed
        """
        if self._rule_set is not None:
            return self._rule_set

        rules: Dict[str, List[Any]] = {}
        versions = []

        for file_name, key in RULE_FILES.items():
            config = self.load_rule_file(file_name)
            rules[key] = config.get(key) or []
            if config.get("version") is not None:
                versions.append(str(config["version"]))

        try:
            self._rule_set = RuleSet(
                version=versions[0] if versions else None,
                **rules
            )
        except ValidationError as e:
            logger.error(f"Invalid rule definitions in {self.config_base_path}: {e.error_count()} errors")
            raise RuleConfigurationException(f"Invalid rule definitions: {e}") from e

        logger.info(
            f"Loaded rule set v{self._rule_set.version}: "
            f"{len(self._rule_set.suggestions)} suggestions, "
            f"{len(self._rule_set.forecasts)} forecasts, "
            f"{len(self._rule_set.action_plans)} action plans"
        )
        return self._rule_set

    def reload(self):
        """Clear cached configs and force reload."""
        self._raw_configs = {}
        self._rule_set = None


def load_rule_set(config_base_path: Optional[Path] = None) -> RuleSet:
    """
    Convenience function to load the rule set.

    Args:
        config_base_path: Optional rules directory

    Returns:
        Immutable RuleSet

    Example:
        >>> rule_set = load_rule_set()
        >>> len(rule_set.forecasts) > 0
        True
    """
    loader = InsightsConfigLoader(config_base_path)
    return loader.load_rule_set()
