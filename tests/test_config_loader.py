"""
Tests for loading rule definitions from YAML.
"""

import sys
from pathlib import Path

import pytest
import yaml

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from modules.insights.config_loader import InsightsConfigLoader, load_rule_set
from modules.insights.core.exceptions import RuleConfigurationException
from modules.insights.core.types import RuleSet


DEFAULT_RULES_DIR = project_root / "config" / "insights" / "rules"


def write_rules(directory: Path, suggestions=None, forecasts=None, action_plans=None):
    """Write a minimal, valid rule directory; overrides replace single files."""
    files = {
        "suggestions.yaml": suggestions if suggestions is not None else {
            "version": "2.0",
            "suggestions": [
                {"id": "s1", "trigger": {"condition": "journalCount", "minCount": 1}, "content": "Journal"},
            ],
        },
        "forecasts.yaml": forecasts if forecasts is not None else {
            "forecasts": [
                {"id": "f1", "trigger": [{"condition": "journalCount", "minCount": 1}], "content": "Forecast"},
            ],
        },
        "action_plans.yaml": action_plans if action_plans is not None else {
            "action_plans": [
                {"id": "p1", "trigger": [], "shortTerm": ["Step"]},
            ],
        },
    }

    for file_name, content in files.items():
        path = directory / file_name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(content), encoding="utf-8")


def test_bundled_rules_load():
    rule_set = load_rule_set(DEFAULT_RULES_DIR)

    assert isinstance(rule_set, RuleSet)
    assert rule_set.version == "1.0"
    assert len(rule_set.suggestions) > 0
    assert len(rule_set.forecasts) > 0
    assert len(rule_set.action_plans) > 0


def test_bundled_rule_ids_are_unique():
    rule_set = load_rule_set(DEFAULT_RULES_DIR)

    for rules in (rule_set.suggestions, rule_set.forecasts, rule_set.action_plans):
        ids = [rule.id for rule in rules]
        assert len(ids) == len(set(ids))


def test_single_condition_trigger_is_normalized(tmp_path):
    write_rules(tmp_path)

    rule_set = InsightsConfigLoader(tmp_path).load_rule_set()

    assert rule_set.version == "2.0"
    assert len(rule_set.suggestions[0].trigger) == 1
    assert rule_set.suggestions[0].trigger[0].min_count == 1
    assert rule_set.action_plans[0].trigger == ()
    assert rule_set.action_plans[0].short_term == ("Step",)


def test_rule_set_is_cached_until_reload(tmp_path):
    write_rules(tmp_path)
    loader = InsightsConfigLoader(tmp_path)

    first = loader.load_rule_set()
    assert loader.load_rule_set() is first

    loader.reload()
    assert loader.load_rule_set() is not first


def test_missing_rule_file(tmp_path):
    write_rules(tmp_path)
    (tmp_path / "forecasts.yaml").unlink()

    with pytest.raises(FileNotFoundError):
        InsightsConfigLoader(tmp_path).load_rule_set()


def test_invalid_yaml(tmp_path):
    write_rules(tmp_path, suggestions="suggestions: [unclosed")

    with pytest.raises(RuleConfigurationException):
        InsightsConfigLoader(tmp_path).load_rule_set()


def test_non_mapping_rule_file(tmp_path):
    write_rules(tmp_path, forecasts="- just\n- a list\n")

    with pytest.raises(RuleConfigurationException):
        InsightsConfigLoader(tmp_path).load_rule_set()


def test_rule_without_content(tmp_path):
    write_rules(tmp_path, suggestions={"suggestions": [{"id": "broken", "trigger": {"condition": "journalCount"}}]})

    with pytest.raises(RuleConfigurationException):
        InsightsConfigLoader(tmp_path).load_rule_set()


def test_empty_rule_file_yields_no_rules(tmp_path):
    write_rules(tmp_path, suggestions="")

    rule_set = InsightsConfigLoader(tmp_path).load_rule_set()

    assert rule_set.suggestions == ()
    assert rule_set.version is None
