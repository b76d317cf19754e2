"""
Tests for the condition-driven rule engine.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from modules.insights.core.types import (
    AcademicSummary,
    Condition,
    EmotionalSummary,
    MetricSnapshot,
    RuleSet,
    SubjectScore,
    TalentSummary,
)
from modules.insights.rule_engine import (
    DEFAULT_LONG_TERM,
    DEFAULT_MEDIUM_TERM,
    DEFAULT_SHORT_TERM,
    FALLBACK_FORECAST,
    GENERIC_SUGGESTION,
    RuleEngine,
    evaluate_operator,
    render_content,
    resolve_metric,
)


@pytest.fixture
def metrics():
    """Metric snapshot for a student with two subjects, music and journals."""
    return MetricSnapshot(
        name="Asha",
        academic=AcademicSummary(
            average_score=70,
            strong_subject="Math",
            strong_grade="B+",
            weak_subject="English",
            weak_grade="C+",
            subject_scores=(
                SubjectScore(subject="Math", score=80, grade="B+"),
                SubjectScore(subject="English", score=60, grade="C+"),
            ),
        ),
        talent=TalentSummary(top_activity="Music", activities=("Music",)),
        emotional=EmotionalSummary(current_mood="Stressed", entry_count=3),
        activity_counts={"Music": 2, "Science Club": 1},
        sport_counts={},
        activity_labels=("Music", "Science Club Robotics project"),
        moods=("Stressed", "Happy", "Stressed"),
        journal_count=3,
        goal_labels=("Read 10 books Academic",),
        goal_count=1,
        feedback_texts=("Great effort in class", "Needs to revise math tables"),
        feedback_count=2,
        grade_level=7,
    )


def condition(**fields) -> Condition:
    return Condition.model_validate(fields)


def rule_set(suggestions=(), forecasts=(), action_plans=()) -> RuleSet:
    return RuleSet.model_validate({
        "suggestions": list(suggestions),
        "forecasts": list(forecasts),
        "action_plans": list(action_plans),
    })


# ==============================================================================
# OPERATORS
# ==============================================================================

@pytest.mark.parametrize("value,operator,threshold,expected", [
    (55, "lt", 60, True),
    (60, "lt", 60, False),
    (60, "lte", 60, True),
    (61, "gt", 60, True),
    (60, "gte", 60, True),
    (59, "gte", 60, False),
    (60, "eq", 60, True),
    (60, None, 60, True),
    (61, None, 60, False),
    (60, "between", 60, False),
    ("n/a", "eq", 60, False),
    (None, "eq", 0, False),
])
def test_evaluate_operator(value, operator, threshold, expected):
    assert evaluate_operator(value, operator, threshold) is expected


# ==============================================================================
# METRIC RESOLUTION
# ==============================================================================

def test_condition_accepts_type_or_condition_key():
    assert condition(type="journalCount").type == "journalCount"
    assert condition(condition="journalCount", minCount=2).min_count == 2


def test_academic_score_metric(metrics):
    assert resolve_metric(condition(condition="academicScore"), metrics) == 70
    assert resolve_metric(condition(condition="academicScore", subject="math"), metrics) == (80,)
    assert resolve_metric(condition(condition="academicScore", subject="Art"), metrics) is None
    assert resolve_metric(condition(condition="academicScore"), MetricSnapshot()) is None


def test_unknown_condition_type_resolves_to_none(metrics):
    assert resolve_metric(condition(condition="shoeSize", threshold=3), metrics) is None


def test_engagement_counts(metrics):
    assert resolve_metric(condition(condition="activityEngagement"), metrics) == 3
    assert resolve_metric(condition(condition="activityEngagement", activities=["music", "art"]), metrics) == 2
    assert resolve_metric(condition(condition="sportEngagement"), metrics) == 0


def test_snapshot_counts_are_read_only(metrics):
    with pytest.raises(TypeError):
        metrics.activity_counts["Music"] = 10
    with pytest.raises(TypeError):
        metrics.sport_counts["Football"] = 1

    assert resolve_metric(condition(condition="activityEngagement"), metrics) == 3


def test_keyword_counts(metrics):
    assert resolve_metric(condition(condition="projectParticipation"), metrics) == 1
    assert resolve_metric(condition(condition="goalExists", keyword="books"), metrics) == 1
    assert resolve_metric(condition(condition="feedback", keyword="math"), metrics) == 1
    assert resolve_metric(condition(condition="feedback"), metrics) == 2


# ==============================================================================
# CONDITIONS
# ==============================================================================

def test_threshold_defaults_to_equality(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="journalCount", threshold=3), metrics)
    assert not engine._evaluate_condition(condition(condition="journalCount", threshold=2), metrics)


def test_min_count_defaults_to_at_least(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="journalCount", minCount=2), metrics)
    assert not engine._evaluate_condition(condition(condition="journalCount", minCount=4), metrics)


def test_explicit_operator_wins(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="journalCount", minCount=5, operator="lt"), metrics)


def test_deviation_defaults_to_at_most(metrics):
    engine = RuleEngine(rule_set())

    # Math 80, English 60: spread 20
    assert engine._evaluate_condition(condition(condition="balancedScores", deviation=25), metrics)
    assert not engine._evaluate_condition(condition(condition="balancedScores", deviation=15), metrics)


def test_any_subject_may_match(metrics):
    engine = RuleEngine(rule_set())
    weak_language = condition(condition="academicScore", subjects=["English", "Math"], operator="lt", threshold=65)

    assert engine._evaluate_condition(weak_language, metrics)


def test_condition_without_threshold_needs_presence(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="activityEngagement", activity="Music"), metrics)
    assert not engine._evaluate_condition(condition(condition="activityEngagement", activity="Dance"), metrics)


def test_academic_strength(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="academicStrength", subject="Math"), metrics)
    assert not engine._evaluate_condition(condition(condition="academicStrength", subject="English"), metrics)
    assert engine._evaluate_condition(condition(condition="academicStrength", operator="gte", threshold=80), metrics)
    assert not engine._evaluate_condition(condition(condition="academicStrength", operator="gte", threshold=85), metrics)


def test_balanced_scores(metrics):
    engine = RuleEngine(rule_set())
    one_subject = MetricSnapshot(
        academic=AcademicSummary(
            average_score=90,
            strong_subject="Math",
            weak_subject="Math",
            subject_scores=(SubjectScore(subject="Math", score=90, grade="A"),),
        )
    )

    # Spread is 20
    assert engine._evaluate_condition(condition(condition="balancedScores", deviation=20), metrics)
    assert not engine._evaluate_condition(condition(condition="balancedScores", deviation=10), metrics)
    assert not engine._evaluate_condition(condition(condition="balancedScores"), metrics)
    assert not engine._evaluate_condition(condition(condition="balancedScores", deviation=50), one_subject)


def test_mood_pattern(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="moodPattern", keyword="stress"), metrics)
    assert not engine._evaluate_condition(condition(condition="moodPattern", keyword="happy"), metrics)
    assert engine._evaluate_condition(condition(condition="moodPattern", keyword="Stressed", minCount=2), metrics)
    assert not engine._evaluate_condition(condition(condition="moodPattern", keyword="Sad"), MetricSnapshot())


def test_grade_level(metrics):
    engine = RuleEngine(rule_set())

    assert engine._evaluate_condition(condition(condition="gradeLevel", operator="gte", threshold=6), metrics)
    assert not engine._evaluate_condition(condition(condition="gradeLevel", operator="gte", threshold=6), MetricSnapshot())


# ==============================================================================
# EVALUATORS
# ==============================================================================

def test_suggestion_union_keeps_rule_order(metrics):
    engine = RuleEngine(rule_set(suggestions=[
        {"id": "s1", "trigger": {"condition": "journalCount", "minCount": 1}, "content": "Journal"},
        {"id": "s2", "trigger": {"condition": "goalExists", "minCount": 1}, "content": "Goals"},
        {"id": "s3", "trigger": {"condition": "feedback", "minCount": 1}, "content": "Feedback"},
        {"id": "s4", "trigger": {"condition": "sportEngagement", "minCount": 1}, "content": "Sports"},
    ]))

    assert engine.evaluate_suggestions(metrics) == ("Journal", "Goals", "Feedback")


def test_suggestion_duplicates_are_dropped(metrics):
    engine = RuleEngine(rule_set(suggestions=[
        {"id": "s1", "trigger": {"condition": "journalCount", "minCount": 1}, "content": "Keep journaling"},
        {"id": "s2", "trigger": {"condition": "goalExists", "minCount": 1}, "content": "Set goals"},
        {"id": "s3", "trigger": {"condition": "feedback", "minCount": 1}, "content": "Keep journaling"},
    ]))

    assert engine.evaluate_suggestions(metrics) == ("Keep journaling", "Set goals")


def test_suggestion_fallback(metrics):
    engine = RuleEngine(rule_set())

    assert engine.evaluate_suggestions(metrics) == (
        "Create a focused study plan for English to improve understanding.",
    )
    assert engine.evaluate_suggestions(MetricSnapshot()) == (GENERIC_SUGGESTION,)


def test_suggestion_placeholders(metrics):
    engine = RuleEngine(rule_set(suggestions=[
        {"id": "s1", "trigger": {"condition": "academicStrength"}, "content": "{name} shines in {strongSubject}"},
    ]))

    assert engine.evaluate_suggestions(metrics) == ("Asha shines in Math",)


def test_forecast_first_match_wins(metrics):
    engine = RuleEngine(rule_set(forecasts=[
        {"id": "a", "trigger": [{"condition": "academicScore", "operator": "gte", "threshold": 60}], "content": "A"},
        {"id": "b", "trigger": [
            {"condition": "academicScore", "operator": "gte", "threshold": 60},
            {"condition": "journalCount", "minCount": 1},
        ], "content": "B"},
    ]))

    assert engine.evaluate_forecast(metrics) == "A"


def test_forecast_requires_all_conditions(metrics):
    engine = RuleEngine(rule_set(forecasts=[
        {"id": "a", "trigger": [
            {"condition": "academicScore", "operator": "gte", "threshold": 60},
            {"condition": "sportEngagement", "minCount": 1},
        ], "content": "A"},
        {"id": "b", "trigger": [{"condition": "journalCount", "minCount": 1}], "content": "B"},
    ]))

    assert engine.evaluate_forecast(metrics) == "B"


def test_forecast_fallback():
    assert RuleEngine(rule_set()).evaluate_forecast(MetricSnapshot()) == FALLBACK_FORECAST


def test_action_plan_deduplicates(metrics):
    engine = RuleEngine(rule_set(action_plans=[
        {"id": "p1", "trigger": {"condition": "journalCount", "minCount": 1},
         "shortTerm": ["Shared step", "Journal step"]},
        {"id": "p2", "trigger": {"condition": "goalExists", "minCount": 1},
         "shortTerm": ["Shared step", "Goal step"], "longTerm": ["Grow in {weakSubject}"]},
        {"id": "p3", "trigger": {"condition": "sportEngagement", "minCount": 1},
         "shortTerm": ["Sport step"]},
    ]))

    plan = engine.evaluate_action_plan(metrics)

    assert plan.short_term == ("Shared step", "Journal step", "Goal step")
    assert plan.short_term.count("Shared step") == 1
    assert plan.medium_term == (DEFAULT_MEDIUM_TERM,)
    assert plan.long_term == ("Grow in English",)


def test_action_plan_defaults():
    plan = RuleEngine(rule_set()).evaluate_action_plan(MetricSnapshot())

    assert plan.short_term == (DEFAULT_SHORT_TERM,)
    assert plan.medium_term == (DEFAULT_MEDIUM_TERM,)
    assert plan.long_term == (DEFAULT_LONG_TERM,)


def test_empty_trigger_always_matches(metrics):
    engine = RuleEngine(rule_set(action_plans=[{"id": "always", "trigger": [], "longTerm": ["Always"]}]))

    assert engine.evaluate_action_plan(MetricSnapshot()).long_term == ("Always",)


def test_render_content_leaves_unknown_placeholders(metrics):
    assert render_content("Practice {weakSubject} with {coach}", metrics) == "Practice English with {coach}"
    assert render_content("No placeholders", metrics) == "No placeholders"
