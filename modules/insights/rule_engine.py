"""
Rule Engine - Condition-driven suggestions, forecast and action plan.

Executes rule definitions from config/insights/rules/*.yaml against a
MetricSnapshot. Rules are data; this module is a generic condition
interpreter built on one operator evaluator and one metric resolver.
100% rule-based, no LLM.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from modules.insights.core.types import (
    ActionPlan,
    Condition,
    MetricSnapshot,
    RuleSet,
)
from modules.insights.transformers import contains_any
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

MetricValue = Union[bool, float, Tuple[float, ...]]

FALLBACK_FORECAST = (
    "With consistent support and opportunities for practice, "
    "steady progress is expected across all areas."
)
GENERIC_SUGGESTION = (
    "Keep adding academic, activity and journal records to unlock more personalized suggestions."
)
DEFAULT_SHORT_TERM = "Set one small, achievable goal for the coming week."
DEFAULT_MEDIUM_TERM = "Review progress together every month and adjust routines as needed."
DEFAULT_LONG_TERM = "Build a balanced routine across academics, physical activity and creative pursuits."

# Spread within which subject scores count as balanced when no deviation is set
DEFAULT_BALANCE_DEVIATION = 10.0
DEFAULT_PROJECT_KEYWORD = "project"


# ==============================================================================
# OPERATORS
# ==============================================================================

def evaluate_operator(value: Any, operator: Optional[str], threshold: Any) -> bool:
    """
    Compare a metric value against a threshold.

    Args:
        value: Metric value
        operator: One of lt, lte, gt, gte, eq (None means eq)
        threshold: Threshold to compare against

    Returns:
        True if the comparison holds; False for non-numeric input or
        unknown operators

    Example:
        >>> evaluate_operator(55, "lt", 60)
        True
        >>> evaluate_operator(60, None, 60)
        True
    """
    try:
        actual = float(value)
        expected = float(threshold)
    except (ValueError, TypeError):
        return False

    operator = operator or "eq"

    if operator == "lt":
        return actual < expected
    elif operator == "lte":
        return actual <= expected
    elif operator == "gt":
        return actual > expected
    elif operator == "gte":
        return actual >= expected
    elif operator == "eq":
        return actual == expected
    else:
        logger.warning(f"Unknown operator: {operator}")
        return False


def _comparison(condition: Condition) -> Optional[Tuple[str, float]]:
    """
    Operator and threshold for a condition.

    threshold defaults to eq, minCount to gte, deviation to lte; an explicit
    operator always wins.
    """
    if condition.threshold is not None:
        return condition.operator or "eq", condition.threshold
    if condition.min_count is not None:
        return condition.operator or "gte", condition.min_count
    if condition.deviation is not None:
        return condition.operator or "lte", condition.deviation
    return None


# ==============================================================================
# METRIC RESOLUTION
# ==============================================================================

def _names(single: Optional[str], many: Sequence[str]) -> List[str]:
    return list(many) if many else ([single] if single else [])


def _matching_count(counts: Mapping[str, int], names: List[str]) -> int:
    if not names:
        return sum(counts.values())
    return sum(count for name, count in counts.items() if contains_any(name, names))


def _matching_texts(texts: Iterable[str], keyword: Optional[str]) -> int:
    texts = list(texts)
    if not keyword:
        return len(texts)
    return sum(1 for text in texts if contains_any(text, [keyword]))


def _academic_score(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    academic = metrics.academic
    if not academic.has_data:
        return None

    names = _names(condition.subject, condition.subjects)
    if not names:
        return academic.average_score

    scores = tuple(
        entry.score for entry in academic.subject_scores
        if contains_any(entry.subject, names)
    )
    return scores or None


def _academic_strength(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    academic = metrics.academic
    if not academic.has_data:
        return None

    names = _names(condition.subject, condition.subjects)
    if names and not contains_any(academic.strong_subject, names):
        return False

    if _comparison(condition) is None:
        return True
    return academic.score_for(academic.strong_subject)


def _balanced_scores(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    scores = [entry.score for entry in metrics.academic.subject_scores]
    if len(scores) <= 1:
        return False

    spread = max(scores) - min(scores)
    if _comparison(condition) is None:
        return spread <= DEFAULT_BALANCE_DEVIATION
    return spread


def _activity_engagement(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    return _matching_count(metrics.activity_counts, _names(condition.activity, condition.activities))


def _sport_engagement(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    return _matching_count(metrics.sport_counts, _names(condition.activity, condition.activities))


def _project_participation(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    keyword = condition.keyword or condition.activity or DEFAULT_PROJECT_KEYWORD
    return _matching_texts(metrics.activity_labels, keyword)


def _journal_count(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    return metrics.journal_count


def _mood_pattern(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    if not condition.keyword or not metrics.moods:
        return None

    # Without a threshold the pattern is about the current mood
    if _comparison(condition) is None:
        return contains_any(metrics.emotional.current_mood, [condition.keyword])
    return _matching_texts(metrics.moods, condition.keyword)


def _goal_exists(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    if not condition.keyword:
        return metrics.goal_count
    return _matching_texts(metrics.goal_labels, condition.keyword)


def _grade_level(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    return metrics.grade_level


def _feedback(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    if not condition.keyword:
        return metrics.feedback_count
    return _matching_texts(metrics.feedback_texts, condition.keyword)


METRIC_RESOLVERS: Dict[str, Callable[[Condition, MetricSnapshot], Optional[MetricValue]]] = {
    "academicScore": _academic_score,
    "academicStrength": _academic_strength,
    "balancedScores": _balanced_scores,
    "activityEngagement": _activity_engagement,
    "sportEngagement": _sport_engagement,
    "projectParticipation": _project_participation,
    "journalCount": _journal_count,
    "moodPattern": _mood_pattern,
    "goalExists": _goal_exists,
    "gradeLevel": _grade_level,
    "feedback": _feedback,
}


def resolve_metric(condition: Condition, metrics: MetricSnapshot) -> Optional[MetricValue]:
    """
    Locate the metric a condition refers to.

    Returns:
        A number to compare, a tuple of numbers (any may match), a bool for
        name/keyword membership, or None when the metric is unavailable
    """
    resolver = METRIC_RESOLVERS.get(condition.type)
    if resolver is None:
        logger.warning(f"Unknown condition type: {condition.type}")
        return None
    return resolver(condition, metrics)


# ==============================================================================
# CONTENT
# ==============================================================================

class _Placeholders(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_content(template: str, metrics: MetricSnapshot) -> str:
    """
    Fill {placeholders} in rule content; unknown ones are left untouched.

    Example:
        >>> render_content("Practice {weakSubject} daily.", metrics)
        "Practice Math daily."
    """
    if "{" not in template:
        return template

    try:
        return template.format_map(_Placeholders(metrics.placeholders()))
    except (ValueError, IndexError, AttributeError) as e:
        logger.debug(f"Could not render rule content '{template}': {e}")
        return template


def fallback_suggestion(metrics: MetricSnapshot) -> str:
    if metrics.academic.has_data:
        return f"Create a focused study plan for {metrics.academic.weak_subject} to improve understanding."
    return GENERIC_SUGGESTION


# ==============================================================================
# ENGINE
# ==============================================================================

class RuleEngine:
    """
    Evaluates suggestion, forecast and action-plan rules.

    - Suggestions: union of every matching rule, in rule order
    - Forecast: first rule whose conditions all match
    - Action plan: deduplicated union of matching rules' tiers

    Example:
        >>> engine = RuleEngine(load_rule_set())
        >>> engine.evaluate_forecast(metrics)
        "Strong academic momentum..."
    """

    def __init__(self, rule_set: RuleSet):
        """
        Initialize rule engine with an immutable rule set.

        Args:
            rule_set: Rule definitions loaded from config
        """
        self.rule_set = rule_set

    def evaluate_suggestions(self, metrics: MetricSnapshot) -> Tuple[str, ...]:
        """
        Collect content of every matching suggestion rule.

        Args:
            metrics: Metric snapshot

        Returns:
            Matched suggestions in rule order without duplicates, or one
            fallback suggestion when nothing matched
        """
        suggestions: List[str] = []

        for rule in self.rule_set.suggestions:
            if self._evaluate_conditions(rule.trigger, metrics):
                content = render_content(rule.content, metrics)
                if content not in suggestions:
                    suggestions.append(content)
                logger.debug(f"Suggestion rule matched: {rule.id}")

        if not suggestions:
            logger.debug("No suggestion rule matched, using fallback")
            suggestions.append(fallback_suggestion(metrics))

        return tuple(suggestions)

    def evaluate_forecast(self, metrics: MetricSnapshot) -> str:
        """
        Return content of the first forecast rule whose conditions all match.

        Args:
            metrics: Metric snapshot

        Returns:
            Forecast sentence, or the fixed fallback forecast
        """
        for rule in self.rule_set.forecasts:
            if self._evaluate_conditions(rule.trigger, metrics):
                logger.debug(f"Forecast rule matched: {rule.id}")
                return render_content(rule.content, metrics)

        logger.debug("No forecast rule matched, using fallback")
        return FALLBACK_FORECAST

    def evaluate_action_plan(self, metrics: MetricSnapshot) -> ActionPlan:
        """
        Merge the tiers of every matching action-plan rule.

        Items keep first-seen order and are never repeated; an empty tier
        gets one default entry.

        Args:
            metrics: Metric snapshot

        Returns:
            ActionPlan with short, medium and long term actions
        """
        short_term: List[str] = []
        medium_term: List[str] = []
        long_term: List[str] = []

        for rule in self.rule_set.action_plans:
            if not self._evaluate_conditions(rule.trigger, metrics):
                continue

            logger.debug(f"Action plan rule matched: {rule.id}")
            for target, items in (
                (short_term, rule.short_term),
                (medium_term, rule.medium_term),
                (long_term, rule.long_term),
            ):
                for item in items:
                    rendered = render_content(item, metrics)
                    if rendered not in target:
                        target.append(rendered)

        return ActionPlan(
            short_term=tuple(short_term) or (DEFAULT_SHORT_TERM,),
            medium_term=tuple(medium_term) or (DEFAULT_MEDIUM_TERM,),
            long_term=tuple(long_term) or (DEFAULT_LONG_TERM,),
        )

    def _evaluate_conditions(
        self,
        conditions: Sequence[Condition],
        metrics: MetricSnapshot
    ) -> bool:
        """
        Evaluate all conditions (AND logic). An empty list always matches.

        Args:
            conditions: Trigger conditions
            metrics: Metric snapshot

        Returns:
            True if all conditions met
        """
        for condition in conditions:
            if not self._evaluate_condition(condition, metrics):
                return False

        return True

    def _evaluate_condition(self, condition: Condition, metrics: MetricSnapshot) -> bool:
        """
        Evaluate a single condition.

        Args:
            condition: Condition definition
            metrics: Metric snapshot

        Returns:
            True if condition met
        """
        value = resolve_metric(condition, metrics)

        if value is None:
            return False

        if isinstance(value, bool):
            return value

        comparison = _comparison(condition)
        values = value if isinstance(value, tuple) else (value,)

        # No threshold: the metric only has to be present
        if comparison is None:
            return any(v > 0 for v in values)

        operator, threshold = comparison
        return any(evaluate_operator(v, operator, threshold) for v in values)
