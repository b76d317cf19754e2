"""
Type definitions for the insights module.

Summaries, the final report and the rule definitions are immutable values.
Serialized form uses camelCase keys (report.model_dump(by_alias=True)),
the shape the display layer consumes.
"""

from types import MappingProxyType
from typing import Annotated, Any, Dict, Mapping, Optional, Tuple

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

NOT_AVAILABLE = "N/A"
NOT_ENOUGH_DATA = "Not enough data"


def _read_only(value: Mapping[str, int]) -> Mapping[str, int]:
    return MappingProxyType(dict(value))


def _as_dict(value: Mapping[str, int]) -> Dict[str, int]:
    return dict(value)


# name -> count mapping that cannot be mutated after validation; dumps as a dict
CountMap = Annotated[Mapping[str, int], AfterValidator(_read_only), PlainSerializer(_as_dict)]


class InsightModel(BaseModel):
    """Base for insight values: frozen, camelCase on the wire."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to camelCase dictionary for the display layer."""
        return self.model_dump(by_alias=True)


# ==============================================================================
# SUMMARIES
# ==============================================================================

class SubjectScore(InsightModel):
    """Average normalized score (0-100) for one subject."""
    subject: str
    score: float
    grade: str


class AcademicSummary(InsightModel):
    average_score: float = 0.0
    strong_subject: str = NOT_AVAILABLE
    strong_grade: str = NOT_AVAILABLE
    weak_subject: str = NOT_AVAILABLE
    weak_grade: str = NOT_AVAILABLE
    subject_scores: Tuple[SubjectScore, ...] = ()
    trend: str = "Consistent"
    recent_assessments: Tuple[SubjectScore, ...] = ()

    @property
    def has_data(self) -> bool:
        return bool(self.subject_scores)

    def score_for(self, subject: str) -> Optional[float]:
        """Case-insensitive subject score lookup."""
        wanted = subject.strip().lower()
        for entry in self.subject_scores:
            if entry.subject.lower() == wanted:
                return entry.score
        return None


class TalentSummary(InsightModel):
    top_activity: str = NOT_AVAILABLE
    activities: Tuple[str, ...] = ()
    achievements: Tuple[str, ...] = ()
    enjoyment: str = ""

    @property
    def has_data(self) -> bool:
        return bool(self.activities)


class PhysicalSummary(InsightModel):
    top_sport: str = NOT_AVAILABLE
    sports: Tuple[str, ...] = ()
    achievements: Tuple[str, ...] = ()
    recommendation: str = ""

    @property
    def has_data(self) -> bool:
        return bool(self.sports)


class MoodCount(InsightModel):
    mood: str
    count: int


class EmotionalSummary(InsightModel):
    current_mood: str = NOT_AVAILABLE
    mood_history: Tuple[MoodCount, ...] = ()
    positive_percentage: int = 0
    entry_count: int = 0
    recommendation: str = ""


class AchievementSummary(InsightModel):
    recent: Tuple[str, ...] = ()
    by_category: CountMap = Field(default_factory=dict, validate_default=True)


class GoalSummary(InsightModel):
    completed: int = 0
    pending: Tuple[str, ...] = ()
    recommendation: str = ""


class FeedbackSummary(InsightModel):
    positive: Tuple[str, ...] = ()
    areas_of_improvement: Tuple[str, ...] = ()
    recommendation: str = ""


class StrengthProfile(InsightModel):
    """Resolved top skill, weak area and growth score."""
    top_skill: str = NOT_ENOUGH_DATA
    weak_area: str = NOT_ENOUGH_DATA
    growth_score: int = 50


# ==============================================================================
# REPORT
# ==============================================================================

class ChildSnapshot(InsightModel):
    name: str
    age: int
    class_name: str = Field(alias="class")
    top_skill: str
    weak_area: str
    growth_score: int


class ActionPlan(InsightModel):
    short_term: Tuple[str, ...] = ()
    medium_term: Tuple[str, ...] = ()
    long_term: Tuple[str, ...] = ()


class InsightReport(InsightModel):
    """Final insight report for one student."""
    child_snapshot: ChildSnapshot
    academic: AcademicSummary
    talent: TalentSummary
    physical: PhysicalSummary
    emotional: EmotionalSummary
    achievements: AchievementSummary
    goals: GoalSummary
    feedback: FeedbackSummary
    suggestions: Tuple[str, ...]
    forecast: str
    action_plan: ActionPlan


# ==============================================================================
# METRICS
# ==============================================================================

class MetricSnapshot(BaseModel):
    """
    Flat metric view the rule engine evaluates conditions against.

    Built once per report from the summaries plus a few raw counts that the
    summaries truncate away.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "Student"
    academic: AcademicSummary = Field(default_factory=AcademicSummary)
    talent: TalentSummary = Field(default_factory=TalentSummary)
    physical: PhysicalSummary = Field(default_factory=PhysicalSummary)
    emotional: EmotionalSummary = Field(default_factory=EmotionalSummary)
    goals: GoalSummary = Field(default_factory=GoalSummary)
    feedback: FeedbackSummary = Field(default_factory=FeedbackSummary)
    strengths: StrengthProfile = Field(default_factory=StrengthProfile)

    # name -> record count, in first-seen order
    activity_counts: CountMap = Field(default_factory=dict, validate_default=True)
    sport_counts: CountMap = Field(default_factory=dict, validate_default=True)
    # activity names, categories and event names of extracurricular records
    activity_labels: Tuple[str, ...] = ()
    moods: Tuple[str, ...] = ()
    journal_count: int = 0
    goal_labels: Tuple[str, ...] = ()
    goal_count: int = 0
    feedback_texts: Tuple[str, ...] = ()
    feedback_count: int = 0
    grade_level: Optional[int] = None

    def placeholders(self) -> Dict[str, str]:
        """Values available to rule content templates."""
        return {
            "name": self.name,
            "strongSubject": self.academic.strong_subject,
            "weakSubject": self.academic.weak_subject,
            "topActivity": self.talent.top_activity,
            "topSport": self.physical.top_sport,
            "topSkill": self.strengths.top_skill,
        }


# ==============================================================================
# RULE DEFINITIONS
# ==============================================================================

class RuleModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Condition(RuleModel):
    """Declarative predicate over derived metrics.

    Without an operator, threshold compares with eq, minCount with gte
    (at least that many) and deviation with lte (spread at most that much).
    """

    type: str = Field(validation_alias=AliasChoices("type", "condition"))
    subject: Optional[str] = None
    subjects: Tuple[str, ...] = ()
    activity: Optional[str] = None
    activities: Tuple[str, ...] = ()
    keyword: Optional[str] = None
    threshold: Optional[float] = None
    min_count: Optional[float] = Field(default=None, validation_alias=AliasChoices("minCount", "min_count"))
    deviation: Optional[float] = None
    operator: Optional[str] = None


def _as_condition_list(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, dict):
        return (value,)
    return value


class SuggestionRule(RuleModel):
    id: str
    category: Optional[str] = None
    priority: Optional[int] = None
    trigger: Tuple[Condition, ...] = ()
    content: str

    @field_validator("trigger", mode="before")
    @classmethod
    def _normalize_trigger(cls, value: Any) -> Any:
        return _as_condition_list(value)


class ForecastRule(RuleModel):
    id: str
    trigger: Tuple[Condition, ...] = ()
    content: str

    @field_validator("trigger", mode="before")
    @classmethod
    def _normalize_trigger(cls, value: Any) -> Any:
        return _as_condition_list(value)


class ActionPlanRule(RuleModel):
    id: str
    trigger: Tuple[Condition, ...] = ()
    short_term: Tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("shortTerm", "short_term"))
    medium_term: Tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("mediumTerm", "medium_term"))
    long_term: Tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("longTerm", "long_term"))

    @field_validator("trigger", mode="before")
    @classmethod
    def _normalize_trigger(cls, value: Any) -> Any:
        return _as_condition_list(value)


class RuleSet(RuleModel):
    """Immutable rule configuration, loaded once and passed to the engine."""

    version: Optional[str] = None
    suggestions: Tuple[SuggestionRule, ...] = ()
    forecasts: Tuple[ForecastRule, ...] = ()
    action_plans: Tuple[ActionPlanRule, ...] = ()

    @property
    def rule_count(self) -> int:
        return len(self.suggestions) + len(self.forecasts) + len(self.action_plans)
