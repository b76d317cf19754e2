"""
Insights Service - composes the insight report for one student.

Fetches the seven record collections through a record provider, runs the
metric extractors, resolves strengths and evaluates the rule set.
100% rule-based, no LLM.
"""

import asyncio
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from modules.insights.config_loader import InsightsConfigLoader
from modules.insights.core.exceptions import RuleConfigurationException, UpstreamFetchException
from modules.insights.core.interfaces import (
    ACADEMIC_COLLECTION,
    EXTRACURRICULAR_COLLECTION,
    FEEDBACK_COLLECTION,
    GOALS_COLLECTION,
    JOURNAL_COLLECTION,
    PROFILE_COLLECTION,
    RECORD_COLLECTIONS,
    SPORTS_COLLECTION,
    IRecordProvider,
)
from modules.insights.core.types import (
    NOT_AVAILABLE,
    AcademicSummary,
    AchievementSummary,
    ActionPlan,
    ChildSnapshot,
    EmotionalSummary,
    FeedbackSummary,
    GoalSummary,
    InsightReport,
    MetricSnapshot,
    PhysicalSummary,
    RuleSet,
    StrengthProfile,
    TalentSummary,
)
from modules.insights.extractors import (
    NEUTRAL_MOOD,
    count_by_name,
    extract_academic_summary,
    extract_achievement_summary,
    extract_emotional_summary,
    extract_feedback_summary,
    extract_goal_summary,
    extract_physical_summary,
    extract_talent_summary,
)
from modules.insights.records import (
    AcademicRecord,
    ExtracurricularRecord,
    FeedbackRecord,
    GoalRecord,
    JournalRecord,
    ProfileRecord,
    SportsRecord,
    project_records,
)
from modules.insights.resolver import resolve_strengths
from modules.insights.rule_engine import (
    DEFAULT_LONG_TERM,
    DEFAULT_MEDIUM_TERM,
    DEFAULT_SHORT_TERM,
    FALLBACK_FORECAST,
    RuleEngine,
    fallback_suggestion,
)
from modules.insights.transformers import calculate_age_from_dob, extract_integer
from shared.utils.logger import for_user, log_error, setup_logger

logger = setup_logger(__name__)

T = TypeVar("T")

DEFAULT_CHILD_NAME = "Student"
DEFAULT_GRADE_NUMBER = 5
GRADE_TO_AGE_OFFSET = 5

# Goal category inferred from an action-plan description; first match wins
GOAL_CATEGORY_PATTERNS = (
    ("Sports", re.compile(r"\b(sport|physical|exercise)", re.IGNORECASE)),
    ("Extracurricular", re.compile(r"\b(art|music|hobby)", re.IGNORECASE)),
)
DEFAULT_GOAL_CATEGORY = "Academic"


# ==============================================================================
# COMPOSITION
# ==============================================================================

def _guarded(func: Callable[..., T], fallback: Callable[[], T], *args: Any) -> T:
    """Run a derivation step; unexpected errors degrade to the fallback value."""
    try:
        return func(*args)
    except Exception as e:
        log_error(logger, e, f"{func.__name__} failed, using fallback")
        return fallback()


def _profile_record(raw_profile: Any) -> ProfileRecord:
    """First usable profile document, or an empty profile."""
    if isinstance(raw_profile, Mapping):
        raw_profile = [raw_profile]

    profiles = project_records(ProfileRecord, raw_profile)
    return profiles[0] if profiles else ProfileRecord()


def estimate_age(profile: ProfileRecord, today: Optional[date] = None) -> int:
    """
    Age from the profile, else from date of birth, else from the grade.

    The grade heuristic takes the first integer in the grade text (5 when
    there is none) and adds 5.

    Example:
        >>> estimate_age(ProfileRecord(grade="Grade 7"))
        12
    """
    if profile.age is not None:
        return profile.age

    if profile.dob is not None:
        age = calculate_age_from_dob(profile.dob, today=today)
        if age is not None:
            return age

    grade_number = extract_integer(profile.grade)
    return (grade_number if grade_number is not None else DEFAULT_GRADE_NUMBER) + GRADE_TO_AGE_OFFSET


def _default_action_plan() -> ActionPlan:
    return ActionPlan(
        short_term=(DEFAULT_SHORT_TERM,),
        medium_term=(DEFAULT_MEDIUM_TERM,),
        long_term=(DEFAULT_LONG_TERM,),
    )


def _labels(*parts: Optional[str]) -> str:
    return " ".join(part for part in parts if part)


def compose_insights(
    collections: Optional[Mapping],
    rule_set: RuleSet,
    today: Optional[date] = None
) -> InsightReport:
    """
    Build the insight report from already-fetched collections.

    Pure and synchronous; never raises. Any derivation step that fails
    degrades to its documented fallback.

    Args:
        collections: Collection name -> raw records (missing collections are empty)
        rule_set: Rule definitions
        today: Reference date for age-from-birthday (defaults to today)

    Returns:
        Complete InsightReport
    """
    collections = collections or {}

    academic_records = project_records(AcademicRecord, collections.get(ACADEMIC_COLLECTION))
    extracurricular_records = project_records(ExtracurricularRecord, collections.get(EXTRACURRICULAR_COLLECTION))
    sports_records = project_records(SportsRecord, collections.get(SPORTS_COLLECTION))
    journal_records = project_records(JournalRecord, collections.get(JOURNAL_COLLECTION))
    goal_records = project_records(GoalRecord, collections.get(GOALS_COLLECTION))
    feedback_records = project_records(FeedbackRecord, collections.get(FEEDBACK_COLLECTION))
    profile = _profile_record(collections.get(PROFILE_COLLECTION))

    # Step 1: Extract per-domain summaries
    academic = _guarded(extract_academic_summary, AcademicSummary, academic_records)
    talent = _guarded(extract_talent_summary, TalentSummary, extracurricular_records)
    physical = _guarded(extract_physical_summary, PhysicalSummary, sports_records)
    emotional = _guarded(extract_emotional_summary, EmotionalSummary, journal_records)
    goals = _guarded(extract_goal_summary, GoalSummary, goal_records)
    feedback = _guarded(extract_feedback_summary, FeedbackSummary, feedback_records)
    achievements = _guarded(
        extract_achievement_summary, AchievementSummary,
        academic_records, extracurricular_records, sports_records
    )

    # Step 2: Resolve top skill, weak area and growth score
    strengths = _guarded(resolve_strengths, StrengthProfile, academic, talent, physical)

    # Step 3: Flatten into the metric snapshot rules are evaluated against
    name = profile.name or DEFAULT_CHILD_NAME
    metrics = MetricSnapshot(
        name=name,
        academic=academic,
        talent=talent,
        physical=physical,
        emotional=emotional,
        goals=goals,
        feedback=feedback,
        strengths=strengths,
        activity_counts=count_by_name(record.activity for record in extracurricular_records),
        sport_counts=count_by_name(record.sport for record in sports_records),
        activity_labels=tuple(
            _labels(record.activity, record.category, record.event_name)
            for record in extracurricular_records
        ),
        moods=tuple(record.mood or NEUTRAL_MOOD for record in journal_records),
        journal_count=len(journal_records),
        goal_labels=tuple(_labels(record.title, record.category) for record in goal_records),
        goal_count=len(goal_records),
        feedback_texts=tuple(record.text for record in feedback_records if record.text),
        feedback_count=len(feedback_records),
        grade_level=extract_integer(profile.grade),
    )

    # Step 4: Evaluate rules
    engine = RuleEngine(rule_set)
    suggestions = _guarded(engine.evaluate_suggestions, lambda: (fallback_suggestion(metrics),), metrics)
    forecast = _guarded(engine.evaluate_forecast, lambda: FALLBACK_FORECAST, metrics)
    action_plan = _guarded(engine.evaluate_action_plan, _default_action_plan, metrics)

    return InsightReport(
        child_snapshot=ChildSnapshot(
            name=name,
            age=_guarded(estimate_age, lambda: DEFAULT_GRADE_NUMBER + GRADE_TO_AGE_OFFSET, profile, today),
            class_name=profile.grade or NOT_AVAILABLE,
            top_skill=strengths.top_skill,
            weak_area=strengths.weak_area,
            growth_score=strengths.growth_score,
        ),
        academic=academic,
        talent=talent,
        physical=physical,
        emotional=emotional,
        achievements=achievements,
        goals=goals,
        feedback=feedback,
        suggestions=suggestions,
        forecast=forecast,
        action_plan=action_plan,
    )


def build_goal_from_action_plan(
    user_id: str,
    title: str,
    description: str,
    timeframe: str
) -> Dict[str, Any]:
    """
    Build a goal document from an action-plan item.

    Example:
        >>> build_goal_from_action_plan("u1", "Swim", "Daily exercise", "shortTerm")["category"]
        "Sports"
    """
    category = DEFAULT_GOAL_CATEGORY
    for candidate, pattern in GOAL_CATEGORY_PATTERNS:
        if pattern.search(description or ""):
            category = candidate
            break

    return {
        "userId": user_id,
        "title": title,
        "description": description,
        "category": category,
        "timeframe": timeframe,
        "status": "In Progress",
        "steps": [{"text": description, "completed": False}],
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }


# ==============================================================================
# SERVICE
# ==============================================================================

class InsightsService:
    """
    Insight report generation service.

    Features:
    - Rule definitions loaded once into an immutable RuleSet
    - Concurrent fetch of the seven record collections
    - Deterministic, rule-based report; fetch failures yield None

    Example:
        >>> provider = get_record_provider("static", {"users": {...}})
        >>> service = InsightsService(provider)
        >>> report = await service.generate_insights("user-123")
        >>> report.child_snapshot.top_skill
        "Math"
    """

    def __init__(
        self,
        provider: IRecordProvider,
        rule_set: Optional[RuleSet] = None,
        config_loader: Optional[InsightsConfigLoader] = None
    ):
        """
        Initialize insights service.

        Args:
            provider: Record provider for the external store
            rule_set: Preloaded rule set (loaded from config when omitted)
            config_loader: Rule config loader (default rules directory when omitted)

        Raises:
            FileNotFoundError: If rule_set is omitted and rule files are missing
            RuleConfigurationException: If rule files are malformed
        """
        self.provider = provider
        self.config_loader = config_loader or InsightsConfigLoader()
        self.rule_set = rule_set if rule_set is not None else self.config_loader.load_rule_set()

        logger.info(
            f"Initialized insights service with provider {provider.provider_name} "
            f"and {self.rule_set.rule_count} rules"
        )

    async def fetch_records(self, user_id: str) -> Dict[str, List[Any]]:
        """
        Fetch all seven collections for a user concurrently.

        Args:
            user_id: Student/user identifier

        Returns:
            Collection name -> raw records

        Raises:
            UpstreamFetchException: If any collection cannot be fetched
        """
        # All fetches run to completion; failures come back as results
        results = await asyncio.gather(
            *(self.provider.fetch_collection(collection, user_id) for collection in RECORD_COLLECTIONS),
            return_exceptions=True,
        )

        failures = [
            (collection, result)
            for collection, result in zip(RECORD_COLLECTIONS, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            collection, error = failures[0]
            for_user(logger, user_id).warning(
                f"{len(failures)} of {len(RECORD_COLLECTIONS)} collections failed, first: {collection}"
            )
            if isinstance(error, UpstreamFetchException) or not isinstance(error, Exception):
                raise error
            raise UpstreamFetchException(f"Failed to fetch records for {user_id}: {error}") from error

        return dict(zip(RECORD_COLLECTIONS, results))

    def build_report(self, collections: Mapping) -> InsightReport:
        """Compose a report from already-fetched collections."""
        return compose_insights(collections, self.rule_set)

    async def generate_insights(self, user_id: str) -> Optional[InsightReport]:
        """
        Generate the insight report for a user.

        Args:
            user_id: Student/user identifier

        Returns:
            InsightReport, or None when the records could not be fetched.
            A partial report is never returned.
        """
        user_logger = for_user(logger, user_id)
        user_logger.info("Generating insights")
        start_time = datetime.now(timezone.utc)

        try:
            collections = await self.fetch_records(user_id)
        except UpstreamFetchException as e:
            log_error(user_logger, e, "Insight data unavailable")
            return None

        report = self.build_report(collections)

        processing_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        user_logger.info(
            f"Insights generated in {processing_time:.2f}s: "
            f"top_skill={report.child_snapshot.top_skill}, "
            f"growth_score={report.child_snapshot.growth_score}, "
            f"suggestions={len(report.suggestions)}"
        )
        return report

    async def regenerate_insights(self, user_id: str) -> Optional[InsightReport]:
        """Reload rule definitions, then generate a fresh report."""
        self.reload_rules()
        return await self.generate_insights(user_id)

    def reload_rules(self):
        """
        Reload rule definitions from config.

        A failed reload keeps the current rule set.
        """
        logger.info("Reloading insight rules")
        self.config_loader.reload()

        try:
            self.rule_set = self.config_loader.load_rule_set()
        except (FileNotFoundError, RuleConfigurationException) as e:
            log_error(logger, e, "Rule reload failed, keeping current rules")
            return

        logger.info("Rules reloaded successfully")

    async def add_goal_from_action_plan(
        self,
        user_id: str,
        title: str,
        description: str,
        timeframe: str
    ) -> str:
        """
        Save an action-plan item as a new goal through the provider.

        Returns:
            Identifier of the stored goal

        Raises:
            RecordProviderException: If the provider rejects the write
        """
        goal = build_goal_from_action_plan(user_id, title, description, timeframe)
        goal_id = await self.provider.save_record(GOALS_COLLECTION, goal)
        for_user(logger, user_id).info(f"Goal added from action plan: {title} ({goal['category']})")
        return goal_id
