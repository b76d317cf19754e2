"""
Metric Extractors - one pure function per record domain.

Each extractor reduces a collection of raw (or already projected) records to
a fixed-shape summary. Empty input never raises: it yields "N/A"/0/empty
placeholders and a generic recommendation. Inputs are never mutated.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from modules.insights.core.types import (
    AcademicSummary,
    AchievementSummary,
    EmotionalSummary,
    FeedbackSummary,
    GoalSummary,
    MoodCount,
    PhysicalSummary,
    SubjectScore,
    TalentSummary,
)
from modules.insights.records import (
    AcademicRecord,
    ExtracurricularRecord,
    FeedbackRecord,
    GoalRecord,
    JournalRecord,
    SportsRecord,
    project_records,
)
from modules.insights.transformers import contains_any, lowercase
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# Inclusive lower bounds, highest first
GRADE_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (90, "A"),
    (80, "B+"),
    (70, "B"),
    (60, "C+"),
    (50, "C"),
    (40, "D"),
)
FAILING_GRADE = "F"

ACHIEVEMENT_SCORE_THRESHOLD = 80
TREND_WINDOW = 3
TREND_DELTA = 5

MAX_TALENT_ACHIEVEMENTS = 3
MAX_RECENT_ACHIEVEMENTS = 5
MAX_PENDING_GOALS = 3
MAX_POSITIVE_FEEDBACK = 3
MAX_IMPROVEMENT_AREAS = 2

PODIUM_MARKERS = (
    "gold", "silver", "bronze", "1st", "2nd", "3rd",
    "first", "second", "third", "win", "medal", "champion",
)

NEUTRAL_MOOD = "Neutral"
POSITIVE_MOODS = ("Happy", "Excited", "Joyful", "Cheerful", "Elated")

# (mood keywords, recommendation); first family that matches wins
MOOD_RECOMMENDATIONS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (POSITIVE_MOODS,
     "Maintain positive engagement through activities that bring joy and fulfillment."),
    (("Sad", "Down", "Disappointed", "Upset"),
     "Consider supportive conversations and engaging in favorite activities to improve mood."),
    (("Tired", "Stressed", "Anxious", "Worried"),
     "Focus on rest, relaxation techniques, and breaking tasks into smaller pieces."),
    (("Calm", "Peaceful", "Relaxed"),
     "This is a good time for reflection, planning, and thoughtful activities."),
    (("Focused", "Determined", "Productive"),
     "Channel this energy into challenging tasks and goal-oriented activities."),
)
DEFAULT_MOOD_RECOMMENDATION = "Continue to express feelings through journaling and discussions."
EMPTY_JOURNAL_RECOMMENDATION = "Start a regular journaling practice to track progress and emotions."

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

POSITIVE_FEEDBACK_LABELS = ("positive", "praise", "appreciation")
IMPROVEMENT_FEEDBACK_LABELS = ("improvement", "negative", "constructive", "concern")


# ==============================================================================
# SHARED HELPERS
# ==============================================================================

def normalize_score(record: AcademicRecord) -> float:
    """
    Normalize a record's score to a 0-100 percentage.

    Percentage records are taken as-is; otherwise score / maxScore * 100.
    A missing or zero maxScore is treated as 100.

    Example:
        >>> normalize_score(AcademicRecord(score=45, max_score=50))
        90.0
    """
    if record.is_percentage:
        return record.score

    max_score = record.max_score or 100.0
    return record.score / max_score * 100


def derive_grade(score: float) -> str:
    """
    Letter grade for a normalized score.

    Example:
        >>> derive_grade(90)
        "A"
        >>> derive_grade(89.999)
        "B+"
    """
    for lower_bound, grade in GRADE_THRESHOLDS:
        if score >= lower_bound:
            return grade
    return FAILING_GRADE


def count_by_name(names: Iterable[Optional[str]]) -> Dict[str, int]:
    """Frequency count of non-empty names, in first-seen order."""
    counts: Dict[str, int] = {}
    for name in names:
        if name:
            counts[name] = counts.get(name, 0) + 1
    return counts


def rank_by_frequency(counts: Dict[str, int]) -> List[str]:
    """Names by count descending; ties keep first-seen order."""
    return [name for name, _ in sorted(counts.items(), key=lambda item: item[1], reverse=True)]


def _newest_first(records: Sequence[Any]) -> List[Any]:
    # Stable: equal timestamps keep input order
    return sorted(records, key=lambda record: record.timestamp, reverse=True)


def _unique(items: Iterable[str], limit: Optional[int] = None) -> Tuple[str, ...]:
    seen: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.append(item)
            if limit is not None and len(seen) >= limit:
                break
    return tuple(seen)


# ==============================================================================
# ACADEMIC
# ==============================================================================

def extract_academic_summary(raw_records: Optional[Iterable[Any]]) -> AcademicSummary:
    """
    Summarize academic records into subject averages, strong/weak subjects
    and a recent trend.

    Records are grouped by subject and each group's normalized scores
    averaged. Subjects are sorted by average descending (stable), so the
    strong subject is the first entry and the weak subject the last.
    """
    records = project_records(AcademicRecord, raw_records)

    groups: Dict[str, List[AcademicRecord]] = {}
    for record in records:
        if record.subject:
            groups.setdefault(record.subject, []).append(record)

    if not groups:
        return AcademicSummary()

    subject_scores = []
    for subject, group in groups.items():
        average = sum(normalize_score(record) for record in group) / len(group)
        subject_scores.append(
            SubjectScore(subject=subject, score=round(average, 2), grade=_subject_grade(group, average))
        )

    subject_scores.sort(key=lambda entry: entry.score, reverse=True)
    strong, weak = subject_scores[0], subject_scores[-1]
    average_score = sum(entry.score for entry in subject_scores) / len(subject_scores)

    return AcademicSummary(
        average_score=round(average_score, 2),
        strong_subject=strong.subject,
        strong_grade=strong.grade,
        weak_subject=weak.subject,
        weak_grade=weak.grade,
        subject_scores=tuple(subject_scores),
        trend=_score_trend(records),
        recent_assessments=_recent_assessments(groups),
    )


def _subject_grade(group: List[AcademicRecord], average: float) -> str:
    """Newest explicit grade in the group, else derived from the average."""
    graded = [record for record in group if record.grade]
    if graded:
        return _newest_first(graded)[0].grade
    return derive_grade(average)


def _score_trend(records: List[AcademicRecord]) -> str:
    """Improving / Declining / Consistent over the most recent scores."""
    dated = sorted(
        (record for record in records if record.recorded_at is not None),
        key=lambda record: record.timestamp,
    )
    recent = [normalize_score(record) for record in dated[-TREND_WINDOW:]]

    if len(recent) < 2:
        return "Consistent"

    delta = recent[-1] - recent[0]
    if delta > TREND_DELTA:
        return "Improving"
    if delta < -TREND_DELTA:
        return "Declining"
    return "Consistent"


def _recent_assessments(groups: Dict[str, List[AcademicRecord]]) -> Tuple[SubjectScore, ...]:
    records = [record for group in groups.values() for record in group]
    recent = []
    for record in _newest_first(records)[:3]:
        score = normalize_score(record)
        recent.append(
            SubjectScore(subject=record.subject, score=round(score, 2), grade=record.grade or derive_grade(score))
        )
    return tuple(recent)


# ==============================================================================
# TALENT / PHYSICAL
# ==============================================================================

def extract_talent_summary(raw_records: Optional[Iterable[Any]]) -> TalentSummary:
    """Most frequent extracurricular activity plus its latest achievements."""
    records = project_records(ExtracurricularRecord, raw_records)
    ranked = rank_by_frequency(count_by_name(record.activity for record in records))

    if not ranked:
        return TalentSummary(
            enjoyment="Explore extracurricular activities to discover new interests and talents."
        )

    achievements = _unique(
        (record.achievement for record in _newest_first(records) if record.achievement),
        limit=MAX_TALENT_ACHIEVEMENTS,
    )

    return TalentSummary(
        top_activity=ranked[0],
        activities=tuple(ranked[:3]),
        achievements=achievements,
        enjoyment=f"Continues to show interest and enjoyment in {ranked[0]}.",
    )


def _sports_achievement(record: SportsRecord) -> Optional[str]:
    if record.achievement:
        return record.achievement
    if record.position and contains_any(record.position, PODIUM_MARKERS):
        return f"{record.position} in {record.sport}" if record.sport else record.position
    return None


def extract_physical_summary(raw_records: Optional[Iterable[Any]]) -> PhysicalSummary:
    """Most frequent sport plus its latest achievements or podium finishes."""
    records = project_records(SportsRecord, raw_records)
    ranked = rank_by_frequency(count_by_name(record.sport for record in records))

    if not ranked:
        return PhysicalSummary(
            recommendation="Consider introducing regular physical activities to support overall development."
        )

    achievements = _unique(
        (_sports_achievement(record) for record in _newest_first(records)),
        limit=MAX_TALENT_ACHIEVEMENTS,
    )

    return PhysicalSummary(
        top_sport=ranked[0],
        sports=tuple(ranked[:3]),
        achievements=achievements,
        recommendation=f"Continue to develop skills in {ranked[0]} through regular practice.",
    )


# ==============================================================================
# EMOTIONAL
# ==============================================================================

def mood_recommendation(mood: str) -> str:
    for keywords, recommendation in MOOD_RECOMMENDATIONS:
        if contains_any(mood, keywords):
            return recommendation
    return DEFAULT_MOOD_RECOMMENDATION


def extract_emotional_summary(raw_records: Optional[Iterable[Any]]) -> EmotionalSummary:
    """Current mood (newest entry), mood frequencies and a recommendation."""
    records = project_records(JournalRecord, raw_records)

    if not records:
        return EmotionalSummary(recommendation=EMPTY_JOURNAL_RECOMMENDATION)

    moods = [record.mood or NEUTRAL_MOOD for record in records]
    counts = count_by_name(moods)
    history = tuple(MoodCount(mood=mood, count=counts[mood]) for mood in rank_by_frequency(counts))

    # max() keeps the first of equally dated entries
    latest = max(records, key=lambda record: record.timestamp)
    current_mood = latest.mood or NEUTRAL_MOOD

    positive = sum(1 for mood in moods if contains_any(mood, POSITIVE_MOODS))

    return EmotionalSummary(
        current_mood=current_mood,
        mood_history=history,
        positive_percentage=round(positive / len(moods) * 100),
        entry_count=len(records),
        recommendation=mood_recommendation(current_mood),
    )


# ==============================================================================
# ACHIEVEMENTS
# ==============================================================================

def extract_achievement_summary(
    academic_records: Optional[Iterable[Any]],
    extracurricular_records: Optional[Iterable[Any]],
    sports_records: Optional[Iterable[Any]]
) -> AchievementSummary:
    """
    Pool achievements across domains, newest first.

    Academic records qualify with an explicit achievement or a normalized
    score above 80; extracurricular and sports records need an explicit
    achievement. Category counts cover the whole pool, the recent list is
    capped at five.
    """
    pool: List[Tuple[float, str, str]] = []

    for record in project_records(AcademicRecord, academic_records):
        score = normalize_score(record)
        if record.achievement:
            pool.append((record.timestamp, "Academic", record.achievement))
        elif score > ACHIEVEMENT_SCORE_THRESHOLD:
            subject = record.subject or "an assessment"
            pool.append((record.timestamp, "Academic", f"Scored {score:.0f}% in {subject}"))

    for record in project_records(ExtracurricularRecord, extracurricular_records):
        if record.achievement:
            pool.append((record.timestamp, "Extracurricular", record.achievement))

    for record in project_records(SportsRecord, sports_records):
        if record.achievement:
            pool.append((record.timestamp, "Sports", record.achievement))

    pool.sort(key=lambda item: item[0], reverse=True)

    by_category: Dict[str, int] = {}
    for _, category, _ in pool:
        by_category[category] = by_category.get(category, 0) + 1

    return AchievementSummary(
        recent=tuple(text for _, _, text in pool[:MAX_RECENT_ACHIEVEMENTS]),
        by_category=by_category,
    )


# ==============================================================================
# GOALS
# ==============================================================================

def goal_recommendation(completed: int, pending: int) -> str:
    if completed == 0 and pending == 0:
        return "Start by setting a few simple, achievable goals to build momentum."
    if completed > pending:
        return "Great job completing goals! Continue setting new challenges to maintain progress."
    if pending > MAX_PENDING_GOALS:
        return "Consider prioritizing goals and focusing on completing a few at a time."
    return "Keep working steadily toward current goals while celebrating small victories."


def extract_goal_summary(raw_records: Optional[Iterable[Any]]) -> GoalSummary:
    """Completed count and the highest-priority pending goal titles."""
    records = project_records(GoalRecord, raw_records)

    completed = sum(1 for record in records if record.is_completed)
    pending = [record for record in records if not record.is_completed]
    pending.sort(key=lambda record: PRIORITY_RANK.get(record.priority, len(PRIORITY_RANK)))

    return GoalSummary(
        completed=completed,
        pending=tuple(record.title for record in pending if record.title)[:MAX_PENDING_GOALS],
        recommendation=goal_recommendation(completed, len(pending)),
    )


# ==============================================================================
# FEEDBACK
# ==============================================================================

def _classify_feedback(record: FeedbackRecord) -> Optional[str]:
    """'positive', 'improvement' or None. Explicit labels beat ratings."""
    label = record.feedback_type or lowercase(record.category)

    if label in POSITIVE_FEEDBACK_LABELS:
        return "positive"
    if label in IMPROVEMENT_FEEDBACK_LABELS:
        return "improvement"
    if record.rating is not None:
        if record.rating >= 4:
            return "positive"
        if record.rating < 3:
            return "improvement"
    return None


def extract_feedback_summary(raw_records: Optional[Iterable[Any]]) -> FeedbackSummary:
    """Deduplicated praise and improvement areas from feedback notes."""
    records = [record for record in project_records(FeedbackRecord, raw_records) if record.text]

    if not records:
        return FeedbackSummary(
            recommendation="Ask teachers and coaches for regular feedback to track progress."
        )

    ordered = _newest_first(records)
    positive = _unique(
        (record.text for record in ordered if _classify_feedback(record) == "positive"),
        limit=MAX_POSITIVE_FEEDBACK,
    )
    improvement = _unique(
        (record.text for record in ordered if _classify_feedback(record) == "improvement"),
        limit=MAX_IMPROVEMENT_AREAS,
    )

    if improvement:
        recommendation = "Focus on the areas teachers have highlighted while building on praised strengths."
    elif positive:
        recommendation = "Keep up the habits that teachers and coaches are praising."
    else:
        recommendation = "Review recent feedback regularly to spot new strengths and challenges."

    return FeedbackSummary(
        positive=positive,
        areas_of_improvement=improvement,
        recommendation=recommendation,
    )
