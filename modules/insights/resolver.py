"""
Strength/Weakness Resolver.

Combines the academic, talent and physical summaries into one top skill,
weak area and growth score.
"""

import math

from modules.insights.core.types import (
    NOT_ENOUGH_DATA,
    AcademicSummary,
    PhysicalSummary,
    StrengthProfile,
    TalentSummary,
)

# Strong-subject score above which academics win outright
DECISIVE_ACADEMIC_SCORE = 85
DEFAULT_GROWTH_SCORE = 50
ACHIEVEMENT_BONUS = 5


def resolve_top_skill(
    academic: AcademicSummary,
    talent: TalentSummary,
    physical: PhysicalSummary
) -> str:
    """
    Pick the child's top skill.

    Precedence (first applicable wins):
    1. All three domains have data: a decisive strong subject (> 85) wins;
       otherwise achievements decide between activity, sport, both combined,
       or the strong subject when neither has any.
    2. Talent entry, then physical entry.
    3. Academic strong subject.
    4. "Not enough data".
    """
    if academic.has_data and talent.has_data and physical.has_data:
        strong_score = academic.score_for(academic.strong_subject) or 0
        talent_wins = bool(talent.achievements)
        physical_wins = bool(physical.achievements)

        if strong_score > DECISIVE_ACADEMIC_SCORE:
            return academic.strong_subject
        if talent_wins and physical_wins:
            return f"{talent.top_activity} + {physical.top_sport}"
        if talent_wins:
            return talent.top_activity
        if physical_wins:
            return physical.top_sport
        return academic.strong_subject

    if talent.has_data:
        return talent.top_activity
    if physical.has_data:
        return physical.top_sport
    if academic.has_data:
        return academic.strong_subject

    return NOT_ENOUGH_DATA


def calculate_growth_score(
    academic: AcademicSummary,
    talent: TalentSummary,
    physical: PhysicalSummary
) -> int:
    """
    Academic average plus 5 per domain with achievements, clamped to 0..100.

    Halves round up (72.5 -> 73). Without academic data the score is a
    flat 50.
    """
    if not academic.has_data:
        return DEFAULT_GROWTH_SCORE

    score = academic.average_score
    if talent.achievements:
        score += ACHIEVEMENT_BONUS
    if physical.achievements:
        score += ACHIEVEMENT_BONUS

    return int(math.floor(max(0, min(100, score)) + 0.5))


def resolve_strengths(
    academic: AcademicSummary,
    talent: TalentSummary,
    physical: PhysicalSummary
) -> StrengthProfile:
    """
    Resolve top skill, weak area and growth score.

    Only academics contribute a weak area; talent and physical summaries
    have no comparable losing metric.

    Example:
        >>> profile = resolve_strengths(academic, TalentSummary(), PhysicalSummary())
        >>> profile.top_skill
        "Math"
    """
    return StrengthProfile(
        top_skill=resolve_top_skill(academic, talent, physical),
        weak_area=academic.weak_subject if academic.has_data else NOT_ENOUGH_DATA,
        growth_score=calculate_growth_score(academic, talent, physical),
    )
