"""
Tests for top skill, weak area and growth score resolution.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from modules.insights.core.types import (
    AcademicSummary,
    PhysicalSummary,
    SubjectScore,
    TalentSummary,
)
from modules.insights.extractors import extract_academic_summary
from modules.insights.resolver import calculate_growth_score, resolve_strengths, resolve_top_skill


def academic(strong_score: float, average: float = None) -> AcademicSummary:
    return AcademicSummary(
        average_score=average if average is not None else strong_score,
        strong_subject="Math",
        strong_grade="A",
        weak_subject="English",
        weak_grade="C",
        subject_scores=(
            SubjectScore(subject="Math", score=strong_score, grade="A"),
            SubjectScore(subject="English", score=55, grade="C"),
        ),
    )


def talent(with_achievements: bool = False) -> TalentSummary:
    return TalentSummary(
        top_activity="Art",
        activities=("Art",),
        achievements=("Poster prize",) if with_achievements else (),
    )


def physical(with_achievements: bool = False) -> PhysicalSummary:
    return PhysicalSummary(
        top_sport="Football",
        sports=("Football",),
        achievements=("Top scorer",) if with_achievements else (),
    )


def test_no_data_anywhere():
    profile = resolve_strengths(AcademicSummary(), TalentSummary(), PhysicalSummary())

    assert profile.top_skill == "Not enough data"
    assert profile.weak_area == "Not enough data"
    assert profile.growth_score == 50


def test_decisive_academics_win_when_all_domains_present():
    assert resolve_top_skill(academic(90), talent(True), physical(True)) == "Math"


def test_combined_skill_when_both_have_achievements():
    assert resolve_top_skill(academic(85), talent(True), physical(True)) == "Art + Football"


def test_single_achieving_domain_wins():
    assert resolve_top_skill(academic(80), talent(True), physical()) == "Art"
    assert resolve_top_skill(academic(80), talent(), physical(True)) == "Football"


def test_academics_win_without_achievements():
    assert resolve_top_skill(academic(80), talent(), physical()) == "Math"


def test_partial_domains():
    assert resolve_top_skill(AcademicSummary(), talent(), PhysicalSummary()) == "Art"
    assert resolve_top_skill(AcademicSummary(), TalentSummary(), physical()) == "Football"
    assert resolve_top_skill(academic(70), TalentSummary(), physical()) == "Football"
    assert resolve_top_skill(AcademicSummary(), talent(), physical()) == "Art"
    assert resolve_top_skill(academic(70), TalentSummary(), PhysicalSummary()) == "Math"


def test_weak_area_only_from_academics():
    assert resolve_strengths(academic(80), talent(), physical()).weak_area == "English"
    assert resolve_strengths(AcademicSummary(), talent(), physical()).weak_area == "Not enough data"


def test_growth_score_bonuses():
    assert calculate_growth_score(academic(80, average=70), talent(), physical()) == 70
    assert calculate_growth_score(academic(80, average=70), talent(True), physical()) == 75
    assert calculate_growth_score(academic(80, average=70), talent(True), physical(True)) == 80


def test_growth_score_is_clamped():
    assert calculate_growth_score(academic(99, average=98), talent(True), physical(True)) == 100


def test_growth_score_without_academics():
    assert calculate_growth_score(AcademicSummary(), talent(True), physical(True)) == 50


def test_growth_score_rounds_halves_up():
    # Math 72, Science 73 average to 72.5
    summary = extract_academic_summary([
        {"subject": "Math", "score": 72, "isPercentage": True},
        {"subject": "Science", "score": 73, "isPercentage": True},
    ])

    assert summary.average_score == 72.5
    assert calculate_growth_score(summary, TalentSummary(), PhysicalSummary()) == 73
    assert calculate_growth_score(academic(80, average=71.5), talent(), physical()) == 72
    assert calculate_growth_score(academic(80, average=71.49), talent(), physical()) == 71


def test_subject_named_like_the_placeholder_is_academic_data():
    summary = AcademicSummary(
        average_score=70,
        strong_subject="N/A",
        weak_subject="N/A",
        subject_scores=(SubjectScore(subject="N/A", score=70, grade="B"),),
    )

    profile = resolve_strengths(summary, TalentSummary(), PhysicalSummary())

    assert profile.top_skill == "N/A"
    assert profile.weak_area == "N/A"
    assert profile.growth_score == 70
