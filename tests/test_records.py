"""
Tests for typed record projection.
"""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

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
from modules.insights.transformers import to_timestamp


def test_academic_record_aliases_and_coercion():
    record = AcademicRecord.model_validate({
        "subject": "  Math ",
        "marks": "45",
        "totalMarks": 50,
        "isPercentage": "false",
        "examDate": "2024-03-01",
        "unknownField": "ignored",
    })

    assert record.subject == "Math"
    assert record.score == 45.0
    assert record.max_score == 50.0
    assert record.is_percentage is False
    assert record.recorded_at == to_timestamp("2024-03-01")


def test_academic_record_missing_fields_default():
    record = AcademicRecord.model_validate({"score": "n/a"})

    assert record.subject is None
    assert record.score == 0.0
    assert record.max_score is None
    assert record.timestamp == 0.0


def test_extracurricular_and_sports_name_aliases():
    activity = ExtracurricularRecord.model_validate({"activityName": "Chess", "achievements": "District winner"})
    sport = SportsRecord.model_validate({"sportName": "Football", "position": "2nd"})

    assert activity.activity == "Chess"
    assert activity.achievement == "District winner"
    assert sport.sport == "Football"
    assert sport.position == "2nd"


def test_journal_record_tags():
    record = JournalRecord.model_validate({"mood": "Happy", "tags": "school, friends"})

    assert record.tags == ("school", "friends")


def test_goal_record_status_and_priority():
    record = GoalRecord.model_validate({"title": "Read 10 books", "status": "Completed", "priority": "HIGH"})

    assert record.is_completed
    assert record.priority == "high"
    assert not GoalRecord.model_validate({"status": "In Progress"}).is_completed


def test_feedback_record_picks_legacy_text_keys():
    record = FeedbackRecord.model_validate({"comment": "Great effort", "type": "Positive", "from": "Ms. Rao"})

    assert record.text == "Great effort"
    assert record.feedback_type == "positive"
    assert record.author == "Ms. Rao"


def test_profile_record_aliases():
    record = ProfileRecord.model_validate({"displayName": "Asha", "class": "Grade 7", "age": "11"})

    assert record.name == "Asha"
    assert record.grade == "Grade 7"
    assert record.age == 11


def test_profile_record_rejects_negative_age():
    assert ProfileRecord.model_validate({"age": -3}).age is None


def test_records_are_immutable():
    record = AcademicRecord(subject="Math", score=90)

    with pytest.raises(ValidationError):
        record.score = 10


def test_project_records_skips_non_mappings():
    records = project_records(AcademicRecord, [{"subject": "Math"}, "junk", None, 42, {"subject": "Science"}])

    assert [record.subject for record in records] == ["Math", "Science"]


def test_project_records_passes_through_projected_records():
    existing = AcademicRecord(subject="Math", score=70)

    assert project_records(AcademicRecord, [existing]) == [existing]


def test_project_records_empty_input():
    assert project_records(AcademicRecord, None) == []
    assert project_records(AcademicRecord, []) == []


def test_project_records_does_not_mutate_input():
    raw = [{"subject": " Math ", "score": "80"}]

    project_records(AcademicRecord, raw)

    assert raw == [{"subject": " Math ", "score": "80"}]
