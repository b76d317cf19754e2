"""
Record projection - typed views over loosely-typed store documents.

Raw documents arrive as untyped dicts with optional, sometimes mistyped
fields. Each domain gets one pydantic model; projection happens once at the
extractor boundary so nothing downstream reads raw dicts.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from modules.insights.transformers import (
    clean_whitespace,
    lowercase,
    to_boolean,
    to_float,
    to_integer,
    to_string_list,
    to_timestamp,
)
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

RecordT = TypeVar("RecordT", bound="RawRecord")


class RawRecord(BaseModel):
    """Base for all projected records. Every field is optional."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    recorded_at: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("date", "createdAt", "recordedAt"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)

    @field_validator("recorded_at", mode="before")
    @classmethod
    def _coerce_recorded_at(cls, value: Any) -> Optional[float]:
        return to_timestamp(value)

    @property
    def timestamp(self) -> float:
        """Sort key; undated records sort as epoch 0."""
        return self.recorded_at or 0.0


# ==============================================================================
# DOMAIN RECORDS
# ==============================================================================

class AcademicRecord(RawRecord):
    """Exam or assessment result."""

    subject: Optional[str] = None
    score: float = Field(default=0.0, validation_alias=AliasChoices("score", "marks"))
    max_score: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("maxScore", "totalMarks", "max_score"),
    )
    is_percentage: bool = Field(
        default=False,
        validation_alias=AliasChoices("isPercentage", "is_percentage"),
    )
    grade: Optional[str] = None
    term: Optional[str] = None
    exam_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("examType", "exam_type"))
    achievement: Optional[str] = None
    recorded_at: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("date", "examDate", "createdAt"),
    )

    @field_validator("subject", "grade", "term", "exam_type", "achievement", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float:
        return to_float(value) or 0.0

    @field_validator("max_score", mode="before")
    @classmethod
    def _coerce_max_score(cls, value: Any) -> Optional[float]:
        return to_float(value)

    @field_validator("is_percentage", mode="before")
    @classmethod
    def _coerce_is_percentage(cls, value: Any) -> bool:
        return bool(to_boolean(value))


class ExtracurricularRecord(RawRecord):
    """Club, art, music or other non-sport activity entry."""

    activity: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("activity", "activityName", "name"),
    )
    category: Optional[str] = None
    level: Optional[str] = None
    event_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("eventName", "event_name"))
    achievement: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("achievement", "achievements"),
    )
    recorded_at: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("date", "eventDate", "createdAt"),
    )

    @field_validator("activity", "category", "level", "event_name", "achievement", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)


class SportsRecord(RawRecord):
    """Sports event participation."""

    sport: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("sportName", "sport", "sport_name"),
    )
    event_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("eventName", "event_name"))
    position: Optional[str] = None
    level: Optional[str] = None
    achievement: Optional[str] = None
    recorded_at: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("date", "eventDate", "createdAt"),
    )

    @field_validator("sport", "event_name", "position", "level", "achievement", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)


class JournalRecord(RawRecord):
    """Journal entry with an optional mood."""

    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @field_validator("title", "content", "mood", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Tuple[str, ...]:
        return tuple(to_string_list(value))


class GoalRecord(RawRecord):
    """Goal with a completion status and optional priority."""

    title: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    progress: Optional[float] = None
    recorded_at: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("targetDate", "date", "createdAt"),
    )

    @field_validator("title", "category", "status", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> Optional[str]:
        return lowercase(value)

    @field_validator("progress", mode="before")
    @classmethod
    def _coerce_progress(cls, value: Any) -> Optional[float]:
        return to_float(value)

    @property
    def is_completed(self) -> bool:
        return lowercase(self.status) == "completed"


class FeedbackRecord(RawRecord):
    """Teacher or coach feedback note."""

    text: Optional[str] = None
    category: Optional[str] = None
    feedback_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("type", "feedbackType"))
    rating: Optional[float] = None
    author: Optional[str] = Field(default=None, validation_alias=AliasChoices("author", "from"))

    @model_validator(mode="before")
    @classmethod
    def _pick_text(cls, data: Any) -> Any:
        # Older documents store the note under different keys
        if isinstance(data, dict) and not data.get("text"):
            for key in ("content", "message", "comment", "feedback"):
                if clean_whitespace(data.get(key)):
                    return {**data, "text": data[key]}
        return data

    @field_validator("text", "category", "author", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)

    @field_validator("feedback_type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Optional[str]:
        return lowercase(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> Optional[float]:
        return to_float(value)


class ProfileRecord(RawRecord):
    """Child profile."""

    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "name", "childName"),
    )
    age: Optional[int] = None
    grade: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("grade", "class", "className"),
    )
    dob: Optional[float] = Field(default=None, validation_alias=AliasChoices("dob", "dateOfBirth"))

    @field_validator("name", "grade", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return clean_whitespace(value)

    @field_validator("age", mode="before")
    @classmethod
    def _coerce_age(cls, value: Any) -> Optional[int]:
        age = to_integer(value)
        return age if age is not None and age >= 0 else None

    @field_validator("dob", mode="before")
    @classmethod
    def _coerce_dob(cls, value: Any) -> Optional[float]:
        return to_timestamp(value)


# ==============================================================================
# PROJECTION
# ==============================================================================

def project_records(
    model_cls: Type[RecordT],
    raw_records: Optional[Iterable[Any]]
) -> List[RecordT]:
    """
    Project raw documents into typed records.

    Non-mapping entries and documents that still fail validation are skipped;
    projection never raises.

    Args:
        model_cls: Target record model
        raw_records: Raw documents (None is treated as empty)

    Returns:
        Projected records in input order
    """
    projected: List[RecordT] = []

    for raw in raw_records or ():
        if isinstance(raw, model_cls):
            projected.append(raw)
            continue

        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping non-mapping {model_cls.__name__} entry: {type(raw).__name__}")
            continue

        try:
            projected.append(model_cls.model_validate(dict(raw)))
        except ValidationError as e:
            logger.debug(f"Skipping malformed {model_cls.__name__}: {e.error_count()} errors")

    return projected
