"""
Record Schemas for Engine-Owned Data.

This module defines the Pydantic models for the records the engines persist through
the storage layer, plus the small value types they return.

Key Models:
    - QuestionCategory: Fixed enumeration of application-question types
    - FieldRule: A learned form-field -> profile-attribute association
    - PlatformMapping: All rules learned for one platform, with feedback counters
    - LearnedAnswer: A user's reusable answer to an essay-style question
    - AnswerSuggestion: What answer retrieval hands back to the caller

Note:
    Records are written with model_dump(mode="json") and read back with
    model_validate(), so they must stay JSON-serializable. The camelCase
    aliases are only used for API output (by_alias=True).
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from applyfill.config.validation_constants import (
    INITIAL_ANSWER_CONFIDENCE,
    INITIAL_PLATFORM_CONFIDENCE,
    INITIAL_RULE_CONFIDENCE,
)


class QuestionCategory(str, Enum):
    MOTIVATION = "MOTIVATION"  # Why do you want this job/company?
    EXPERIENCE = "EXPERIENCE"  # Tell us about your experience with X
    CHALLENGE = "CHALLENGE"  # Describe a challenge you overcame
    STRENGTH_WEAKNESS = "STRENGTH_WEAKNESS"  # Strengths/weaknesses
    SALARY = "SALARY"  # Salary expectations
    AVAILABILITY = "AVAILABILITY"  # When can you start?
    RELOCATION = "RELOCATION"  # Willing to relocate?
    COVER_LETTER = "COVER_LETTER"  # Cover letter / personal statement
    TECHNICAL = "TECHNICAL"  # Technical questions
    BEHAVIORAL = "BEHAVIORAL"  # Behavioral questions (STAR method)
    OTHER = "OTHER"


_record_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldRule(BaseModel):
    """A learned association between one form field and one profile attribute."""

    field_id: Optional[str] = None
    field_name: Optional[str] = None
    field_label: Optional[str] = None
    field_type: Optional[str] = None
    placeholder: Optional[str] = None
    profile_attribute: str
    confidence: float = Field(INITIAL_RULE_CONFIDENCE, ge=0.0, le=1.0)

    model_config = _record_config

    @property
    def identifier(self) -> Optional[str]:
        if self.field_id:
            return self.field_id
        return self.field_name or None

    def matches(self, field_key: Optional[str]) -> bool:
        """True when field_key equals this rule's field id or field name."""
        if not field_key:
            return False
        return field_key == self.field_id or field_key == self.field_name


class PlatformMapping(BaseModel):
    """
    Everything learned about the forms of one hosting platform.

    confidence_score is success_count / (success_count + correction_count)
    once any feedback exists, and the neutral 0.5 before that.
    """

    platform: str
    url_pattern: Optional[str] = None
    field_rules: List[FieldRule] = []
    success_count: int = 0
    correction_count: int = 0
    confidence_score: float = Field(INITIAL_PLATFORM_CONFIDENCE, ge=0.0, le=1.0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    model_config = _record_config


class LearnedAnswer(BaseModel):
    """A user's answer to an essay-style question, reusable across applications."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user: str
    original_question: str = ""
    question_pattern: str
    answer: str
    category: QuestionCategory = QuestionCategory.OTHER
    keywords: List[str] = []
    use_count: int = 0
    confidence: float = Field(INITIAL_ANSWER_CONFIDENCE, ge=0.0, le=1.0)
    source_platform: Optional[str] = None
    job_title_context: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    last_used_at: datetime = Field(default_factory=datetime.now)

    model_config = _record_config


class AnswerSuggestion(BaseModel):
    """The best stored answer for a question."""

    id: str
    answer: str
    confidence: float
    category: QuestionCategory

    model_config = _record_config
