"""
Request Schemas for the Extension API.

This module defines Pydantic models for validating the JSON bodies the browser
extension sends, and for shaping the autofill response. Keys are camelCase on the
wire (matching the extension) and snake_case in Python.

Key Models:
    - AutofillRequest: Observed form fields plus the profile to fill them from
    - AutofillResponse: Identifier -> value mapping returned to the extension
    - LearnAnswerRequest: A submitted answer to remember for later reuse
    - AnswerEditedRequest: The edited text of a suggested answer
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from applyfill.config.profile_schemas import FormField, UserProfile


class AutofillRequest(BaseModel):
    """
    Body of POST /api/extension/autofill.

    Example:
        {
            "url": "https://boards.greenhouse.io/acme/jobs/1",
            "userEmail": "ada@example.com",
            "formFields": [{"id": "first_name", "label": "First Name"}],
            "profile": {"firstName": "Ada"}
        }
    """

    url: str = ""
    user_email: Optional[str] = None
    form_fields: List[FormField] = []
    profile: Optional[UserProfile] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AutofillResponse(BaseModel):
    """Values to type into the form, keyed by field id (or name)."""

    mapping: Dict[str, str] = {}
    confidence: float = 0.0
    detected_platform: str = ""
    message: str = ""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LearnAnswerRequest(BaseModel):
    """Body of POST /api/extension/learn-answer."""

    user_email: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    platform: Optional[str] = None
    job_title: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("question", "answer")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject strings that contain only whitespace."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class AnswerEditedRequest(BaseModel):
    """Body of POST /api/extension/answer-edited. The answer id is a query parameter."""

    new_answer: str = Field(..., min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
