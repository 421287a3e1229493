"""
Configuration Module for ApplyFill.

Re-exports the schemas and constants from the focused modules:

- profile_schemas.py: UserProfile and FormField (read by the engines, never owned)
- record_schemas.py: PlatformMapping, FieldRule, LearnedAnswer and QuestionCategory
- request_schemas.py: Extension API request/response models
- validation_constants.py: Attribute vocabulary, thresholds and confidence weights
- settings.py: Environment-driven runtime settings
- prompts.py: AI assistant prompts

For new code, import directly from the focused modules:
    from applyfill.config.record_schemas import LearnedAnswer
"""

from applyfill.config.profile_schemas import (
    UserProfile,
    FormField,
)

from applyfill.config.record_schemas import (
    QuestionCategory,
    FieldRule,
    PlatformMapping,
    LearnedAnswer,
    AnswerSuggestion,
)

from applyfill.config.request_schemas import (
    AutofillRequest,
    AutofillResponse,
    LearnAnswerRequest,
    AnswerEditedRequest,
)

from applyfill.config.validation_constants import PROFILE_ATTRIBUTES, STOP_WORDS

__all__ = [
    # Profile schemas
    "UserProfile",
    "FormField",
    # Record schemas
    "QuestionCategory",
    "FieldRule",
    "PlatformMapping",
    "LearnedAnswer",
    "AnswerSuggestion",
    # Request schemas
    "AutofillRequest",
    "AutofillResponse",
    "LearnAnswerRequest",
    "AnswerEditedRequest",
    # Constants
    "PROFILE_ATTRIBUTES",
    "STOP_WORDS",
]
