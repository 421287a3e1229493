"""
Question classifier.

Assigns an application question to one of the fixed QuestionCategory values by
case-insensitive phrase matching. Categories are tested in the order of
CATEGORY_PHRASES and the first one with a phrase hit wins; anything else is OTHER.

    categorize
"""

from typing import Optional

from applyfill.config.record_schemas import QuestionCategory
from applyfill.utils.matching import PhraseTable, first_match

CATEGORY_PHRASES: PhraseTable = (
    (
        QuestionCategory.MOTIVATION.value,
        (
            "why do you want",
            "why are you interested",
            "why this company",
            "why this role",
            "why should we hire",
            "what attracts you",
        ),
    ),
    (
        QuestionCategory.EXPERIENCE.value,
        (
            "tell us about your experience",
            "describe your experience",
            "what experience do you have",
            "years of experience",
        ),
    ),
    (
        QuestionCategory.CHALLENGE.value,
        (
            "challenge",
            "difficult situation",
            "problem you solved",
            "obstacle",
            "conflict",
            "disagreement",
        ),
    ),
    (
        QuestionCategory.STRENGTH_WEAKNESS.value,
        (
            "strength",
            "weakness",
            "greatest asset",
            "area of improvement",
            "what makes you unique",
        ),
    ),
    (
        QuestionCategory.SALARY.value,
        ("salary", "compensation", "pay", "rate", "expectations"),
    ),
    (
        QuestionCategory.AVAILABILITY.value,
        (
            "when can you start",
            "availability",
            "notice period",
            "start date",
            "available to begin",
        ),
    ),
    (
        QuestionCategory.RELOCATION.value,
        ("relocation", "relocate", "willing to move", "work location"),
    ),
    (
        QuestionCategory.COVER_LETTER.value,
        (
            "cover letter",
            "personal statement",
            "introduce yourself",
            "tell us about yourself",
            "about you",
        ),
    ),
    (
        QuestionCategory.TECHNICAL.value,
        (
            "technical",
            "programming",
            "code",
            "algorithm",
            "system design",
            "technology",
            "framework",
            "language",
        ),
    ),
    (
        QuestionCategory.BEHAVIORAL.value,
        (
            "tell me about a time",
            "give an example",
            "describe a situation",
            "how did you handle",
            "walk me through",
        ),
    ),
)


def categorize(question: Optional[str]) -> QuestionCategory:
    """
    Classify a question.

    Args:
        question: The question text. None and empty strings are allowed.

    Returns:
        QuestionCategory: The first matching category, or OTHER.
    """

    label = first_match(CATEGORY_PHRASES, question)
    return QuestionCategory(label) if label else QuestionCategory.OTHER
