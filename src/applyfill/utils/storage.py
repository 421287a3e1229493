"""
Storage Interfaces for Engine Records.

The engines never talk to a datastore directly. They are constructed with one of
the stores defined here (or the DynamoDB stores in dynamodb_manager), which keeps
them free of global state and lets tests run against in-memory fakes.

CLASSES:
    MappingStore            (interface)
    AnswerStore             (interface)
    InMemoryMappingStore
    InMemoryAnswerStore

Note:
    The in-memory stores hand out copies. Mutating a returned record has no
    effect until it is passed back to save(), which mirrors how a real
    datastore behaves and keeps "last write wins" semantics visible in tests.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from applyfill.config.record_schemas import (
    LearnedAnswer,
    PlatformMapping,
    QuestionCategory,
)


class MappingStore(ABC):
    """Persistence for PlatformMapping records, keyed by platform label."""

    @abstractmethod
    def find_by_platform(self, platform: str) -> Optional[PlatformMapping]:
        """Return the mapping for a platform, or None if it has never been seen."""

    @abstractmethod
    def save(self, mapping: PlatformMapping) -> PlatformMapping:
        """Create or replace the mapping for mapping.platform."""


class AnswerStore(ABC):
    """Persistence for LearnedAnswer records."""

    @abstractmethod
    def find_by_id(self, answer_id: str) -> Optional[LearnedAnswer]:
        """Return the answer with the given id, or None."""

    @abstractmethod
    def find_by_pattern(self, user: str, pattern: str) -> Optional[LearnedAnswer]:
        """Return the user's answer for a normalized question pattern, or None."""

    @abstractmethod
    def find_by_category(
        self, user: str, category: QuestionCategory
    ) -> List[LearnedAnswer]:
        """Return all of the user's answers in a category."""

    @abstractmethod
    def find_by_user(self, user: str) -> List[LearnedAnswer]:
        """Return all of the user's answers."""

    @abstractmethod
    def save(self, answer: LearnedAnswer) -> LearnedAnswer:
        """Create or replace an answer by id."""


class InMemoryMappingStore(MappingStore):
    def __init__(self):
        self._mappings: Dict[str, PlatformMapping] = {}

    def find_by_platform(self, platform: str) -> Optional[PlatformMapping]:
        mapping = self._mappings.get(platform)
        return mapping.model_copy(deep=True) if mapping else None

    def save(self, mapping: PlatformMapping) -> PlatformMapping:
        self._mappings[mapping.platform] = mapping.model_copy(deep=True)
        return mapping


class InMemoryAnswerStore(AnswerStore):
    def __init__(self):
        self._answers: Dict[str, LearnedAnswer] = {}

    def find_by_id(self, answer_id: str) -> Optional[LearnedAnswer]:
        answer = self._answers.get(answer_id) if answer_id else None
        return answer.model_copy(deep=True) if answer else None

    def find_by_pattern(self, user: str, pattern: str) -> Optional[LearnedAnswer]:
        for answer in self._answers.values():
            if answer.user == user and answer.question_pattern == pattern:
                return answer.model_copy(deep=True)
        return None

    def find_by_category(
        self, user: str, category: QuestionCategory
    ) -> List[LearnedAnswer]:
        return [
            answer.model_copy(deep=True)
            for answer in self._answers.values()
            if answer.user == user and answer.category == category
        ]

    def find_by_user(self, user: str) -> List[LearnedAnswer]:
        return [
            answer.model_copy(deep=True)
            for answer in self._answers.values()
            if answer.user == user
        ]

    def save(self, answer: LearnedAnswer) -> LearnedAnswer:
        self._answers[answer.id] = answer.model_copy(deep=True)
        return answer
