"""
Learns users' answers to essay-style application questions and suggests them again.

CLASSES:
    AnswerLearningEngine

FUNCTIONS:
    normalize_question
    extract_keywords
    similarity

Retrieval is two-tier:
    Tier 1: the user's answer to exactly the same (normalized) question
    Tier 2: the most similar answer in the same question category

Confidence of an answer moves between 0.3 and 1.0:
    +0.1 when the same question is taught again
    +0.05 when a suggestion is used as-is
    -0.05 when a suggestion is edited before use
"""

from datetime import datetime
from typing import Iterable, List, Optional

from applyfill.config.record_schemas import (
    AnswerSuggestion,
    LearnedAnswer,
    QuestionCategory,
)
from applyfill.config.validation_constants import (
    CANDIDATE_MIN_CONFIDENCE,
    EDITED_PENALTY,
    EXACT_MATCH_MIN_CONFIDENCE,
    INITIAL_ANSWER_CONFIDENCE,
    MAX_ANSWER_CONFIDENCE,
    MIN_ANSWER_CONFIDENCE,
    MIN_KEYWORD_LENGTH,
    MIN_SIMILARITY,
    RELEARN_BOOST,
    STOP_WORDS,
    USED_BOOST,
)
from applyfill.engines.classifier import categorize
from applyfill.utils.exceptions import InvalidRequestError
from applyfill.utils.logger import get_logger
from applyfill.utils.matching import clamp, normalize_text, tokenize
from applyfill.utils.storage import AnswerStore

logger = get_logger(__name__)


def normalize_question(question: Optional[str]) -> str:
    """Lowercase, drop punctuation, collapse whitespace. Used as the exact-match key."""

    return normalize_text(question)


def extract_keywords(question: Optional[str]) -> List[str]:
    """
    Extract the meaningful words of a question.

    Drops stop-words and words of MIN_KEYWORD_LENGTH characters or fewer, and
    removes duplicates while keeping first-seen order.

    "Tell me about a challenge you overcame" -> ["challenge", "overcame"]
    """

    keywords = []
    seen = set()
    for word in tokenize(question):
        if len(word) <= MIN_KEYWORD_LENGTH or word in STOP_WORDS or word in seen:
            continue
        keywords.append(word)
        seen.add(word)
    return keywords


def similarity(words: List[str], keywords: Iterable[str]) -> float:
    """
    Overlap ratio between a question's words and a stored answer's keywords.

    (question words found in keywords) / max(len(words), len(keywords))

    Every occurrence of a question word counts, so a repeated word counts
    twice. The larger of the two sizes is the denominator (not the union size).
    """

    keyword_set = set(keywords)
    if not keyword_set:
        return 0.0
    overlap = sum(1 for word in words if word in keyword_set)
    return overlap / max(len(words), len(keyword_set))


class AnswerLearningEngine:
    """Stores, retrieves and reinforces a user's answers to application questions.

    Args:
        store (AnswerStore): Persistence for LearnedAnswer records.
    """

    def __init__(self, store: AnswerStore):
        self.store = store

    # ------------------------------
    # Public interface
    # ------------------------------
    def find_best_answer(
        self, user: str, question: Optional[str]
    ) -> Optional[AnswerSuggestion]:
        """Find the stored answer that best fits a question.

        Tier 1 returns the answer to the identical question if its confidence is
        above EXACT_MATCH_MIN_CONFIDENCE. Tier 2 scores every answer in the same
        category whose confidence is above CANDIDATE_MIN_CONFIDENCE and returns
        the best one if its similarity is above MIN_SIMILARITY. Equal scores are
        broken by higher confidence, then more recent use, then id.

        Args:
            user (str): The user identifier.
            question (str): The question text.

        Returns:
            Optional[AnswerSuggestion]: The best answer, or None.

        Raises:
            InvalidRequestError: If user is empty.
        """

        self._require_user(user)
        pattern = normalize_question(question)
        category = categorize(question)

        # Tier 1: exact pattern match
        exact = self.store.find_by_pattern(user, pattern)
        if exact is not None and exact.confidence > EXACT_MATCH_MIN_CONFIDENCE:
            logger.info(
                "Found exact answer match",
                extra={
                    "extra_fields": {
                        "answer_id": exact.id,
                        "confidence": exact.confidence,
                    }
                },
            )
            return self._to_suggestion(exact)

        # Tier 2: category + similarity
        words = pattern.split() if pattern else []
        best: Optional[LearnedAnswer] = None
        best_key = None
        for candidate in self.store.find_by_category(user, category):
            if candidate.confidence <= CANDIDATE_MIN_CONFIDENCE:
                continue
            score = similarity(words, candidate.keywords)
            key = (
                score,
                candidate.confidence,
                candidate.last_used_at.timestamp(),
                candidate.id,
            )
            if best_key is None or key > best_key:
                best, best_key = candidate, key

        if best is not None and best_key[0] > MIN_SIMILARITY:
            logger.info(
                "Found category answer match",
                extra={
                    "extra_fields": {
                        "answer_id": best.id,
                        "category": category.value,
                        "similarity": round(best_key[0], 3),
                    }
                },
            )
            return self._to_suggestion(best)

        logger.info(
            "No suitable answer found",
            extra={"extra_fields": {"category": category.value}},
        )
        return None

    def learn_answer(
        self,
        user: str,
        question: str,
        answer: str,
        platform: Optional[str] = None,
        job_title: Optional[str] = None,
    ) -> LearnedAnswer:
        """Remember the user's answer to a question.

        Teaching the same (normalized) question again replaces the answer text
        and raises its confidence.

        Args:
            user (str): The user identifier.
            question (str): The question as shown on the form.
            answer (str): The user's answer.
            platform (str, optional): Where the question was answered.
            job_title (str, optional): The job being applied for.

        Returns:
            LearnedAnswer: The stored record.

        Raises:
            InvalidRequestError: If user is empty.
        """

        self._require_user(user)
        pattern = normalize_question(question)
        now = datetime.now()

        record = self.store.find_by_pattern(user, pattern)
        if record is not None:
            record.answer = answer
            record.use_count += 1
            record.confidence = clamp(
                record.confidence + RELEARN_BOOST,
                MIN_ANSWER_CONFIDENCE,
                MAX_ANSWER_CONFIDENCE,
            )
            record.last_used_at = now
        else:
            record = LearnedAnswer(
                user=user,
                original_question=question or "",
                question_pattern=pattern,
                answer=answer,
                category=categorize(question),
                keywords=extract_keywords(question),
                use_count=0,
                confidence=INITIAL_ANSWER_CONFIDENCE,
                source_platform=platform,
                job_title_context=job_title,
                created_at=now,
                last_used_at=now,
            )

        saved = self.store.save(record)
        logger.info(
            "Learned answer",
            extra={
                "extra_fields": {
                    "answer_id": saved.id,
                    "category": saved.category.value,
                    "confidence": saved.confidence,
                    "use_count": saved.use_count,
                }
            },
        )
        return saved

    def record_answer_used(self, answer_id: Optional[str]) -> None:
        """Reinforce an answer the user accepted as-is. Unknown ids are ignored."""

        record = self.store.find_by_id(answer_id) if answer_id else None
        if record is None:
            logger.info(
                "Answer to record use for not found",
                extra={"extra_fields": {"answer_id": answer_id}},
            )
            return

        record.use_count += 1
        record.confidence = clamp(
            record.confidence + USED_BOOST, MIN_ANSWER_CONFIDENCE, MAX_ANSWER_CONFIDENCE
        )
        record.last_used_at = datetime.now()
        self.store.save(record)
        logger.info(
            "Recorded answer use",
            extra={
                "extra_fields": {"answer_id": record.id, "confidence": record.confidence}
            },
        )

    def record_answer_edited(
        self, answer_id: Optional[str], new_answer: Optional[str]
    ) -> None:
        """Store the user's edited version of a suggestion and lower its confidence.

        Unknown ids are ignored.
        """

        record = self.store.find_by_id(answer_id) if answer_id else None
        if record is None:
            logger.info(
                "Answer to record edit for not found",
                extra={"extra_fields": {"answer_id": answer_id}},
            )
            return

        if new_answer is not None:
            record.answer = new_answer
        record.confidence = clamp(
            record.confidence - EDITED_PENALTY,
            MIN_ANSWER_CONFIDENCE,
            MAX_ANSWER_CONFIDENCE,
        )
        record.last_used_at = datetime.now()
        self.store.save(record)
        logger.info(
            "Recorded answer edit",
            extra={
                "extra_fields": {"answer_id": record.id, "confidence": record.confidence}
            },
        )

    def get_user_answers(self, user: str) -> List[LearnedAnswer]:
        """All of the user's answers, most used first."""

        self._require_user(user)
        answers = self.store.find_by_user(user)
        return sorted(answers, key=lambda a: a.use_count, reverse=True)

    def get_answers_by_category(
        self, user: str, category: QuestionCategory
    ) -> List[LearnedAnswer]:
        self._require_user(user)
        return self.store.find_by_category(user, category)

    @staticmethod
    def categorize_question(question: Optional[str]) -> QuestionCategory:
        return categorize(question)

    # ------------------------------
    # Internal functions
    # ------------------------------
    @staticmethod
    def _require_user(user: Optional[str]) -> None:
        if not user or not str(user).strip():
            raise InvalidRequestError("A user identifier is required")

    @staticmethod
    def _to_suggestion(record: LearnedAnswer) -> AnswerSuggestion:
        return AnswerSuggestion(
            id=record.id,
            answer=record.answer,
            confidence=record.confidence,
            category=record.category,
        )
