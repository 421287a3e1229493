# ---------- TESTS FOR ANSWER LEARNING ENGINE ----------

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from applyfill.config.record_schemas import LearnedAnswer, QuestionCategory
from applyfill.engines.answer_learner import (
    AnswerLearningEngine,
    extract_keywords,
    normalize_question,
    similarity,
)
from applyfill.utils.exceptions import InvalidRequestError
from applyfill.utils.storage import InMemoryAnswerStore

USER = "ada@example.com"
MOTIVATION_QUESTION = "Why do you want to work here?"


@pytest.fixture
def store():
    return InMemoryAnswerStore()


@pytest.fixture
def learner(store):
    return AnswerLearningEngine(store)


# --- Helpers ---


def test_normalize_question():
    assert normalize_question(MOTIVATION_QUESTION) == "why do you want to work here"
    assert normalize_question(None) == ""


def test_extract_keywords_drops_stop_words_and_short_words():
    assert extract_keywords("Tell me about a challenge you overcame") == [
        "challenge",
        "overcame",
    ]


def test_extract_keywords_deduplicates_in_order():
    assert extract_keywords("Python python and Django, PYTHON") == ["python", "django"]


def test_similarity_uses_larger_size_as_denominator():
    assert similarity(["greatest", "strength"], ["what", "greatest", "strength"]) == pytest.approx(2 / 3)
    assert similarity(["a", "b", "c", "d"], ["a"]) == pytest.approx(1 / 4)
    assert similarity([], []) == 0.0


def test_similarity_counts_repeated_question_words():
    assert similarity(["team", "team", "lead"], ["team"]) == pytest.approx(2 / 3)


# --- Learning and exact retrieval ---


def test_learn_then_find_exact_match(learner):
    learned = learner.learn_answer(USER, MOTIVATION_QUESTION, "I like the mission.", "greenhouse")

    assert learned.category == QuestionCategory.MOTIVATION
    assert learned.confidence == 0.6
    assert learned.use_count == 0
    assert learned.source_platform == "greenhouse"

    suggestion = learner.find_best_answer(USER, "why do you want to WORK here")
    assert suggestion is not None
    assert suggestion.id == learned.id
    assert suggestion.answer == "I like the mission."
    assert suggestion.confidence == 0.6
    assert suggestion.category == QuestionCategory.MOTIVATION


def test_relearning_same_question_replaces_answer(learner, store):
    first = learner.learn_answer(USER, MOTIVATION_QUESTION, "Old answer")
    second = learner.learn_answer(USER, "Why do you want to work here", "New answer")

    assert second.id == first.id
    assert second.answer == "New answer"
    assert second.use_count == 1
    assert second.confidence == 0.7
    assert len(store.find_by_user(USER)) == 1


def test_answers_are_kept_per_user(learner):
    learner.learn_answer(USER, MOTIVATION_QUESTION, "Ada's answer")

    assert learner.find_best_answer("grace@example.com", MOTIVATION_QUESTION) is None


# --- Category similarity retrieval ---


def test_similar_question_in_same_category(learner):
    learned = learner.learn_answer(USER, "What is your greatest strength?", "Persistence")

    suggestion = learner.find_best_answer(USER, "Greatest strength?")

    assert suggestion is not None
    assert suggestion.id == learned.id


def test_dissimilar_question_in_same_category(learner):
    learner.learn_answer(USER, "What is your greatest strength?", "Persistence")

    assert learner.find_best_answer(USER, "What is your biggest weakness?") is None


def test_no_answers_at_all(learner):
    assert learner.find_best_answer(USER, MOTIVATION_QUESTION) is None


def test_similarity_tie_broken_by_confidence(learner, store):
    now = datetime.now()
    for answer_id, confidence in (("low", 0.6), ("high", 0.9)):
        store.save(
            LearnedAnswer(
                id=answer_id,
                user=USER,
                original_question="Stored conflict question",
                question_pattern=f"stored conflict question {answer_id}",
                answer=f"{answer_id} answer",
                category=QuestionCategory.CHALLENGE,
                keywords=["conflict", "team"],
                confidence=confidence,
                last_used_at=now - timedelta(days=1) if answer_id == "high" else now,
            )
        )

    suggestion = learner.find_best_answer(USER, "Describe a conflict in your team")

    assert suggestion is not None
    assert suggestion.id == "high"


def test_low_confidence_candidates_are_skipped(learner, store):
    store.save(
        LearnedAnswer(
            user=USER,
            question_pattern="stored",
            answer="Weak answer",
            category=QuestionCategory.STRENGTH_WEAKNESS,
            keywords=["greatest", "strength"],
            confidence=0.4,
        )
    )

    assert learner.find_best_answer(USER, "Greatest strength?") is None


# --- Feedback ---


def test_record_answer_used_caps_confidence(learner, store):
    learned = learner.learn_answer(USER, MOTIVATION_QUESTION, "Mission")

    for _ in range(20):
        learner.record_answer_used(learned.id)

    record = store.find_by_id(learned.id)
    assert record.confidence == 1.0
    assert record.use_count == 20


def test_record_answer_edited_floors_confidence(learner, store):
    learned = learner.learn_answer(USER, MOTIVATION_QUESTION, "Mission")

    for _ in range(20):
        learner.record_answer_edited(learned.id, "Edited mission")

    record = store.find_by_id(learned.id)
    assert record.confidence == 0.3
    assert record.answer == "Edited mission"


def test_record_answer_edited_once(learner, store):
    learned = learner.learn_answer(USER, MOTIVATION_QUESTION, "Mission")

    learner.record_answer_edited(learned.id, "Better mission")

    record = store.find_by_id(learned.id)
    assert record.confidence == 0.55
    assert record.answer == "Better mission"


def test_feedback_for_unknown_answer_is_ignored(learner, store):
    learner.record_answer_used("missing")
    learner.record_answer_edited("missing", "text")
    learner.record_answer_used(None)

    assert store.find_by_user(USER) == []


# --- Listing ---


def test_get_user_answers_most_used_first(learner):
    rarely = learner.learn_answer(USER, "What are your salary expectations?", "120k")
    often = learner.learn_answer(USER, MOTIVATION_QUESTION, "Mission")
    learner.record_answer_used(often.id)
    learner.record_answer_used(often.id)

    answers = learner.get_user_answers(USER)

    assert [a.id for a in answers] == [often.id, rarely.id]


def test_get_answers_by_category(learner):
    learner.learn_answer(USER, "What are your salary expectations?", "120k")
    learner.learn_answer(USER, MOTIVATION_QUESTION, "Mission")

    answers = learner.get_answers_by_category(USER, QuestionCategory.SALARY)

    assert [a.answer for a in answers] == ["120k"]


def test_categorize_question(learner):
    assert learner.categorize_question("When can you start?") == QuestionCategory.AVAILABILITY


# --- Preconditions ---


@pytest.mark.parametrize("user", ["", "   ", None])
def test_empty_user_is_rejected(learner, user):
    with pytest.raises(InvalidRequestError):
        learner.find_best_answer(user, MOTIVATION_QUESTION)
    with pytest.raises(InvalidRequestError):
        learner.learn_answer(user, MOTIVATION_QUESTION, "Mission")
    with pytest.raises(InvalidRequestError):
        learner.get_user_answers(user)


def test_challenge_questions_reach_each_other_only_with_keyword_overlap(learner):
    learned = learner.learn_answer(
        USER, "Tell me about a challenge you overcame", "Migrated a legacy system", "lever", "SWE"
    )
    assert learned.keywords == ["challenge", "overcame"]
    assert learned.job_title_context == "SWE"

    # Same category, no shared keywords
    assert learner.find_best_answer(USER, "Describe a difficult situation you faced") is None

    # Same category, 2 of 5 words shared
    suggestion = learner.find_best_answer(USER, "Which challenge have you overcame")
    assert suggestion is not None
    assert suggestion.id == learned.id
    assert suggestion.category == QuestionCategory.CHALLENGE


def test_unreadable_store_does_not_duplicate_answers(learner, store):
    learner.learn_answer(USER, MOTIVATION_QUESTION, "Mission")

    with patch.object(store, "find_by_pattern", side_effect=RuntimeError("throttled")):
        with pytest.raises(RuntimeError):
            learner.learn_answer(USER, MOTIVATION_QUESTION, "Another mission")

    answers = store.find_by_user(USER)
    assert len(answers) == 1
    assert answers[0].answer == "Mission"
