# ---------- TESTS FOR API SERVER ----------

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from applyfill.api.dependencies import get_answer_learner, get_field_mapper
from applyfill.api.server import app
from applyfill.engines.answer_learner import AnswerLearningEngine
from applyfill.engines.field_mapper import FieldMappingEngine
from applyfill.utils.storage import (
    AnswerStore,
    InMemoryAnswerStore,
    InMemoryMappingStore,
)

client = TestClient(app)

URL = "https://boards.greenhouse.io/acme/jobs/123"
USER = "ada@example.com"
MOTIVATION_QUESTION = "Why do you want to work here?"

# Mock payload
mock_payload = {
    "url": URL,
    "userEmail": USER,
    "formFields": [
        {"id": "first_name", "label": "First Name", "type": "text"},
        {"id": "email", "label": "Email Address", "type": "email"},
        {"id": "why", "label": MOTIVATION_QUESTION, "type": "textarea"},
    ],
    "profile": {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": USER,
        "requiresSponsorship": False,
    },
}


@pytest.fixture(autouse=True)
def engines():
    """Serve every test from fresh in-memory engines without AI."""
    field_mapper = FieldMappingEngine(InMemoryMappingStore())
    answer_learner = AnswerLearningEngine(InMemoryAnswerStore())
    app.dependency_overrides[get_field_mapper] = lambda: field_mapper
    app.dependency_overrides[get_answer_learner] = lambda: answer_learner
    yield field_mapper, answer_learner
    app.dependency_overrides.clear()


def learn(question=MOTIVATION_QUESTION, answer="I like the mission."):
    response = client.post(
        "/api/extension/learn-answer",
        json={"userEmail": USER, "question": question, "answer": answer},
    )
    assert response.status_code == 200
    return response.json()


# --- Autofill ---


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_autofill_maps_profile_fields():
    response = client.post("/api/extension/autofill", json=mock_payload)

    assert response.status_code == 200
    data = response.json()
    assert data["mapping"] == {"first_name": "Ada", "email": USER}
    assert data["confidence"] == 0.7
    assert data["detectedPlatform"] == "greenhouse"
    assert data["message"] == "Found 2 fields to autofill."


def test_autofill_fills_learned_answers():
    learn()

    response = client.post("/api/extension/autofill", json=mock_payload)

    data = response.json()
    assert data["mapping"]["why"] == "I like the mission."
    assert data["message"] == "Found 3 fields to autofill."


def test_autofill_without_profile_or_user():
    response = client.post(
        "/api/extension/autofill", json={"url": URL, "formFields": mock_payload["formFields"]}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["mapping"] == {}
    assert data["confidence"] == 0.0
    assert "profile" in data["message"]


def test_autofill_with_nothing_to_fill():
    payload = {**mock_payload, "formFields": [{"id": "color", "label": "Favourite colour"}]}

    data = client.post("/api/extension/autofill", json=payload).json()

    assert data["mapping"] == {}
    assert data["confidence"] == 0.0


def test_autofill_validation_error():
    response = client.post("/api/extension/autofill", json={"formFields": "not a list"})

    assert response.status_code == 422
    assert "message" in response.json()


# --- Mapping feedback ---


def test_mapping_not_found():
    response = client.get("/api/extension/mapping", params={"url": URL})
    assert response.status_code == 404


def test_feedback_success_and_correction():
    client.post("/api/extension/autofill", json=mock_payload)

    response = client.post("/api/extension/feedback/success", params={"url": URL})
    assert response.status_code == 200

    response = client.post(
        "/api/extension/feedback/correction",
        params={"url": URL, "fieldId": "email", "correctProfileField": "firstName"},
    )
    assert response.status_code == 200

    mapping = client.get("/api/extension/mapping", params={"url": URL}).json()
    assert mapping["platform"] == "greenhouse"
    assert mapping["successCount"] == 1
    assert mapping["correctionCount"] == 1
    assert mapping["confidenceScore"] == 0.5
    rule = next(r for r in mapping["fieldRules"] if r["fieldId"] == "email")
    assert rule["profileAttribute"] == "firstName"


def test_feedback_requires_url():
    response = client.post("/api/extension/feedback/success")
    assert response.status_code == 422


# --- Learned answers ---


def test_learn_answer():
    data = learn()

    assert data["category"] == "MOTIVATION"
    assert data["confidence"] == 0.6
    assert data["questionPattern"] == "why do you want to work here"
    assert data["user"] == USER


def test_learn_answer_rejects_blank_answer():
    response = client.post(
        "/api/extension/learn-answer",
        json={"userEmail": USER, "question": MOTIVATION_QUESTION, "answer": "   "},
    )
    assert response.status_code == 422


def test_suggest_answer():
    response = client.get(
        "/api/extension/suggest-answer",
        params={"userEmail": USER, "question": "What are your salary expectations?"},
    )
    assert response.json() == {"found": False, "category": "SALARY"}

    learned = learn()
    response = client.get(
        "/api/extension/suggest-answer",
        params={"userEmail": USER, "question": MOTIVATION_QUESTION},
    )

    data = response.json()
    assert data["found"] is True
    assert data["answer"] == "I like the mission."
    assert data["answerId"] == learned["id"]
    assert data["confidence"] == 0.6


def test_suggest_answer_with_empty_user():
    response = client.get(
        "/api/extension/suggest-answer",
        params={"userEmail": "", "question": MOTIVATION_QUESTION},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"


def test_answer_used_and_edited():
    learned = learn()

    response = client.post("/api/extension/answer-used", params={"answerId": learned["id"]})
    assert response.status_code == 200

    response = client.post(
        "/api/extension/answer-edited",
        params={"answerId": learned["id"]},
        json={"newAnswer": "I love the mission."},
    )
    assert response.status_code == 200

    answers = client.get("/api/extension/learned-answers", params={"userEmail": USER}).json()
    assert len(answers) == 1
    assert answers[0]["answer"] == "I love the mission."
    assert answers[0]["useCount"] == 1
    assert answers[0]["confidence"] == 0.6


def test_feedback_for_unknown_answer():
    response = client.post("/api/extension/answer-used", params={"answerId": "missing"})
    assert response.status_code == 200


def test_learned_answers_by_category():
    learn()
    learn("What are your salary expectations?", "120k")

    response = client.get(
        "/api/extension/learned-answers",
        params={"userEmail": USER, "category": "SALARY"},
    )

    assert response.status_code == 200
    assert [a["answer"] for a in response.json()] == ["120k"]


def test_learned_answers_invalid_category():
    response = client.get(
        "/api/extension/learned-answers",
        params={"userEmail": USER, "category": "NOPE"},
    )
    assert response.status_code == 422


def test_categorize():
    response = client.get("/api/extension/categorize", params={"question": "When can you start?"})
    assert response.json() == {"category": "AVAILABILITY"}


def test_answer_edited_requires_body():
    learned = learn()

    response = client.post(
        "/api/extension/answer-edited",
        params={"answerId": learned["id"], "newAnswer": "In the URL"},
    )

    assert response.status_code == 422


def test_autofill_when_answers_cannot_be_read():
    store = MagicMock(spec=AnswerStore)
    store.find_by_pattern.side_effect = RuntimeError("throttled")
    app.dependency_overrides[get_answer_learner] = lambda: AnswerLearningEngine(store)

    response = client.post("/api/extension/autofill", json=mock_payload)

    assert response.status_code == 200
    assert response.json()["mapping"] == {"first_name": "Ada", "email": USER}
