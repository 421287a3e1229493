"""
Engine Construction for the API.

Builds the engines once per process from the runtime settings. Routes receive them
through FastAPI's Depends(), so tests can swap in engines backed by in-memory
stores via app.dependency_overrides.
"""

from functools import lru_cache

from applyfill.config import settings
from applyfill.engines.answer_learner import AnswerLearningEngine
from applyfill.engines.field_mapper import FieldMappingEngine
from applyfill.utils.dynamodb_manager import DynamoDBAnswerStore, DynamoDBMappingStore
from applyfill.utils.llms import OpenAIAssistant
from applyfill.utils.logger import get_logger
from applyfill.utils.storage import InMemoryAnswerStore, InMemoryMappingStore

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_field_mapper() -> FieldMappingEngine:
    if settings.STORAGE_BACKEND == "dynamodb":
        store = DynamoDBMappingStore()
    else:
        store = InMemoryMappingStore()

    assistant = OpenAIAssistant()
    logger.info(
        "Initialized field mapping engine",
        extra={
            "extra_fields": {
                "storage": settings.STORAGE_BACKEND,
                "ai_available": assistant.is_available(),
            }
        },
    )
    return FieldMappingEngine(store, ai_assistant=assistant)


@lru_cache(maxsize=1)
def get_answer_learner() -> AnswerLearningEngine:
    if settings.STORAGE_BACKEND == "dynamodb":
        store = DynamoDBAnswerStore()
    else:
        store = InMemoryAnswerStore()

    logger.info(
        "Initialized answer learning engine",
        extra={"extra_fields": {"storage": settings.STORAGE_BACKEND}},
    )
    return AnswerLearningEngine(store)
