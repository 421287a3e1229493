"""
DynamoDB Stores for Engine Records.

This module persists PlatformMapping and LearnedAnswer records in DynamoDB.
It implements the MappingStore and AnswerStore interfaces so the engines can be
pointed at DynamoDB without knowing about it.

Tables:
    FORM_MAPPINGS_TABLE_NAME: partition key "platform"
    LEARNED_ANSWERS_TABLE_NAME: partition key "id", with a global secondary
        index (LEARNED_ANSWERS_USER_INDEX) partitioned by "user"

Note:
    The DynamoDB resource is created lazily on first use so that importing this
    module never requires AWS credentials. DynamoDB does not accept Python floats,
    so records are converted to Decimal on write and back to int/float on read.

    Failures are logged and re-raised for reads and writes alike, so a caller can
    tell a missing record (None) from an unreadable one.
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key

from applyfill.config import settings
from applyfill.config.record_schemas import (
    LearnedAnswer,
    PlatformMapping,
    QuestionCategory,
)
from applyfill.utils.logger import get_logger
from applyfill.utils.storage import AnswerStore, MappingStore

logger = get_logger(__name__)

# Initialize DynamoDB resource (lazy initialization)
_dynamodb_resource: Optional[Any] = None


def get_dynamodb_resource() -> Any:
    """Get or create the DynamoDB resource using lazy initialization.

    Returns:
        boto3.resource: DynamoDB resource instance.

    Note:
        Uses a module-level variable to cache the resource across calls.
    """
    global _dynamodb_resource
    if _dynamodb_resource is None:
        _dynamodb_resource = boto3.resource("dynamodb")
    return _dynamodb_resource


def to_item(record: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a JSON-mode record dump into a DynamoDB item (floats -> Decimal)."""
    return json.loads(json.dumps(record), parse_float=Decimal)


def from_item(value: Any) -> Any:
    """Convert a DynamoDB item back into plain Python types (Decimal -> int/float)."""
    if isinstance(value, dict):
        return {k: from_item(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_item(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _error_fields(operation: str, e: Exception, **fields) -> Dict[str, Any]:
    return {
        "extra_fields": {
            "operation": operation,
            "error": str(e),
            "error_type": type(e).__name__,
            **fields,
        }
    }


class DynamoDBMappingStore(MappingStore):
    """PlatformMapping records in a table keyed by platform."""

    def __init__(self, table_name: Optional[str] = None):
        self.table_name = table_name or settings.FORM_MAPPINGS_TABLE_NAME

    def _table(self):
        return get_dynamodb_resource().Table(self.table_name)

    def find_by_platform(self, platform: str) -> Optional[PlatformMapping]:
        try:
            response = self._table().get_item(Key={"platform": platform})
        except Exception as e:
            logger.error(
                "Failed to get platform mapping from DynamoDB",
                extra=_error_fields("find_by_platform", e, platform=platform),
                exc_info=True,
            )
            raise

        if "Item" not in response:
            return None
        return PlatformMapping.model_validate(from_item(response["Item"]))

    def save(self, mapping: PlatformMapping) -> PlatformMapping:
        try:
            self._table().put_item(Item=to_item(mapping.model_dump(mode="json")))
        except Exception as e:
            logger.error(
                "Failed to store platform mapping in DynamoDB",
                extra=_error_fields("save_mapping", e, platform=mapping.platform),
                exc_info=True,
            )
            raise

        logger.info(
            "Stored platform mapping",
            extra={
                "extra_fields": {
                    "platform": mapping.platform,
                    "rules": len(mapping.field_rules),
                    "confidence_score": mapping.confidence_score,
                }
            },
        )
        return mapping


class DynamoDBAnswerStore(AnswerStore):
    """LearnedAnswer records in a table keyed by id, indexed by user."""

    def __init__(self, table_name: Optional[str] = None, user_index: Optional[str] = None):
        self.table_name = table_name or settings.LEARNED_ANSWERS_TABLE_NAME
        self.user_index = user_index or settings.LEARNED_ANSWERS_USER_INDEX

    def _table(self):
        return get_dynamodb_resource().Table(self.table_name)

    def _query_user(self, user: str, filter_expression=None) -> List[LearnedAnswer]:
        """Query the user index, following pagination."""
        query_kwargs: Dict[str, Any] = {
            "IndexName": self.user_index,
            "KeyConditionExpression": Key("user").eq(user),
        }
        if filter_expression is not None:
            query_kwargs["FilterExpression"] = filter_expression

        table = self._table()
        items: List[Dict[str, Any]] = []
        while True:
            response = table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query_kwargs["ExclusiveStartKey"] = last_key

        return [LearnedAnswer.model_validate(from_item(item)) for item in items]

    def find_by_id(self, answer_id: str) -> Optional[LearnedAnswer]:
        if not answer_id:
            return None
        try:
            response = self._table().get_item(Key={"id": answer_id})
        except Exception as e:
            logger.error(
                "Failed to get learned answer from DynamoDB",
                extra=_error_fields("find_by_id", e, answer_id=answer_id),
                exc_info=True,
            )
            raise

        if "Item" not in response:
            return None
        return LearnedAnswer.model_validate(from_item(response["Item"]))

    def find_by_pattern(self, user: str, pattern: str) -> Optional[LearnedAnswer]:
        try:
            answers = self._query_user(user, Attr("question_pattern").eq(pattern))
        except Exception as e:
            logger.error(
                "Failed to query learned answers by pattern",
                extra=_error_fields("find_by_pattern", e, user=user),
                exc_info=True,
            )
            raise
        return answers[0] if answers else None

    def find_by_category(
        self, user: str, category: QuestionCategory
    ) -> List[LearnedAnswer]:
        try:
            return self._query_user(user, Attr("category").eq(category.value))
        except Exception as e:
            logger.error(
                "Failed to query learned answers by category",
                extra=_error_fields(
                    "find_by_category", e, user=user, category=category.value
                ),
                exc_info=True,
            )
            raise

    def find_by_user(self, user: str) -> List[LearnedAnswer]:
        try:
            return self._query_user(user)
        except Exception as e:
            logger.error(
                "Failed to query learned answers by user",
                extra=_error_fields("find_by_user", e, user=user),
                exc_info=True,
            )
            raise

    def save(self, answer: LearnedAnswer) -> LearnedAnswer:
        try:
            self._table().put_item(Item=to_item(answer.model_dump(mode="json")))
        except Exception as e:
            logger.error(
                "Failed to store learned answer in DynamoDB",
                extra=_error_fields("save_answer", e, answer_id=answer.id),
                exc_info=True,
            )
            raise

        logger.info(
            "Stored learned answer",
            extra={
                "extra_fields": {
                    "answer_id": answer.id,
                    "category": answer.category.value,
                    "confidence": answer.confidence,
                }
            },
        )
        return answer
