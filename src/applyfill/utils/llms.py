"""
AI Assistant - OpenAI-backed form field mapping.

This module provides the optional AI assistant that the field mapping engine
consults before falling back to keyword heuristics. The assistant receives the
applicant's profile values and the observed form fields, and returns the values
it would type into each field.

Key Components:
    - AiAssistant: Interface the field mapping engine depends on
    - OpenAIAssistant: Implementation on top of the OpenAI chat completions API
    - extract_json: Pulls a JSON object out of an LLM reply that may contain
      markdown or explanatory text

Environment Variables:
    OPENAI_API_KEY: The assistant reports itself unavailable when this is empty
    OPENAI_MODEL: Model name (default: "gpt-3.5-turbo")
    AI_TIMEOUT_SECONDS: Request timeout passed to the OpenAI client

Note:
    The OpenAI client is created lazily on first use, so a missing key never
    fails at import time. The assistant does not retry: one attempt per request.
"""

import json
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from openai import OpenAI

from applyfill.config import settings
from applyfill.config.profile_schemas import FormField, UserProfile
from applyfill.config.prompts import (
    FIELD_MAPPING_SYSTEM_PROMPT,
    FIELD_MAPPING_USER_PROMPT,
)
from applyfill.config.validation_constants import PROFILE_ATTRIBUTES
from applyfill.utils.exceptions import AiAssistantError
from applyfill.utils.logger import get_logger

logger = get_logger(__name__)


class AiAssistant(ABC):
    """An external service that can map form fields to profile values."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the assistant is configured and can be called."""

    @abstractmethod
    def map_fields(
        self, fields: List[FormField], profile: UserProfile, platform: str
    ) -> Dict[str, str]:
        """Return {field identifier: value} for the fields the assistant can fill."""


class OpenAIAssistant(AiAssistant):
    """AI assistant backed by the OpenAI chat completions API.

    Args:
        api_key: OpenAI API key. Defaults to OPENAI_API_KEY.
        model: Model name. Defaults to OPENAI_MODEL.
        timeout: Request timeout in seconds. Defaults to AI_TIMEOUT_SECONDS.
        max_tokens: Maximum number of tokens in the reply.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: int = 800,
    ):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS
        self.max_tokens = max_tokens
        self._client: Optional[OpenAI] = None

    # ------------------------------
    # Public interface
    # ------------------------------
    def is_available(self) -> bool:
        return bool(self.api_key)

    def map_fields(
        self, fields: List[FormField], profile: UserProfile, platform: str
    ) -> Dict[str, str]:
        """Ask the model which profile values belong in which fields.

        Args:
            fields: The observed form fields.
            profile: The applicant profile.
            platform: Platform label, included for context.

        Returns:
            Dict[str, str]: Field identifier -> value. Only identifiers present in
            fields and non-empty string values are kept.

        Raises:
            AiAssistantError: If the reply has no usable JSON object.
            openai.OpenAIError: For API failures (timeouts, auth, rate limits).
        """

        user_prompt = FIELD_MAPPING_USER_PROMPT.format(
            platform=platform,
            profile_lines=self._profile_lines(profile),
            field_lines=self._field_lines(fields),
        )
        text = self._complete(FIELD_MAPPING_SYSTEM_PROMPT, user_prompt)

        raw_json = extract_json(text)
        if raw_json is None:
            raise AiAssistantError("AI assistant reply contained no JSON object")
        try:
            parsed = json.loads(raw_json)
        except json.JSONDecodeError as e:
            raise AiAssistantError(f"AI assistant reply was not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise AiAssistantError("AI assistant reply was not a JSON object")

        known_identifiers = {f.identifier for f in fields if f.identifier}
        mapping = {
            key: value.strip()
            for key, value in parsed.items()
            if key in known_identifiers and isinstance(value, str) and value.strip()
        }

        logger.info(
            "AI assistant mapped fields",
            extra={
                "extra_fields": {
                    "platform": platform,
                    "requested": len(fields),
                    "mapped": len(mapping),
                }
            },
        )
        return mapping

    # ------------------------------
    # Internal functions
    # ------------------------------
    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key, timeout=self.timeout, max_retries=0
            )
        return self._client

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one chat completion and return the reply text."""

        response = self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=0.2,  # Low temperature for consistent, literal output
        )

        if not response or not getattr(response, "choices", None):
            raise AiAssistantError("OpenAI API returned no choices")

        message = response.choices[0].message
        text = getattr(message, "content", None) if message else None
        if text is None:
            raise AiAssistantError("OpenAI API returned None content in response")

        logger.debug("AI assistant response: %s", text[:500])
        return text

    @staticmethod
    def _profile_lines(profile: UserProfile) -> str:
        lines = []
        for attribute in PROFILE_ATTRIBUTES:
            value = profile.get_attribute(attribute)
            if value:
                lines.append(f"{attribute}: {value}")
        return "\n".join(lines)

    @staticmethod
    def _field_lines(fields: List[FormField]) -> str:
        return "\n".join(
            f"{i}. id='{f.id or ''}', name='{f.name or ''}', label='{f.label or ''}', "
            f"placeholder='{f.placeholder or ''}', type='{f.type or ''}'"
            for i, f in enumerate(fields, start=1)
        )


def extract_json(text: Optional[str]) -> Optional[str]:
    """Extract the first JSON object from LLM reply text.

    LLMs often wrap JSON in markdown code blocks or add explanatory text. This
    finds the first opening brace and balances braces to locate its match.

    Args:
        text: The raw LLM reply.

    Returns:
        The JSON object substring (not validated), or None if none is found.

    Example:
        Input: "Here you go: ```json\\n{\\"email\\": \\"a@b.c\\"}\\n```"
        Output: '{"email": "a@b.c"}'
    """

    if not text:
        return None

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None
