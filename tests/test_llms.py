# ---------- TESTS FOR AI ASSISTANT ----------

from unittest.mock import MagicMock

import pytest

from applyfill.config.profile_schemas import FormField, UserProfile
from applyfill.utils.exceptions import AiAssistantError
from applyfill.utils.llms import OpenAIAssistant, extract_json

# --- MOCK DATA ---

mock_fields = [
    FormField(id="first_name", label="First Name"),
    FormField(name="email", label="Email"),
]

mock_profile = UserProfile(first_name="Ada", email="ada@example.com")


def mock_completion(content):
    """Build an object shaped like an OpenAI chat completion."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def assistant():
    assistant = OpenAIAssistant(api_key="test-key", model="test-model", timeout=1)
    assistant._client = MagicMock()
    return assistant


# --- extract_json ---


def test_extract_json_from_markdown():
    text = 'Here you go:\n```json\n{"email": "a@b.c", "nested": {"x": 1}}\n```'
    assert extract_json(text) == '{"email": "a@b.c", "nested": {"x": 1}}'


@pytest.mark.parametrize("text", [None, "", "no json here", '{"unclosed": 1'])
def test_extract_json_not_found(text):
    assert extract_json(text) is None


# --- OpenAIAssistant ---


def test_is_available_depends_on_key():
    assert OpenAIAssistant(api_key="").is_available() is False
    assert OpenAIAssistant(api_key="sk-test").is_available() is True


def test_map_fields_keeps_known_identifiers(assistant):
    assistant._client.chat.completions.create.return_value = mock_completion(
        '```json\n{"first_name": " Ada ", "email": "", "unknown": "x", "first": 1}\n```'
    )

    result = assistant.map_fields(mock_fields, mock_profile, "greenhouse")

    assert result == {"first_name": "Ada"}


def test_map_fields_prompt_contains_profile_and_fields(assistant):
    assistant._client.chat.completions.create.return_value = mock_completion("{}")

    assistant.map_fields(mock_fields, mock_profile, "greenhouse")

    kwargs = assistant._client.chat.completions.create.call_args[1]
    assert kwargs["model"] == "test-model"
    user_prompt = kwargs["messages"][1]["content"]
    assert "firstName: Ada" in user_prompt
    assert "email: ada@example.com" in user_prompt
    assert "id='first_name'" in user_prompt
    assert "name='email'" in user_prompt
    assert "greenhouse" in user_prompt


@pytest.mark.parametrize("content", ["I cannot help with that", "[1, 2]", "{not json}"])
def test_map_fields_rejects_unusable_reply(assistant, content):
    assistant._client.chat.completions.create.return_value = mock_completion(content)

    with pytest.raises(AiAssistantError):
        assistant.map_fields(mock_fields, mock_profile, "greenhouse")


def test_map_fields_rejects_empty_response(assistant):
    assistant._client.chat.completions.create.return_value = mock_completion(None)

    with pytest.raises(AiAssistantError):
        assistant.map_fields(mock_fields, mock_profile, "greenhouse")

    response = MagicMock()
    response.choices = []
    assistant._client.chat.completions.create.return_value = response

    with pytest.raises(AiAssistantError):
        assistant.map_fields(mock_fields, mock_profile, "greenhouse")
