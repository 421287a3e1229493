# ---------- SETTINGS ----------

"""
Runtime settings read from the environment (and a local .env file, if present).

Environment Variables:
    APPLYFILL_STORAGE: "memory" (default) or "dynamodb"
    FORM_MAPPINGS_TABLE_NAME: DynamoDB table for platform mappings
    LEARNED_ANSWERS_TABLE_NAME: DynamoDB table for learned answers
    OPENAI_API_KEY: Enables the AI assistant when set
    OPENAI_MODEL: Model used by the AI assistant (default: "gpt-3.5-turbo")
    AI_TIMEOUT_SECONDS: Upper bound for one AI assistant call (default: 5)
    FRONTEND_URL: Extra allowed CORS origin
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Where engine records are persisted
STORAGE_BACKEND = os.getenv("APPLYFILL_STORAGE", "memory").lower()

FORM_MAPPINGS_TABLE_NAME = os.getenv(
    "FORM_MAPPINGS_TABLE_NAME", "applyfill-form-mappings"
)
LEARNED_ANSWERS_TABLE_NAME = os.getenv(
    "LEARNED_ANSWERS_TABLE_NAME", "applyfill-learned-answers"
)
# Secondary index on the answers table, partitioned by user
LEARNED_ANSWERS_USER_INDEX = os.getenv("LEARNED_ANSWERS_USER_INDEX", "user-index")

# AI assistant (optional)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "5"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "")
