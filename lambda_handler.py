"""
AWS Lambda Handler for the ApplyFill API.

Wraps the FastAPI application with Mangum so API Gateway and Function URL
events are served by the same routes as the standalone server.

Lambda Configuration:
    Handler: lambda_handler.handler
    Runtime: Python 3.12
    Timeout: 29 seconds (API Gateway limit)

Environment Variables:
    APPLYFILL_STORAGE: Set to "dynamodb" to persist records in DynamoDB
    FORM_MAPPINGS_TABLE_NAME: DynamoDB table for platform mappings
    LEARNED_ANSWERS_TABLE_NAME: DynamoDB table for learned answers
    OPENAI_API_KEY: OpenAI API key for AI field mapping (optional)
    FRONTEND_URL: Frontend domain for CORS configuration (optional)
"""

from mangum import Mangum

from applyfill.api.server import app
from applyfill.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

api_handler = Mangum(
    app,
    lifespan="off",
    text_mime_types=[
        "application/json",
        "text/plain",
    ],
)


def handler(event, context):
    """Lambda entry point.

    Reconfigures logging with the invocation context so every record carries the
    function name and AWS request id, then hands the event to Mangum.

    Args:
        event: API Gateway or Function URL event.
        context: Lambda context object.

    Returns:
        dict: Mangum-formatted response with statusCode, headers and body.
    """
    configure_logging(context)
    logger.info("Routing to API handler")
    return api_handler(event, context)
