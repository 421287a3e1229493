"""
FastAPI server that exposes the ApplyFill engines to the browser extension.

The extension posts the fields it observed on an application form and receives
the values to type into them. It also reports back whether the fill was accepted
or corrected, and which answers the user wrote, so later fills improve.

To run the server:
    python -m uvicorn applyfill.api.server:app --reload --app-dir src
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from applyfill.api.handlers.exceptions import (
    invalid_request_handler,
    validation_exception_handler,
)
from applyfill.api.middleware.logging import log_requests_middleware
from applyfill.api.routes import extension
from applyfill.config.settings import FRONTEND_URL
from applyfill.utils.exceptions import InvalidRequestError
from applyfill.utils.logger import configure_logging

configure_logging()

# ------------- FastAPI Setup -------------

app = FastAPI(
    title="ApplyFill Backend",
    description="Form field mapping and answer learning for job application autofill",
    version="1.0",
)

origins = [
    "http://localhost:3000",  # local development
    "http://127.0.0.1:3000",  # local development
]

if FRONTEND_URL and FRONTEND_URL not in origins:
    origins.append(FRONTEND_URL)

# Without a configured frontend, allow any origin (development)
if not FRONTEND_URL:
    origins.append("*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    # Browser extensions call from their own origin scheme
    allow_origin_regex=r"^(chrome|moz)-extension://.*$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(log_requests_middleware)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(InvalidRequestError, invalid_request_handler)

app.include_router(extension.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


# For running as standalone server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
