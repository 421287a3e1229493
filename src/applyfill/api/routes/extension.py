"""
Extension API Routes.

Routes used by the browser extension: autofill, mapping feedback, and learning and
suggesting answers to essay-style questions.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from applyfill.api.dependencies import get_answer_learner, get_field_mapper
from applyfill.config.record_schemas import QuestionCategory
from applyfill.config.request_schemas import (
    AnswerEditedRequest,
    AutofillRequest,
    AutofillResponse,
    LearnAnswerRequest,
)
from applyfill.engines.answer_learner import AnswerLearningEngine
from applyfill.engines.field_mapper import FieldMappingEngine, extract_platform
from applyfill.utils.logger import get_logger, set_correlation_id

logger = get_logger(__name__)

router = APIRouter(prefix="/api/extension", tags=["extension"])

# Labels longer than this are treated as essay-style questions
LONG_LABEL_LENGTH = 30

# Learned answers are only filled in above this confidence
AUTOFILL_ANSWER_MIN_CONFIDENCE = 0.5

# Reported overall confidence when at least one field was filled
AUTOFILL_CONFIDENCE = 0.7


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


@router.post("/autofill")
def autofill(
    payload: AutofillRequest,
    field_mapper: FieldMappingEngine = Depends(get_field_mapper),
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """Return the values to type into a form.

    Profile attributes are mapped by the field mapping engine. Textareas and
    fields with long labels are then looked up as questions in the user's
    learned answers, and confident answers fill (or replace) those fields.

    Args:
        payload: AutofillRequest with the URL, observed fields, user and profile.

    Returns:
        JSONResponse with AutofillResponse:
            {
                "mapping": {"first_name": "Ada", ...},
                "confidence": 0.7,
                "detectedPlatform": "greenhouse",
                "message": "Found 1 fields to autofill."
            }
    """
    set_correlation_id(user=payload.user_email)
    platform = extract_platform(payload.url)

    if payload.profile is None and not payload.user_email:
        response = AutofillResponse(
            mapping={},
            confidence=0.0,
            detected_platform=platform,
            message="Please set up your profile before using autofill.",
        )
        return JSONResponse(content=_dump(response))

    mapping = field_mapper.map_fields(payload.url, payload.form_fields, payload.profile)

    if payload.user_email:
        for field in payload.form_fields:
            is_question = (field.type or "").lower() == "textarea" or (
                field.label is not None and len(field.label) > LONG_LABEL_LENGTH
            )
            question = field.label or field.placeholder
            if not is_question or not question or not field.identifier:
                continue

            try:
                suggestion = answer_learner.find_best_answer(
                    payload.user_email, question
                )
            except Exception:
                # Profile values are still returned when answers cannot be read
                logger.warning(
                    "Learned answer lookup failed",
                    extra={"extra_fields": {"field": field.identifier}},
                    exc_info=True,
                )
                continue
            if (
                suggestion is not None
                and suggestion.confidence > AUTOFILL_ANSWER_MIN_CONFIDENCE
            ):
                mapping[field.identifier] = suggestion.answer
                logger.info(
                    "Filled learned answer",
                    extra={
                        "extra_fields": {
                            "field": field.identifier,
                            "answer_id": suggestion.id,
                        }
                    },
                )

    response = AutofillResponse(
        mapping=mapping,
        confidence=AUTOFILL_CONFIDENCE if mapping else 0.0,
        detected_platform=platform,
        message=f"Found {len(mapping)} fields to autofill.",
    )
    return JSONResponse(content=_dump(response))


@router.post("/feedback/success")
def record_success(
    url: str = Query(...),
    field_mapper: FieldMappingEngine = Depends(get_field_mapper),
) -> JSONResponse:
    """Record that an autofill was accepted without corrections."""
    field_mapper.record_success(url)
    return JSONResponse(content={"status": "ok"})


@router.post("/feedback/correction")
def record_correction(
    url: str = Query(...),
    field_id: str = Query(..., alias="fieldId"),
    correct_profile_field: str = Query(..., alias="correctProfileField"),
    field_mapper: FieldMappingEngine = Depends(get_field_mapper),
) -> JSONResponse:
    """Record that the user corrected which profile attribute a field maps to."""
    field_mapper.record_correction(url, field_id, correct_profile_field)
    return JSONResponse(content={"status": "ok"})


@router.get("/mapping")
def get_mapping(
    url: str = Query(...),
    field_mapper: FieldMappingEngine = Depends(get_field_mapper),
) -> JSONResponse:
    """Return what has been learned for the URL's platform.

    Raises:
        HTTPException 404: If nothing has been learned for the platform yet.
    """
    mapping = field_mapper.get_mapping_for_url(url)
    if mapping is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No mapping for platform"
        )
    return JSONResponse(content=_dump(mapping))


@router.post("/learn-answer")
def learn_answer(
    payload: LearnAnswerRequest,
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """Remember an answer the user submitted on an application."""
    set_correlation_id(user=payload.user_email)
    learned = answer_learner.learn_answer(
        payload.user_email,
        payload.question,
        payload.answer,
        payload.platform,
        payload.job_title,
    )
    return JSONResponse(content=_dump(learned))


@router.get("/suggest-answer")
def suggest_answer(
    user_email: str = Query(..., alias="userEmail"),
    question: str = Query(...),
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """Suggest a stored answer for a question.

    Returns:
        JSONResponse:
            {"found": true, "answer": ..., "confidence": ..., "answerId": ..., "category": ...}
            or {"found": false, "category": ...} with the question's likely category.
    """
    set_correlation_id(user=user_email)
    suggestion = answer_learner.find_best_answer(user_email, question)
    if suggestion is None:
        category = answer_learner.categorize_question(question)
        return JSONResponse(content={"found": False, "category": category.value})

    return JSONResponse(
        content={
            "found": True,
            "answer": suggestion.answer,
            "confidence": suggestion.confidence,
            "answerId": suggestion.id,
            "category": suggestion.category.value,
        }
    )


@router.post("/answer-used")
def answer_used(
    answer_id: str = Query(..., alias="answerId"),
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """Record that a suggested answer was used as-is."""
    answer_learner.record_answer_used(answer_id)
    return JSONResponse(content={"status": "ok"})


@router.post("/answer-edited")
def answer_edited(
    payload: AnswerEditedRequest,
    answer_id: str = Query(..., alias="answerId"),
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """Record that the user edited a suggested answer before using it.

    The edited text is sent in the body as {"newAnswer": "..."}.
    """
    answer_learner.record_answer_edited(answer_id, payload.new_answer)
    return JSONResponse(content={"status": "ok"})


@router.get("/learned-answers")
def learned_answers(
    user_email: str = Query(..., alias="userEmail"),
    category: Optional[QuestionCategory] = Query(None),
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """List the user's learned answers, most used first, optionally for one category."""
    set_correlation_id(user=user_email)
    if category is None:
        answers = answer_learner.get_user_answers(user_email)
    else:
        answers = answer_learner.get_answers_by_category(user_email, category)
    return JSONResponse(content=[_dump(answer) for answer in answers])


@router.get("/categorize")
def categorize_question(
    question: str = Query(""),
    answer_learner: AnswerLearningEngine = Depends(get_answer_learner),
) -> JSONResponse:
    """Report the category a question would be filed under."""
    category = answer_learner.categorize_question(question)
    return JSONResponse(content={"category": category.value})
