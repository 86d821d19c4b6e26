from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..exceptions import ConfigurationError, UpstreamError
from ..generation import QuizGenerationService
from ..prompts import DIFFICULTY_LEVELS, RANDOM_TOPIC, SUGGESTED_TOPICS
from ..schemas import GenerationParams, QuestionMix, Quiz
from ..settings import settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["quiz"])

MISSING_PARAMETERS = "Missing required parameters in the request body."
GENERATION_FAILED = "Failed to generate quiz from API."
SERVER_MISCONFIGURED = "Quiz generation is not configured on the server."


def get_generation_service() -> QuizGenerationService:
    return QuizGenerationService()


@router.post(
    "/gemini",
    response_model=Quiz,
    response_model_exclude_none=True,
    responses={400: {"description": "Missing or invalid parameters"}, 500: {"description": "Generation failed"}},
)
async def generate_quiz(
    params: GenerationParams,
    service: QuizGenerationService = Depends(get_generation_service),
):
    try:
        return await service.generate(params)
    except ConfigurationError as e:
        logger.error("Quiz generation unavailable: %s", e)
        return JSONResponse(status_code=500, content={"error": SERVER_MISCONFIGURED})
    except UpstreamError as e:
        logger.exception("Error calling Gemini API: %s", e)
        if e.raw_text:
            logger.debug("Raw upstream text: %s", e.raw_text[:300])
        return JSONResponse(status_code=500, content={"error": GENERATION_FAILED})
    except Exception:
        logger.exception("Unexpected error during quiz generation")
        return JSONResponse(status_code=500, content={"error": GENERATION_FAILED})


@router.get("/options")
async def get_options() -> Dict[str, Any]:
    return {
        "difficulties": DIFFICULTY_LEVELS,
        "questionTypes": [m.value for m in QuestionMix],
        "randomTopic": RANDOM_TOPIC,
        "suggestedTopics": SUGGESTED_TOPICS,
        "numQuestions": {"min": 1, "max": settings.max_questions},
    }
