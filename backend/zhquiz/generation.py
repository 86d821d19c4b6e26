from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from .exceptions import UpstreamError
from .gemini_client import GeminiClient
from .prompts import build_quiz_prompt, quiz_response_schema
from .schemas import GenerationParams, Quiz
from .settings import settings

logger = logging.getLogger(__name__)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse model output as a JSON object, tolerating code fences and stray prose."""
    text = text.strip()
    if text.startswith("\ufeff"):
        text = text[1:]
    candidates = [text]
    code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if code_block:
        candidates.append(code_block.group(1))
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        candidates.append(text[first : last + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    raise UpstreamError("Model did not return a JSON object.", raw_text=text)


def parse_quiz(text: str) -> Quiz:
    data = extract_json_object(text)
    try:
        return Quiz.model_validate(data)
    except ValidationError as err:
        raise UpstreamError(f"Invalid quiz data structure received from API: {err.error_count()} error(s)", raw_text=text) from err


class QuizGenerationService:
    """Turns generation parameters into a validated Quiz via Gemini structured output."""

    def __init__(
        self,
        client_factory: Callable[[], GeminiClient] = GeminiClient,
        *,
        thinking_budget: Optional[int] = None,
    ) -> None:
        self._client_factory = client_factory
        self._thinking_budget = thinking_budget if thinking_budget is not None else settings.gemini_thinking_budget

    async def generate(self, params: GenerationParams) -> Quiz:
        prompt = build_quiz_prompt(params)
        client = self._client_factory()
        try:
            raw = await client.generate_json(
                prompt, quiz_response_schema(), thinking_budget=self._thinking_budget
            )
        finally:
            await client.aclose()
        logger.debug("Gemini returned %d chars: %s", len(raw), raw[:300])
        quiz = parse_quiz(raw)
        if len(quiz.questions) != params.numQuestions:
            logger.warning(
                "Requested %d questions, model returned %d", params.numQuestions, len(quiz.questions)
            )
        logger.info(
            "Generated quiz: difficulty=%s topic=%s type=%s questions=%d",
            params.difficulty, params.topic, params.questionType.value, len(quiz.questions),
        )
        return quiz
