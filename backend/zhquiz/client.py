from __future__ import annotations

import logging
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from .exceptions import GenerationError, InvalidParametersError, TransportError
from .schemas import GenerationParams, QuestionMix, Quiz
from .settings import settings

logger = logging.getLogger(__name__)

ERROR_PREFIX = "生成试题失败"


class QuizServiceClient:
    """Posts generation requests to the quiz service and returns validated quizzes.

    Every failure (bad parameters, network, non-2xx status, malformed body)
    surfaces as a GenerationError with a message fit to show a learner.
    Nothing is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = base_url or settings.quiz_service_url
        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.quiz_client_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "QuizServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def generate_quiz(
        self,
        difficulty: str,
        topic: str,
        num_questions: int,
        question_type: Union[QuestionMix, str],
    ) -> Quiz:
        try:
            params = GenerationParams(
                difficulty=difficulty,
                topic=topic,
                numQuestions=num_questions,
                questionType=question_type,
            )
        except ValidationError as err:
            logger.error("Rejected generation parameters: %s", err)
            raise GenerationError(f"{ERROR_PREFIX}: 请求参数无效。") from InvalidParametersError(str(err))
        return await self.generate(params)

    async def generate(self, params: GenerationParams) -> Quiz:
        try:
            response = await self._post(params)
        except TransportError as err:
            logger.error("调用后端 API 失败: %s", err)
            raise GenerationError(f"{ERROR_PREFIX}: {err}") from err

        if response.is_error:
            message = _error_message(response)
            logger.error("Quiz service returned %d: %s", response.status_code, message)
            raise GenerationError(f"{ERROR_PREFIX}: {message}", status_code=response.status_code)

        try:
            return Quiz.model_validate(response.json())
        except ValueError as err:
            # JSON decode errors and pydantic ValidationError
            logger.error("Quiz service returned an invalid quiz: %s", err)
            raise GenerationError(f"{ERROR_PREFIX}: 服务器返回的试题格式无效。") from err

    async def _post(self, params: GenerationParams) -> httpx.Response:
        try:
            return await self._client.post(self.url, json=params.model_dump(mode="json"))
        except httpx.RequestError as err:
            raise TransportError(f"无法连接到服务器 ({err.__class__.__name__})") from err

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return f"请求失败，状态码: {response.status_code}"
