"""
Quiz session state machine.

One QuizSession owns the current quiz, the learner's answers and the graded
result. States:

    idle -> loading -> ready -> submitted -> detailed
                    +-> error

A generate request is accepted from any state and clears everything the
previous quiz left behind. restart() returns to idle from any state. Each
generate request takes a new token; a response is applied only if its token
is still current, so a superseded or abandoned request can never overwrite
newer state.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from .client import QuizServiceClient
from .exceptions import InvalidAnswerError, SessionStateError
from .sample import SAMPLE_QUIZ
from .schemas import AnswerValue, GenerationParams, Quiz, QuizResult
from .scoring import score_quiz

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "生成试题失败，请稍后重试。"

QuizGenerator = Callable[[GenerationParams], Awaitable[Quiz]]


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"
    SUBMITTED = "submitted"
    DETAILED = "detailed"


async def generate_via_service(params: GenerationParams) -> Quiz:
    async with QuizServiceClient() as client:
        return await client.generate(params)


def is_answered(value: Optional[AnswerValue]) -> bool:
    # 0 is a valid multiple-choice answer; only missing or blank text counts as unanswered
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class QuizSession:
    def __init__(self, generator: Optional[QuizGenerator] = None, *, sample: Optional[Quiz] = SAMPLE_QUIZ) -> None:
        self._generator = generator or generate_via_service
        self._token = 0
        self._status = SessionStatus.IDLE
        self._quiz: Optional[Quiz] = None
        self._answers: Dict[int, AnswerValue] = {}
        self._result: Optional[QuizResult] = None
        self._error: Optional[str] = None
        self._last_exception: Optional[BaseException] = None
        self._show_details = False
        if sample is not None:
            self._quiz = sample
            self._status = SessionStatus.READY

    # -- observers --------------------------------------------------------

    @property
    def state(self) -> SessionStatus:
        return self._status

    @property
    def quiz(self) -> Optional[Quiz]:
        return self._quiz

    @property
    def answers(self) -> Dict[int, AnswerValue]:
        return dict(self._answers)

    @property
    def result(self) -> Optional[QuizResult]:
        return self._result

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def last_exception(self) -> Optional[BaseException]:
        return self._last_exception

    @property
    def show_details(self) -> bool:
        return self._show_details

    @property
    def is_loading(self) -> bool:
        return self._status == SessionStatus.LOADING

    @property
    def all_answered(self) -> bool:
        if self._quiz is None:
            return False
        return all(is_answered(self._answers.get(i)) for i in range(len(self._quiz.questions)))

    # -- transitions ------------------------------------------------------

    def _clear(self) -> None:
        self._quiz = None
        self._answers = {}
        self._result = None
        self._error = None
        self._last_exception = None
        self._show_details = False

    async def generate(self, params: GenerationParams) -> bool:
        """Fetch a new quiz. Returns True if the result was applied to this session."""
        self._token += 1
        token = self._token
        self._clear()
        self._status = SessionStatus.LOADING
        try:
            quiz = await self._generator(params)
        except asyncio.CancelledError:
            if token == self._token:
                self._status = SessionStatus.IDLE
            raise
        except Exception as exc:
            if token != self._token:
                logger.info("Discarding failure of superseded generation request #%d", token)
                return False
            logger.error("Quiz generation failed: %s", exc)
            self._error = GENERIC_FAILURE_MESSAGE
            self._last_exception = exc
            self._status = SessionStatus.ERROR
            return False
        if token != self._token:
            logger.info("Discarding result of superseded generation request #%d", token)
            return False
        self._quiz = quiz
        self._status = SessionStatus.READY
        return True

    def set_answer(self, index: int, value: AnswerValue) -> None:
        if self._status != SessionStatus.READY or self._quiz is None:
            raise SessionStateError(f"cannot change answers while {self._status.value}")
        if not 0 <= index < len(self._quiz.questions):
            raise InvalidAnswerError(f"question index {index} out of range")
        question = self._quiz.questions[index]
        if question.is_multiple_choice:
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidAnswerError(f"question {index} expects an option index")
            if not 0 <= value < len(question.options):
                raise InvalidAnswerError(f"option {value} out of range for question {index}")
        elif not isinstance(value, str):
            raise InvalidAnswerError(f"question {index} expects a text answer")
        self._answers[index] = value

    def submit(self) -> QuizResult:
        if self._status != SessionStatus.READY or self._quiz is None:
            raise SessionStateError(f"cannot submit while {self._status.value}")
        if not self.all_answered:
            raise SessionStateError("请完成所有题目")
        self._result = score_quiz(self._quiz, self._answers)
        self._status = SessionStatus.SUBMITTED
        return self._result

    def reveal_details(self) -> None:
        if self._status == SessionStatus.DETAILED:
            return
        if self._status != SessionStatus.SUBMITTED:
            raise SessionStateError(f"cannot reveal details while {self._status.value}")
        self._show_details = True
        self._status = SessionStatus.DETAILED

    def restart(self) -> None:
        # Invalidates any request still in flight
        self._token += 1
        self._clear()
        self._status = SessionStatus.IDLE
