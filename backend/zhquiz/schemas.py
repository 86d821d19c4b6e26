"""
Quiz data contracts shared by the service, the client and the session.

Field names follow the wire format (camelCase) so that a model dumped with
``exclude_none=True`` is exactly the JSON the service returns.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    StringConstraints,
    field_validator,
    model_validator,
)

from .settings import settings

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

OPTION_COUNT = 4

AnswerValue = Union[int, str]
UserAnswers = Dict[int, AnswerValue]


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "mc"
    SHORT_ANSWER = "sa"


class QuestionMix(str, Enum):
    """Question type requested for a whole quiz. Values are the labels echoed into the prompt."""
    MULTIPLE_CHOICE = "选择题"
    SHORT_ANSWER = "简答题"
    MIXED = "混合"


_MIX_ALIASES: Dict[str, QuestionMix] = {
    "mc": QuestionMix.MULTIPLE_CHOICE,
    "multiple-choice": QuestionMix.MULTIPLE_CHOICE,
    "sa": QuestionMix.SHORT_ANSWER,
    "short-answer": QuestionMix.SHORT_ANSWER,
    "mixed": QuestionMix.MIXED,
}


class Question(BaseModel):
    """One quiz item. Which answer fields are set depends on ``type``."""
    model_config = ConfigDict(frozen=True)

    type: QuestionType
    questionText: NonEmptyStr
    options: Optional[List[NonEmptyStr]] = None
    correctAnswerIndex: Optional[int] = None
    correctAnswerText: Optional[NonEmptyStr] = None
    explanation: NonEmptyStr

    @model_validator(mode="before")
    @classmethod
    def _drop_foreign_fields(cls, data: Any) -> Any:
        # The response schema allows every field on every item, so the model
        # sometimes sends e.g. "options": [] on a short-answer question.
        if not isinstance(data, dict):
            return data
        kind = data.get("type")
        if kind == QuestionType.MULTIPLE_CHOICE:
            return {k: v for k, v in data.items() if k != "correctAnswerText"}
        if kind == QuestionType.SHORT_ANSWER:
            return {k: v for k, v in data.items() if k not in ("options", "correctAnswerIndex")}
        return data

    @model_validator(mode="after")
    def _check_answer_fields(self) -> "Question":
        if self.type == QuestionType.MULTIPLE_CHOICE:
            if self.options is None or len(self.options) != OPTION_COUNT:
                raise ValueError(f"multiple-choice question needs exactly {OPTION_COUNT} options")
            if self.correctAnswerIndex is None:
                raise ValueError("multiple-choice question needs correctAnswerIndex")
            if not 0 <= self.correctAnswerIndex < OPTION_COUNT:
                raise ValueError(f"correctAnswerIndex must be 0..{OPTION_COUNT - 1}")
        elif self.correctAnswerText is None:
            raise ValueError("short-answer question needs correctAnswerText")
        return self

    @property
    def is_multiple_choice(self) -> bool:
        return self.type == QuestionType.MULTIPLE_CHOICE


class Quiz(BaseModel):
    """A passage plus its questions."""
    model_config = ConfigDict(frozen=True)

    passage: NonEmptyStr
    questions: List[Question] = Field(min_length=1)

    def paragraphs(self) -> List[str]:
        return [p.strip() for p in self.passage.splitlines() if p.strip()]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class AnswerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Recorded as given, never coerced
    userAnswer: Optional[Union[StrictInt, StrictStr, StrictBool]] = None
    correctAnswer: Union[StrictInt, StrictStr]
    # Only set for multiple-choice questions
    isCorrect: Optional[bool] = None


class QuizResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0)
    totalMcQuestions: int = Field(ge=0)
    answers: Dict[int, AnswerRecord]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class GenerationParams(BaseModel):
    """Body of a generation request."""
    difficulty: NonEmptyStr = Field(description="Difficulty label, e.g. 中级 (HSK 3-4)")
    topic: NonEmptyStr = Field(description="Passage topic, or the random-topic sentinel")
    numQuestions: int = Field(ge=1, description="Number of questions to generate")
    questionType: QuestionMix

    @field_validator("questionType", mode="before")
    @classmethod
    def _accept_aliases(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _MIX_ALIASES.get(v.strip().lower(), v.strip())
        return v

    @field_validator("numQuestions")
    @classmethod
    def _within_limit(cls, v: int) -> int:
        if v > settings.max_questions:
            raise ValueError(f"numQuestions must be at most {settings.max_questions}")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "difficulty": "中级 (HSK 3-4)",
                "topic": "中国新年",
                "numQuestions": 3,
                "questionType": "选择题",
            }
        }
    )
