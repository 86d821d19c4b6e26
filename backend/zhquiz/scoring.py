from __future__ import annotations

from typing import Dict, Mapping, Optional

from .schemas import AnswerRecord, AnswerValue, Quiz, QuizResult


def count_mc_questions(quiz: Quiz) -> int:
    return sum(1 for q in quiz.questions if q.is_multiple_choice)


def score_quiz(quiz: Quiz, answers: Mapping[int, AnswerValue]) -> QuizResult:
    """Grade multiple-choice answers; short answers are passed through for self-grading.

    Unanswered questions count as incorrect. Does not modify ``answers``.
    """
    score = 0
    records: Dict[int, AnswerRecord] = {}
    for index, question in enumerate(quiz.questions):
        given: Optional[AnswerValue] = answers.get(index)
        if question.is_multiple_choice:
            # bool is an int subclass; True must not match index 1
            is_correct = (
                isinstance(given, int)
                and not isinstance(given, bool)
                and given == question.correctAnswerIndex
            )
            if is_correct:
                score += 1
            records[index] = AnswerRecord(
                userAnswer=given,
                correctAnswer=question.correctAnswerIndex,
                isCorrect=is_correct,
            )
        else:
            records[index] = AnswerRecord(
                userAnswer=given,
                correctAnswer=question.correctAnswerText,
            )
    return QuizResult(score=score, totalMcQuestions=count_mc_questions(quiz), answers=records)
