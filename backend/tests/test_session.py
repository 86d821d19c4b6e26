import asyncio

import pytest

from zhquiz.exceptions import GenerationError, InvalidAnswerError, SessionStateError
from zhquiz.sample import SAMPLE_QUIZ
from zhquiz.schemas import GenerationParams
from zhquiz.session import GENERIC_FAILURE_MESSAGE, QuizSession, SessionStatus

PARAMS = GenerationParams(difficulty="中级 (HSK 3-4)", topic="中国新年", numQuestions=3, questionType="混合")


def returning(quiz):
    async def generator(params):
        return quiz

    return generator


def failing(message="boom"):
    async def generator(params):
        raise GenerationError(message)

    return generator


def test_starts_ready_with_sample_quiz():
    session = QuizSession(generator=failing())

    assert session.state is SessionStatus.READY
    assert session.quiz is SAMPLE_QUIZ
    assert session.answers == {}
    assert session.result is None


def test_starts_idle_without_sample():
    session = QuizSession(generator=failing(), sample=None)

    assert session.state is SessionStatus.IDLE
    assert session.quiz is None
    assert not session.all_answered


def test_generate_success_installs_quiz_and_clears_previous_state(quiz):
    session = QuizSession(generator=returning(quiz))
    session.set_answer(0, 1)

    applied = asyncio.run(session.generate(PARAMS))

    assert applied is True
    assert session.state is SessionStatus.READY
    assert session.quiz is quiz
    assert session.answers == {}
    assert session.error is None


def test_generate_failure_records_generic_message():
    session = QuizSession(generator=failing("network down"))

    applied = asyncio.run(session.generate(PARAMS))

    assert applied is False
    assert session.state is SessionStatus.ERROR
    assert session.quiz is None
    assert session.error == GENERIC_FAILURE_MESSAGE
    assert str(session.last_exception) == "network down"


def test_loading_state_while_request_in_flight(quiz):
    async def scenario():
        release = asyncio.Event()

        async def generator(params):
            await release.wait()
            return quiz

        session = QuizSession(generator=generator)
        task = asyncio.create_task(session.generate(PARAMS))
        await asyncio.sleep(0)
        assert session.state is SessionStatus.LOADING
        assert session.is_loading
        assert session.quiz is None
        release.set()
        await task
        return session

    assert asyncio.run(scenario()).state is SessionStatus.READY


def test_set_answer_upserts(quiz):
    session = QuizSession(sample=quiz)

    session.set_answer(0, 2)
    session.set_answer(0, 1)
    session.set_answer(2, "踢足球")

    assert session.answers == {0: 1, 2: "踢足球"}
    assert session.state is SessionStatus.READY


@pytest.mark.parametrize(
    "index, value",
    [(3, 0), (-1, 0), (0, "1"), (0, 4), (0, True), (2, 1)],
)
def test_set_answer_rejects_bad_values(quiz, index, value):
    session = QuizSession(sample=quiz)

    with pytest.raises(InvalidAnswerError):
        session.set_answer(index, value)
    assert session.answers == {}


def test_answers_observer_is_a_copy(quiz):
    session = QuizSession(sample=quiz)
    session.answers[0] = 1

    assert session.answers == {}


def test_submit_rejected_until_all_answered(quiz):
    session = QuizSession(sample=quiz)
    session.set_answer(0, 1)
    session.set_answer(1, 2)

    with pytest.raises(SessionStateError):
        session.submit()

    session.set_answer(2, "   ")
    with pytest.raises(SessionStateError):
        session.submit()
    assert session.state is SessionStatus.READY
    assert session.result is None


def test_zero_is_a_valid_answer(two_mc_quiz):
    session = QuizSession(sample=two_mc_quiz)
    session.set_answer(0, 0)
    session.set_answer(1, 0)

    assert session.all_answered
    result = session.submit()
    assert result.score == 0
    assert session.state is SessionStatus.SUBMITTED


def test_submit_scores_once_then_reveal(quiz):
    session = QuizSession(sample=quiz)
    session.set_answer(0, 1)
    session.set_answer(1, 0)
    session.set_answer(2, "他踢足球")

    result = session.submit()

    assert result.score == 1
    assert result.totalMcQuestions == 2
    assert result.answers[2].userAnswer == "他踢足球"
    assert session.result is result
    assert session.state is SessionStatus.SUBMITTED
    assert not session.show_details

    with pytest.raises(SessionStateError):
        session.submit()
    with pytest.raises(SessionStateError):
        session.set_answer(0, 2)

    session.reveal_details()
    assert session.state is SessionStatus.DETAILED
    assert session.show_details
    assert session.result is result

    session.reveal_details()
    assert session.state is SessionStatus.DETAILED


def test_reveal_details_requires_submission(quiz):
    session = QuizSession(sample=quiz)

    with pytest.raises(SessionStateError):
        session.reveal_details()


def test_restart_clears_everything(quiz):
    session = QuizSession(sample=quiz)
    for index, value in [(0, 1), (1, 2), (2, "足球")]:
        session.set_answer(index, value)
    session.submit()
    session.reveal_details()

    session.restart()

    assert session.state is SessionStatus.IDLE
    assert session.quiz is None
    assert session.answers == {}
    assert session.result is None
    assert session.error is None
    assert not session.show_details


def test_restart_clears_error():
    session = QuizSession(generator=failing())
    asyncio.run(session.generate(PARAMS))

    session.restart()

    assert session.state is SessionStatus.IDLE
    assert session.error is None
    assert session.last_exception is None


def test_superseded_request_result_is_discarded(quiz, two_mc_quiz):
    async def scenario():
        first_release = asyncio.Event()

        async def generator(params):
            if params.topic == "first":
                await first_release.wait()
                return quiz
            return two_mc_quiz

        session = QuizSession(generator=generator)
        first = asyncio.create_task(session.generate(PARAMS.model_copy(update={"topic": "first"})))
        await asyncio.sleep(0)
        second_applied = await session.generate(PARAMS.model_copy(update={"topic": "second"}))
        first_release.set()
        first_applied = await first
        return session, first_applied, second_applied

    session, first_applied, second_applied = asyncio.run(scenario())

    assert second_applied is True
    assert first_applied is False
    assert session.quiz is two_mc_quiz
    assert session.state is SessionStatus.READY


def test_stale_failure_does_not_override_newer_quiz(quiz):
    async def scenario():
        release = asyncio.Event()

        async def generator(params):
            if params.topic == "slow":
                await release.wait()
                raise GenerationError("late failure")
            return quiz

        session = QuizSession(generator=generator)
        slow = asyncio.create_task(session.generate(PARAMS.model_copy(update={"topic": "slow"})))
        await asyncio.sleep(0)
        await session.generate(PARAMS)
        release.set()
        await slow
        return session

    session = asyncio.run(scenario())

    assert session.state is SessionStatus.READY
    assert session.error is None


def test_restart_discards_pending_result(quiz):
    async def scenario():
        release = asyncio.Event()

        async def generator(params):
            await release.wait()
            return quiz

        session = QuizSession(generator=generator)
        pending = asyncio.create_task(session.generate(PARAMS))
        await asyncio.sleep(0)
        session.restart()
        release.set()
        applied = await pending
        return session, applied

    session, applied = asyncio.run(scenario())

    assert applied is False
    assert session.state is SessionStatus.IDLE
    assert session.quiz is None
