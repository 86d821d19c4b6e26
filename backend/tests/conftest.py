import json

import httpx
import pytest

from zhquiz.gemini_client import GeminiClient
from zhquiz.generation import QuizGenerationService
from zhquiz.schemas import Quiz


@pytest.fixture
def quiz_payload():
    return {
        "passage": "小明每天早上七点起床。\n他骑自行车去学校。\n放学后他和朋友踢足球。",
        "questions": [
            {
                "type": "mc",
                "questionText": "小明几点起床？",
                "options": ["六点", "七点", "八点", "九点"],
                "correctAnswerIndex": 1,
                "explanation": "第一段说“小明每天早上七点起床”。",
            },
            {
                "type": "mc",
                "questionText": "小明怎么去学校？",
                "options": ["坐公共汽车", "走路", "骑自行车", "坐地铁"],
                "correctAnswerIndex": 2,
                "explanation": "第二段说“他骑自行车去学校”。",
            },
            {
                "type": "sa",
                "questionText": "小明放学后做什么？",
                "correctAnswerText": "和朋友踢足球。",
                "explanation": "第三段说“放学后他和朋友踢足球”。",
            },
        ],
    }


@pytest.fixture
def quiz(quiz_payload):
    return Quiz.model_validate(quiz_payload)


@pytest.fixture
def two_mc_quiz(quiz_payload):
    return Quiz.model_validate({**quiz_payload, "questions": quiz_payload["questions"][:2]})


def gemini_envelope(text):
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}
        ]
    }


@pytest.fixture
def gemini_transport():
    """MockTransport answering every Gemini call with ``state["text"]``; records requests."""
    state = {"text": "", "status": 200, "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        if state["status"] != 200:
            return httpx.Response(state["status"], json={"error": {"message": "quota exceeded"}})
        return httpx.Response(200, json=gemini_envelope(state["text"]))

    return httpx.MockTransport(handler), state


@pytest.fixture
def generation_service(gemini_transport):
    transport, state = gemini_transport
    service = QuizGenerationService(
        client_factory=lambda: GeminiClient(api_key="test-key", transport=transport)
    )
    return service, state


@pytest.fixture
def quiz_json(quiz_payload):
    return json.dumps(quiz_payload, ensure_ascii=False)
