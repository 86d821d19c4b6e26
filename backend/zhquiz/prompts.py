from __future__ import annotations

from typing import Any, Dict, List

from .schemas import GenerationParams, OPTION_COUNT


RANDOM_TOPIC = "随机一个有趣的主题"

DIFFICULTY_LEVELS: List[str] = [
    "入门 (Pre-HSK 1)",
    "初级 (HSK 1-2)",
    "中级 (HSK 3-4)",
    "中高级 (HSK 5)",
    "高级 (HSK 6)",
    "专业级 (Proficient)",
]

SUGGESTED_TOPICS: List[str] = [
    "可爱的动物", "太空探索", "恐龙世界", "有趣的节日", "神奇的自然",
    "我的家人", "好吃的食物", "运动会", "海洋生物", "童话故事",
    "超级英雄", "交通工具", "机器人", "天气变化", "保护地球",
    "传统文化", "奇妙的植物", "环游世界",
]


def quiz_response_schema() -> Dict[str, Any]:
    """Gemini ``responseSchema`` for a quiz (OpenAPI subset, upper-case type names)."""
    return {
        "type": "OBJECT",
        "properties": {
            "passage": {
                "type": "STRING",
                "description": "一段与主题相关的中文短文。",
            },
            "questions": {
                "type": "ARRAY",
                "description": "一个问题对象的列表。",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "type": {
                            "type": "STRING",
                            "enum": ["mc", "sa"],
                            "description": "问题类型, 'mc' 代表选择题, 'sa' 代表简答题。",
                        },
                        "questionText": {
                            "type": "STRING",
                            "description": "问题的文本。",
                        },
                        "options": {
                            "type": "ARRAY",
                            "description": "一个包含四个字符串选项的数组 (仅用于 'mc' 类型)。",
                            "items": {"type": "STRING"},
                        },
                        "correctAnswerIndex": {
                            "type": "INTEGER",
                            "description": "正确答案在 'options' 数组中的索引 (0-3) (仅用于 'mc' 类型)。",
                        },
                        "correctAnswerText": {
                            "type": "STRING",
                            "description": "简答题的参考答案 (仅用于 'sa' 类型)。",
                        },
                        "explanation": {
                            "type": "STRING",
                            "description": "对正确答案的详细解释，说明为什么它是正确的，可以引用原文。",
                        },
                    },
                    "required": ["type", "questionText", "explanation"],
                },
            },
        },
        "required": ["passage", "questions"],
    }


def build_quiz_prompt(params: GenerationParams) -> str:
    n = params.numQuestions
    return (
        "请根据以下要求生成一个中文阅读理解测验：\n"
        f"1. **主题**: \"{params.topic}\" (如果主题是 \"{RANDOM_TOPIC}\", 请你选择一个适合该难度等级的常见话题。)\n"
        f"2. **难度**: \"{params.difficulty}\"\n"
        f"3. **问题数量**: {n}\n"
        f"4. **题目类型**: \"{params.questionType.value}\" (选择题, 简答题, 或 混合)\n"
        "\n"
        "要求：\n"
        "- 生成一篇与主题和难度相符的中文短文。文章需要结构清晰，根据内容自然分段，并使用换行符 (\\n) 分隔段落，以便阅读。\n"
        f"- 根据短文内容和指定的题目类型出 {n} 道题。\n"
        f"- 如果是选择题 ('mc')，必须提供 'options' ({OPTION_COUNT}个选项) 和 'correctAnswerIndex'。\n"
        "- 如果是简答题 ('sa')，必须提供 'correctAnswerText'。\n"
        "- 必须为每一道题提供详细的 'explanation'，解释为什么答案是正确的，可以结合原文内容进行说明。\n"
        "- 确保问题和选项的语言难度与所选级别匹配。\n"
        "- 严格按照提供的JSON schema格式返回结果。"
    )
