"""
Shared fixtures for the essay correction test suite
"""
import json
from unittest.mock import AsyncMock

import pytest

from essay_corrector.models.essay import EssayDraft, OREOSection
from essay_corrector.utils.prompt_loader import PromptLoader


def criteria(met: bool, feedback: str = "") -> dict:
    return {"met": met, "feedback": feedback}


def structured_payload(sections: int = 1, met: bool = True) -> dict:
    """Model answer in the per-section array shape with every criterion set to ``met``."""
    return {
        "introduction": {
            "general": "서론이 좋아요. \"우리는 환경을 보호해요\"처럼 써 보아요.",
            "greeting": criteria(met, "인사가 있어요."),
            "direction": criteria(met, "글의 방향이 보여요."),
        },
        "oreoSections": [
            {
                "bodyO1": {"general": "의견이 분명해요.", "opinion": criteria(met)},
                "bodyR": {"general": "이유가 적절해요.", "reason": criteria(met)},
                "bodyE": {"general": "예시가 구체적이에요.", "example": criteria(met)},
                "bodyO2": {"general": "재강조가 잘 되었어요.", "reemphasis": criteria(met)},
            }
            for _ in range(sections)
        ],
        "conclusion": {
            "general": "마무리가 깔끔해요.",
            "summary": criteria(met),
            "closing": criteria(met),
        },
        "overall": "전체적으로 논리적인 글이에요.",
    }


@pytest.fixture
def sample_draft():
    """A fully written one-section draft"""
    return EssayDraft(
        title="일회용품 줄이기",
        introduction="여러분, 오늘 아침에도 일회용 컵을 사용하셨나요?",
        oreo_sections=[
            OREOSection(
                opinion="우리는 일회용품 사용을 줄여야 합니다.",
                reason="일회용품은 썩는 데 오랜 시간이 걸리기 때문입니다.",
                example="바다의 플라스틱 쓰레기가 그 예입니다.",
                reemphasis="그러므로 일회용품을 줄여야 합니다.",
            )
        ],
        conclusion="작은 실천이 지구를 지킵니다.",
    )


@pytest.fixture
def structured_response_text():
    """Model answer wrapped in prose and a code fence, as the API tends to return it"""
    body = json.dumps(structured_payload(), ensure_ascii=False, indent=2)
    return f"다음은 첨삭 결과입니다.\n```json\n{body}\n```"


@pytest.fixture
def loader():
    return PromptLoader()


@pytest.fixture
def mock_llm(structured_response_text):
    """LLM double answering every call with the structured response"""
    llm = AsyncMock()
    llm.model = "gemini-2.0-flash"
    llm.generate_content.return_value = {
        "text": structured_response_text,
        "usage": {"prompt_tokens": 1200, "completion_tokens": 300, "total_tokens": 1500},
        "finish_reason": "STOP",
    }
    return llm


@pytest.fixture
def payload_factory():
    """Factory for structured model answers: ``payload_factory(sections=2, met=False)``"""
    return structured_payload
