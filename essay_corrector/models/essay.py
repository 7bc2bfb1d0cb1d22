# essay_corrector/models/essay.py
import uuid
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

DraftField = Literal["title", "introduction", "conclusion"]
SectionField = Literal["opinion", "reason", "example", "reemphasis"]


def new_section_id() -> str:
    return uuid.uuid4().hex


class OREOSection(BaseModel):
    """본론 한 덩어리: Opinion, Reason, Example, Opinion(재강조)"""
    id: str = Field(default_factory=new_section_id)
    opinion: str = ""
    reason: str = ""
    example: str = ""
    reemphasis: str = ""

    def is_blank(self) -> bool:
        return not any(
            getattr(self, name).strip() for name in ("opinion", "reason", "example", "reemphasis")
        )


class EssayDraft(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "환경 보호",
                "introduction": "여러분, 오늘 아침에도 일회용 컵을 사용하셨나요?",
                "oreoSections": [
                    {
                        "opinion": "우리는 일회용품 사용을 줄여야 합니다.",
                        "reason": "일회용품은 썩는 데 수백 년이 걸리기 때문입니다.",
                        "example": "바다에 떠다니는 플라스틱 섬이 그 예입니다.",
                        "reemphasis": "그러므로 일회용품 사용을 줄여야 합니다."
                    }
                ],
                "conclusion": "작은 실천이 지구를 지킵니다. 오늘부터 텀블러를 사용해 봅시다."
            }
        },
    )

    title: str = ""
    introduction: str = ""
    oreo_sections: List[OREOSection] = Field(
        default_factory=lambda: [OREOSection()],
        alias="oreoSections",
        min_length=1,
    )
    conclusion: str = ""

    def find_section(self, section_id: str) -> OREOSection:
        for section in self.oreo_sections:
            if section.id == section_id:
                return section
        raise KeyError(section_id)

    def add_section(self) -> OREOSection:
        section = OREOSection()
        self.oreo_sections.append(section)
        return section

    def remove_section(self, section_id: str) -> bool:
        """Remove a body block; the last remaining block is always kept."""
        if len(self.oreo_sections) <= 1:
            return False
        remaining = [s for s in self.oreo_sections if s.id != section_id]
        if len(remaining) == len(self.oreo_sections):
            return False
        self.oreo_sections = remaining
        return True

