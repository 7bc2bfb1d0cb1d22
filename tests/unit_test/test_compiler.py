"""
Unit tests for services/compiler.py
"""
import pytest

from essay_corrector.models.essay import EssayDraft, OREOSection
from essay_corrector.services.compiler import compile_essay, has_essay_content


@pytest.mark.unit
class TestCompileEssay:
    """Test the fixed labelled text layout sent to the model"""

    def test_labels_in_order(self, sample_draft):
        """Title, introduction, body and conclusion appear in that order"""
        text = compile_essay(sample_draft)

        assert text.startswith("제목: 일회용품 줄이기\n\n서론: ")
        assert text.index("서론:") < text.index("본론 1:") < text.index("결론:")
        assert text.endswith("결론: 작은 실천이 지구를 지킵니다.")

    def test_section_block_format(self, sample_draft):
        """Each OREO section is labelled with its four parts"""
        text = compile_essay(sample_draft)

        expected = (
            "본론 1:\n"
            "O (의견): 우리는 일회용품 사용을 줄여야 합니다.\n"
            "R (이유): 일회용품은 썩는 데 오랜 시간이 걸리기 때문입니다.\n"
            "E (예시): 바다의 플라스틱 쓰레기가 그 예입니다.\n"
            "O (의견 재강조): 그러므로 일회용품을 줄여야 합니다.\n\n"
        )
        assert expected in text

    @pytest.mark.parametrize("count", [1, 2, 3, 5])
    def test_one_group_per_section(self, count):
        """N sections produce exactly N numbered groups"""
        draft = EssayDraft(oreo_sections=[OREOSection(opinion=f"의견 {i}") for i in range(count)])
        text = compile_essay(draft)

        for i in range(1, count + 1):
            assert f"본론 {i}:" in text
        assert f"본론 {count + 1}:" not in text
        assert text.count("O (의견): ") == count

    def test_empty_fields_keep_labels(self):
        """Blank fields still render their labels"""
        text = compile_essay(EssayDraft())

        assert "제목: \n\n" in text
        assert "O (의견 재강조): \n" in text


@pytest.mark.unit
class TestHasEssayContent:
    """Test the empty-essay check used before any network call"""

    def test_blank_draft(self):
        assert has_essay_content(EssayDraft()) is False

    def test_whitespace_only(self):
        draft = EssayDraft(introduction="   \n", conclusion="\t")
        assert has_essay_content(draft) is False

    def test_title_only_is_empty(self):
        """A title alone is not something to correct"""
        assert has_essay_content(EssayDraft(title="환경 보호")) is False

    def test_any_section_field_counts(self):
        draft = EssayDraft(oreo_sections=[OREOSection(), OREOSection(example="예시 문장")])
        assert has_essay_content(draft) is True

    def test_full_draft(self, sample_draft):
        assert has_essay_content(sample_draft) is True
