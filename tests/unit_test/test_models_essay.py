"""
Unit tests for models/essay.py, models/correction.py and models/account.py
"""
import pytest
from pydantic import ValidationError

from essay_corrector.models.account import Account, AccountView
from essay_corrector.models.correction import (
    CorrectionResult,
    IntroductionCriteria,
    OREOSectionCorrection,
    RawFeedback,
)
from essay_corrector.models.essay import EssayDraft, OREOSection


@pytest.mark.unit
class TestEssayDraft:
    """Test draft defaults and section management"""

    def test_default_has_one_blank_section(self):
        draft = EssayDraft()

        assert len(draft.oreo_sections) == 1
        assert draft.oreo_sections[0].is_blank()

    def test_sections_have_unique_ids(self):
        draft = EssayDraft()
        draft.add_section()
        draft.add_section()

        ids = [s.id for s in draft.oreo_sections]
        assert len(set(ids)) == 3

    def test_alias_round_trip(self, sample_draft):
        """The draft accepts and emits the camelCase ``oreoSections`` key"""
        dumped = sample_draft.model_dump(by_alias=True)
        assert "oreoSections" in dumped

        restored = EssayDraft.model_validate(dumped)
        assert restored.oreo_sections[0].opinion == sample_draft.oreo_sections[0].opinion

    def test_empty_section_list_rejected(self):
        with pytest.raises(ValidationError):
            EssayDraft(oreo_sections=[])

    def test_remove_section(self):
        draft = EssayDraft()
        second = draft.add_section()

        assert draft.remove_section(second.id) is True
        assert len(draft.oreo_sections) == 1

    def test_remove_last_section_is_ignored(self):
        """The final remaining section can never be removed"""
        draft = EssayDraft()
        only = draft.oreo_sections[0]

        assert draft.remove_section(only.id) is False
        assert draft.oreo_sections == [only]

    def test_remove_unknown_id(self):
        draft = EssayDraft()
        draft.add_section()

        assert draft.remove_section("missing") is False
        assert len(draft.oreo_sections) == 2

    def test_find_section(self):
        draft = EssayDraft()
        added = draft.add_section()

        assert draft.find_section(added.id) is added
        with pytest.raises(KeyError):
            draft.find_section("missing")


@pytest.mark.unit
class TestCorrectionResult:
    """Test the tagged feedback variants"""

    def test_defaults_are_raw(self):
        result = CorrectionResult()

        assert isinstance(result.introduction, RawFeedback)
        assert isinstance(result.conclusion, RawFeedback)
        assert result.oreo_sections == []

    def test_discriminated_by_kind(self):
        result = CorrectionResult.model_validate({
            "introduction": {"kind": "structured", "greeting": {"met": True}},
            "conclusion": {"kind": "raw", "text": "좋아요"},
        })

        assert isinstance(result.introduction, IntroductionCriteria)
        assert result.introduction.greeting.met is True
        assert result.introduction.direction.met is False
        assert isinstance(result.conclusion, RawFeedback)
        assert result.conclusion.text == "좋아요"

    def test_feedback_parts_order(self):
        result = CorrectionResult(oreo_sections=[OREOSectionCorrection(), OREOSectionCorrection()])
        assert len(list(result.feedback_parts())) == 2 + 4 * 2


@pytest.mark.unit
class TestAccount:
    """Test immutable roster records"""

    def test_account_is_frozen(self):
        account = Account(account_id="10801", name="김옥현", password="1234")

        with pytest.raises(ValidationError):
            account.password = "changed"

    def test_view_hides_password(self):
        account = Account(account_id="10801", name="김옥현", password="1234")
        view = AccountView.from_account(account)

        assert "password" not in view.model_dump()
        assert view.role == "student"
