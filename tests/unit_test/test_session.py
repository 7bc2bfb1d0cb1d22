"""
Unit tests for services/session.py and services/essay_corrector.py
"""
import asyncio

import pytest

from essay_corrector.core.exceptions import (
    EMPTY_ESSAY_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    REQUEST_FAILED_MESSAGE,
    EssayLockedException,
    LLMRequestException,
    SubmissionInProgressException,
    ValidationException,
)
from essay_corrector.models.essay import EssayDraft
from essay_corrector.services.essay_corrector import EssayCorrector
from essay_corrector.services.session import EssayCorrectionSession


@pytest.fixture
def corrector(mock_llm, loader):
    return EssayCorrector(mock_llm, loader)


@pytest.fixture
def session(corrector, sample_draft):
    return EssayCorrectionSession(corrector, sample_draft)


@pytest.mark.unit
class TestEssayCorrector:
    """Test one correction request end to end with a fake model"""

    def test_build_prompt_contains_essay(self, corrector, sample_draft):
        prompt = corrector.build_prompt(sample_draft)

        assert "학생 글:\n제목: 일회용품 줄이기" in prompt
        assert "본론 1:" in prompt

    @pytest.mark.asyncio
    async def test_correct(self, corrector, mock_llm, sample_draft):
        outcome = await corrector.correct(sample_draft)

        assert outcome.result.introduction.greeting.met is True
        assert outcome.usage["total_tokens"] == 1500
        assert set(outcome.timings) == {"compile", "llm", "normalize", "total"}
        _, kwargs = mock_llm.generate_content.call_args
        assert kwargs["name"] == "essay_correction"
        assert kwargs["prompt_meta"]["oreo_sections"] == 1

    @pytest.mark.asyncio
    async def test_empty_draft_never_calls_model(self, corrector, mock_llm):
        with pytest.raises(ValidationException) as exc_info:
            await corrector.correct(EssayDraft(title="제목만"))

        assert exc_info.value.message == EMPTY_ESSAY_MESSAGE
        mock_llm.generate_content.assert_not_called()


@pytest.mark.unit
class TestEssayCorrectionSession:
    """Test the draft/result state machine"""

    def test_initial_state(self, session):
        assert session.correction_result is None
        assert session.is_loading is False
        assert session.read_only is False
        assert session.score() is None

    @pytest.mark.asyncio
    async def test_submit_success_locks_draft(self, session):
        result = await session.submit()

        assert session.correction_result is result
        assert session.read_only is True
        assert session.is_loading is False
        assert session.error == ""
        assert session.score() == 100

        with pytest.raises(EssayLockedException):
            session.update_field("title", "새 제목")
        with pytest.raises(EssayLockedException):
            session.add_section()
        with pytest.raises(EssayLockedException):
            await session.submit()

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_draft_editable(self, session, mock_llm):
        mock_llm.generate_content.side_effect = LLMRequestException(status_code=503)

        with pytest.raises(LLMRequestException):
            await session.submit()

        assert session.correction_result is None
        assert session.error == REQUEST_FAILED_MESSAGE
        assert session.is_loading is False
        assert session.read_only is False
        session.update_field("title", "다시 쓰기")

    @pytest.mark.asyncio
    async def test_unexpected_failure_uses_generic_message(self, session, mock_llm):
        mock_llm.generate_content.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await session.submit()

        assert session.error == GENERIC_FAILURE_MESSAGE
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_validation_failure_makes_no_call(self, corrector, mock_llm):
        session = EssayCorrectionSession(corrector, EssayDraft())

        with pytest.raises(ValidationException):
            await session.submit()

        mock_llm.generate_content.assert_not_called()
        assert session.error == EMPTY_ESSAY_MESSAGE

    @pytest.mark.asyncio
    async def test_resubmit_after_failure_clears_error(self, session, mock_llm, structured_response_text):
        mock_llm.generate_content.side_effect = [
            LLMRequestException(status_code=500),
            {"text": structured_response_text, "usage": {}, "finish_reason": "STOP"},
        ]

        with pytest.raises(LLMRequestException):
            await session.submit()
        await session.submit()

        assert session.error == ""
        assert session.correction_result is not None

    @pytest.mark.asyncio
    async def test_only_one_submission_in_flight(self, session, mock_llm, structured_response_text):
        release = asyncio.Event()

        async def slow_call(**kwargs):
            await release.wait()
            return {"text": structured_response_text, "usage": {}, "finish_reason": "STOP"}

        mock_llm.generate_content.side_effect = slow_call
        first = asyncio.create_task(session.submit())
        for _ in range(3):
            await asyncio.sleep(0)

        assert session.is_loading is True
        with pytest.raises(SubmissionInProgressException):
            await session.submit()
        with pytest.raises(SubmissionInProgressException):
            session.update_field("title", "중간 수정")

        release.set()
        await first
        assert mock_llm.generate_content.await_count == 1

    def test_update_section(self, session):
        section_id = session.draft.oreo_sections[0].id
        session.update_section(section_id, "reason", "새 이유")

        assert session.draft.oreo_sections[0].reason == "새 이유"

    def test_update_unknown_section(self, session):
        with pytest.raises(ValidationException):
            session.update_section("missing", "reason", "새 이유")

    def test_remove_last_section_ignored(self, session):
        only = session.draft.oreo_sections[0]
        assert session.remove_section(only.id) is False
        assert session.draft.oreo_sections == [only]

    @pytest.mark.asyncio
    async def test_reset(self, session):
        await session.submit()
        session.reset()

        assert session.correction_result is None
        assert session.read_only is False
        assert session.draft.title == ""
        assert len(session.draft.oreo_sections) == 1
