"""
Unit tests for utils/tracer.py
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from essay_corrector.utils.tracer import ObservedLLM

USAGE = {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}


def _inner():
    inner = AsyncMock()
    inner.model = "gemini-2.0-flash"
    inner.generate_content.return_value = {"text": "결과", "usage": USAGE, "finish_reason": "STOP"}
    return inner


@pytest.mark.unit
class TestObservedLLM:
    """Test the observation wrapper around the model client"""

    def test_model_passthrough(self):
        assert ObservedLLM(_inner()).model == "gemini-2.0-flash"

    @pytest.mark.asyncio
    @patch('essay_corrector.utils.tracer.LANGFUSE_AVAILABLE', False)
    @patch('essay_corrector.utils.tracer.track_api_usage')
    async def test_without_langfuse(self, mock_track):
        inner = _inner()
        observed = ObservedLLM(inner)

        result = await observed.generate_content(prompt="프롬프트", name="essay_correction")

        inner.generate_content.assert_awaited_once_with(prompt="프롬프트", name="essay_correction")
        mock_track.assert_called_once_with(USAGE, operation="llm.correction", model="gemini-2.0-flash")
        assert result["text"] == "결과"

    @pytest.mark.asyncio
    @patch('essay_corrector.utils.tracer.LANGFUSE_AVAILABLE', True)
    @patch('essay_corrector.utils.tracer.lf')
    async def test_with_langfuse_records_generation(self, mock_lf):
        gen = MagicMock()
        mock_lf.start_as_current_generation.return_value.__enter__.return_value = gen
        observed = ObservedLLM(_inner())

        result = await observed.generate_content(
            prompt="프롬프트", prompt_meta={"prompt_version": "v1.0.0"}
        )

        assert result["text"] == "결과"
        mock_lf.start_as_current_generation.assert_called_once_with(
            name="llm.correction", model="gemini-2.0-flash"
        )
        _, kwargs = gen.update.call_args
        assert kwargs["usage_details"] == {"input": 10, "output": 5, "total": 15}
        assert kwargs["metadata"]["prompt_version"] == "v1.0.0"
        mock_lf.flush.assert_called_once()

    @pytest.mark.asyncio
    @patch('essay_corrector.utils.tracer.LANGFUSE_AVAILABLE', True)
    @patch('essay_corrector.utils.tracer.lf')
    async def test_with_langfuse_propagates_errors(self, mock_lf):
        gen = MagicMock()
        mock_lf.start_as_current_generation.return_value.__enter__.return_value = gen
        inner = _inner()
        inner.generate_content.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await ObservedLLM(inner).generate_content(prompt="프롬프트")

        gen.update.assert_any_call(level="ERROR", status_message="boom")
        mock_lf.flush.assert_called_once()
