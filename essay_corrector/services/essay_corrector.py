from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, Optional

from essay_corrector.core.exceptions import EMPTY_ESSAY_MESSAGE, ValidationException
from essay_corrector.models.correction import CorrectionResult
from essay_corrector.models.essay import EssayDraft
from essay_corrector.services.compiler import compile_essay, has_essay_content
from essay_corrector.services.normalizer import normalize_response
from essay_corrector.utils.prompt_loader import PromptLoader
from essay_corrector.utils.tracer import LLM

logger = logging.getLogger(__name__)


@dataclass
class CorrectionOutcome:
    result: CorrectionResult
    raw_text: str
    timings: Dict[str, float] = field(default_factory=dict)
    usage: Optional[Dict[str, Any]] = None
    timeline: Dict[str, str] = field(default_factory=dict)


class EssayCorrector:
    """Top-level orchestration for one correction request.

    Flow:
      validate → compile → build instruction → generateContent → normalize
    """

    def __init__(self, llm: LLM, loader: PromptLoader):
        self.llm = llm
        self.loader = loader

    def build_prompt(self, draft: EssayDraft) -> str:
        if not has_essay_content(draft):
            raise ValidationException(EMPTY_ESSAY_MESSAGE, field="essay")
        return self.loader.build_instruction(compile_essay(draft))

    async def correct(self, draft: EssayDraft) -> CorrectionOutcome:
        t0 = perf_counter()
        timeline = {"start": datetime.now(timezone.utc).isoformat()}
        timings_ms: Dict[str, float] = {}

        prompt = self.build_prompt(draft)
        t1 = perf_counter()
        timings_ms["compile"] = (t1 - t0) * 1000.0

        response = await self.llm.generate_content(
            prompt=prompt,
            name="essay_correction",
            prompt_key="correction",
            prompt_meta={
                "prompt_version": self.loader.version,
                "oreo_sections": len(draft.oreo_sections),
                "prompt_length": len(prompt),
            },
        )
        t2 = perf_counter()
        timings_ms["llm"] = (t2 - t1) * 1000.0

        text = response["text"]
        logger.info(f"Correction response received ({len(text)} chars, finish={response.get('finish_reason')})")

        result = normalize_response(text)
        t3 = perf_counter()
        timings_ms["normalize"] = (t3 - t2) * 1000.0
        timings_ms["total"] = (t3 - t0) * 1000.0
        timeline["end"] = datetime.now(timezone.utc).isoformat()

        return CorrectionOutcome(
            result=result,
            raw_text=text,
            timings=timings_ms,
            usage=response.get("usage"),
            timeline=timeline,
        )
