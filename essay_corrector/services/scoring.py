from __future__ import annotations

from typing import Dict, Any, Optional

from essay_corrector.models.correction import CorrectionResult, StructuredFeedback
from essay_corrector.models.essay import EssayDraft

MAX_SCORE = 100
MIN_SCORE = 0
PENALTY_PER_UNMET = 10
MULTI_SECTION_BONUS = 10


def count_unmet_criteria(result: CorrectionResult) -> int:
    """Unmet rubric criteria over every structured feedback part; raw strings are skipped."""
    unmet = 0
    for part in result.feedback_parts():
        if not isinstance(part, StructuredFeedback):
            continue
        unmet += sum(1 for _, criterion in part.criteria() if not criterion.met)
    return unmet


def calculate_score(result: Optional[CorrectionResult], draft: EssayDraft) -> int:
    """Heuristic 0–100 score shown next to the feedback.

    - Start at 100, minus 10 per unmet criterion
      (introduction 2, each OREO section 4, conclusion 2)
    - +10 when more than one OREO section was written
    - Clamp to [0, 100]
    """
    if result is None:
        return MIN_SCORE

    score = MAX_SCORE - PENALTY_PER_UNMET * count_unmet_criteria(result)
    if len(draft.oreo_sections) > 1:
        score += MULTI_SECTION_BONUS

    return max(MIN_SCORE, min(MAX_SCORE, score))


def score_breakdown(result: CorrectionResult, draft: EssayDraft) -> Dict[str, Any]:
    """Per-criterion met flags keyed like ``introduction.greeting`` or ``oreoSections[0].reason``."""
    checks: Dict[str, bool] = {}

    def _collect(prefix: str, part: Any) -> None:
        if isinstance(part, StructuredFeedback):
            for name, criterion in part.criteria():
                checks[f"{prefix}.{name}"] = criterion.met

    _collect("introduction", result.introduction)
    for index, section in enumerate(result.oreo_sections):
        for part in section.parts():
            _collect(f"oreoSections[{index}]", part)
    _collect("conclusion", result.conclusion)

    return {
        "score": calculate_score(result, draft),
        "unmet": sum(1 for met in checks.values() if not met),
        "bonus_applied": len(draft.oreo_sections) > 1,
        "checks": checks,
    }
