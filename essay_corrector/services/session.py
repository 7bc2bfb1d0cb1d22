from __future__ import annotations

import logging
from typing import Optional

from essay_corrector.core.exceptions import (
    GENERIC_FAILURE_MESSAGE,
    CorrectionException,
    EssayLockedException,
    SubmissionInProgressException,
    ValidationException,
)
from essay_corrector.models.correction import CorrectionResult
from essay_corrector.models.essay import DraftField, EssayDraft, OREOSection, SectionField
from essay_corrector.services.essay_corrector import CorrectionOutcome, EssayCorrector
from essay_corrector.services.scoring import calculate_score

logger = logging.getLogger(__name__)


class EssayCorrectionSession:
    """State of one essay form: a draft, at most one result, a loading flag and an error.

    The draft is editable until a result exists. Only one submission can be in
    flight; every failure returns the form to an editable, resubmittable state.
    """

    def __init__(self, corrector: EssayCorrector, draft: Optional[EssayDraft] = None):
        self.corrector = corrector
        self.draft = draft or EssayDraft()
        self.correction_result: Optional[CorrectionResult] = None
        self.last_outcome: Optional[CorrectionOutcome] = None
        self.is_loading = False
        self.error = ""

    @property
    def read_only(self) -> bool:
        return self.correction_result is not None

    def _ensure_editable(self) -> None:
        if self.read_only:
            raise EssayLockedException("첨삭이 완료된 글은 수정할 수 없습니다.")
        if self.is_loading:
            raise SubmissionInProgressException("첨삭 중에는 글을 수정할 수 없습니다.")

    def update_field(self, field: DraftField, value: str) -> EssayDraft:
        self._ensure_editable()
        setattr(self.draft, field, value)
        return self.draft

    def update_section(self, section_id: str, field: SectionField, value: str) -> OREOSection:
        self._ensure_editable()
        try:
            section = self.draft.find_section(section_id)
        except KeyError:
            raise ValidationException(f"본론 섹션을 찾을 수 없습니다: {section_id}", field="section_id")
        setattr(section, field, value)
        return section

    def add_section(self) -> OREOSection:
        self._ensure_editable()
        return self.draft.add_section()

    def remove_section(self, section_id: str) -> bool:
        self._ensure_editable()
        removed = self.draft.remove_section(section_id)
        if not removed:
            logger.debug(f"Section {section_id} kept ({len(self.draft.oreo_sections)} remaining)")
        return removed

    async def submit(self) -> CorrectionResult:
        if self.read_only:
            raise EssayLockedException("이미 첨삭이 완료된 글입니다.")
        if self.is_loading:
            raise SubmissionInProgressException("첨삭이 진행 중입니다.")

        self.error = ""
        self.is_loading = True
        try:
            outcome = await self.corrector.correct(self.draft)
        except CorrectionException as e:
            self.error = e.message
            raise
        except Exception:
            logger.exception("Unexpected error during essay correction")
            self.error = GENERIC_FAILURE_MESSAGE
            raise
        finally:
            self.is_loading = False

        self.last_outcome = outcome
        self.correction_result = outcome.result
        return outcome.result

    def score(self) -> Optional[int]:
        if self.correction_result is None:
            return None
        return calculate_score(self.correction_result, self.draft)

    def reset(self) -> None:
        """Start a new essay; the previous draft and result are discarded."""
        if self.is_loading:
            raise SubmissionInProgressException("첨삭이 진행 중입니다.")
        self.draft = EssayDraft()
        self.correction_result = None
        self.last_outcome = None
        self.error = ""
