from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from essay_corrector.models.account import AccountView
from essay_corrector.models.correction import CorrectionResult
from essay_corrector.models.essay import EssayDraft


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LoginResponse(BaseModel):
    session_id: str
    account: AccountView
    requires_password_change: bool


class EssayStateResponse(BaseModel):
    """Everything the form needs to render one page instance."""
    model_config = ConfigDict(populate_by_name=True)

    draft: EssayDraft
    correction_result: Optional[CorrectionResult] = Field(None, alias="correctionResult")
    score: Optional[int] = None
    is_loading: bool = Field(False, alias="isLoading")
    read_only: bool = Field(False, alias="readOnly")
    error: str = ""


class SubmitResponse(EssayStateResponse):
    timings: Dict[str, float] = Field(default_factory=dict)
    token_usage: Optional[TokenUsage] = None
