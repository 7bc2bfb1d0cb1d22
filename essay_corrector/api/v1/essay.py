import logging
import time

from fastapi import APIRouter, Depends, Request

from essay_corrector.core.dependencies import get_current_session, get_request_id, route_timer
from essay_corrector.core.exceptions import CorrectionException, to_http_exception
from essay_corrector.models.essay import OREOSection
from essay_corrector.models.request import DraftUpdateRequest, SectionFieldUpdate
from essay_corrector.models.response import EssayStateResponse, SubmitResponse, TokenUsage
from essay_corrector.services.auth import UserSession
from essay_corrector.services.session import EssayCorrectionSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/essay", dependencies=[Depends(route_timer)])


def _state(essay: EssayCorrectionSession, model=EssayStateResponse, **extra):
    return model(
        draft=essay.draft,
        correction_result=essay.correction_result,
        score=essay.score(),
        is_loading=essay.is_loading,
        read_only=essay.read_only,
        error=essay.error,
        **extra,
    )


@router.get("", response_model=EssayStateResponse)
def get_essay(session: UserSession = Depends(get_current_session)) -> EssayStateResponse:
    return _state(session.essay)


@router.put("", response_model=EssayStateResponse)
def update_essay(
    req: DraftUpdateRequest,
    request: Request,
    session: UserSession = Depends(get_current_session),
) -> EssayStateResponse:
    try:
        for field, value in req.model_dump(exclude_none=True).items():
            session.essay.update_field(field, value)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))
    return _state(session.essay)


@router.post("/sections", response_model=OREOSection, status_code=201)
def add_section(request: Request, session: UserSession = Depends(get_current_session)) -> OREOSection:
    try:
        return session.essay.add_section()
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))


@router.put("/sections/{section_id}", response_model=OREOSection)
def update_section(
    section_id: str,
    req: SectionFieldUpdate,
    request: Request,
    session: UserSession = Depends(get_current_session),
) -> OREOSection:
    try:
        return session.essay.update_section(section_id, req.field, req.value)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))


@router.delete("/sections/{section_id}", response_model=EssayStateResponse)
def remove_section(
    section_id: str,
    request: Request,
    session: UserSession = Depends(get_current_session),
) -> EssayStateResponse:
    # 마지막 남은 섹션 삭제 요청은 무시되고 현재 상태를 돌려준다
    try:
        session.essay.remove_section(section_id)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))
    return _state(session.essay)


@router.post("/submit", response_model=SubmitResponse)
async def submit_essay(
    request: Request,
    session: UserSession = Depends(get_current_session),
) -> SubmitResponse:
    request_id = get_request_id(request)
    essay = session.essay
    logger.info(f"[{request_id}] Submitting essay with {len(essay.draft.oreo_sections)} OREO section(s)")

    started = time.time()
    try:
        await essay.submit()
    except CorrectionException as e:
        logger.error(f"[{request_id}] Correction failed after {time.time() - started:.2f}s: {e.message}")
        raise to_http_exception(e, request_id)

    outcome = essay.last_outcome
    logger.info(f"[{request_id}] Correction completed in {time.time() - started:.2f}s, score={essay.score()}")
    return _state(
        essay,
        SubmitResponse,
        timings=outcome.timings if outcome else {},
        token_usage=TokenUsage(**outcome.usage) if outcome and outcome.usage else None,
    )


@router.post("/reset", response_model=EssayStateResponse)
def reset_essay(request: Request, session: UserSession = Depends(get_current_session)) -> EssayStateResponse:
    try:
        session.essay.reset()
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))
    return _state(session.essay)
