import logging

from fastapi import APIRouter, Depends, Request

from essay_corrector.core.dependencies import (
    get_current_session,
    get_request_id,
    get_roster,
    get_session_registry,
    route_timer,
)
from essay_corrector.core.exceptions import CorrectionException, to_http_exception
from essay_corrector.models.account import Account, AccountView
from essay_corrector.models.request import AdminLoginRequest, PasswordChangeRequest, StudentLoginRequest
from essay_corrector.models.response import LoginResponse
from essay_corrector.services.auth import RosterStore, SessionRegistry, UserSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", dependencies=[Depends(route_timer)])


def _login_response(account: Account, registry: SessionRegistry) -> LoginResponse:
    session = registry.open(account)
    logger.info(f"Opened session for {account.role} '{account.account_id}' ({len(registry)} active)")
    return LoginResponse(
        session_id=session.session_id,
        account=AccountView.from_account(account),
        requires_password_change=not account.password_changed,
    )


@router.post("/login/student", response_model=LoginResponse)
def login_student(
    req: StudentLoginRequest,
    request: Request,
    roster: RosterStore = Depends(get_roster),
    registry: SessionRegistry = Depends(get_session_registry),
) -> LoginResponse:
    try:
        account = roster.authenticate_student(req.grade, req.class_no, req.number, req.password)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))
    return _login_response(account, registry)


@router.post("/login/admin", response_model=LoginResponse)
def login_admin(
    req: AdminLoginRequest,
    request: Request,
    roster: RosterStore = Depends(get_roster),
    registry: SessionRegistry = Depends(get_session_registry),
) -> LoginResponse:
    try:
        account = roster.authenticate_admin(req.admin_id, req.password)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))
    return _login_response(account, registry)


@router.post("/password", response_model=AccountView)
def change_password(
    req: PasswordChangeRequest,
    request: Request,
    session: UserSession = Depends(get_current_session),
    roster: RosterStore = Depends(get_roster),
) -> AccountView:
    try:
        updated = roster.change_password(session.account_id, req.current_password, req.new_password)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))
    return AccountView.from_account(updated)


@router.post("/logout")
def logout(
    session: UserSession = Depends(get_current_session),
    registry: SessionRegistry = Depends(get_session_registry),
) -> dict:
    registry.close(session.session_id)
    return {"status": "logged_out"}
