from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from essay_corrector.core.config import settings
from essay_corrector.core.exceptions import AuthenticationException, ValidationException
from essay_corrector.models.account import Account
from essay_corrector.services.essay_corrector import EssayCorrector
from essay_corrector.services.session import EssayCorrectionSession

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "학번 또는 비밀번호가 올바르지 않습니다."


def compose_student_id(grade: int, class_no: int, number: int) -> str:
    """학년 1자리 + 반 2자리 + 번호 2자리, e.g. (1, 8, 1) -> "10801"."""
    if not (1 <= grade <= 9 and 1 <= class_no <= 99 and 1 <= number <= 99):
        raise ValidationException("학년/반/번호 값이 올바르지 않습니다.", field="student_id")
    return f"{grade}{class_no:02d}{number:02d}"


def default_roster() -> list[Account]:
    return [
        Account(
            account_id="10801",
            name="김옥현",
            password=settings.DEFAULT_STUDENT_PASSWORD,
            role="student",
        ),
        Account(
            account_id=settings.ADMIN_ID,
            name="관리자",
            password=settings.ADMIN_PASSWORD,
            role="admin",
        ),
    ]


class RosterStore:
    """In-memory account roster. Records are immutable and replaced on change."""

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        source = default_roster() if accounts is None else accounts
        self._accounts: Dict[str, Account] = {a.account_id: a for a in source}

    def get(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def _authenticate(self, account_id: str, password: str, role: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None or account.role != role or not secrets.compare_digest(account.password, password):
            logger.info(f"Login rejected for {role} '{account_id}'")
            raise AuthenticationException(LOGIN_FAILED_MESSAGE)
        return account

    def authenticate_student(self, grade: int, class_no: int, number: int, password: str) -> Account:
        return self._authenticate(compose_student_id(grade, class_no, number), password, "student")

    def authenticate_admin(self, admin_id: str, password: str) -> Account:
        return self._authenticate(admin_id, password, "admin")

    def change_password(self, account_id: str, current_password: str, new_password: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None or not secrets.compare_digest(account.password, current_password):
            raise AuthenticationException("현재 비밀번호가 올바르지 않습니다.")
        if new_password == current_password:
            raise ValidationException("새 비밀번호가 기존 비밀번호와 같습니다.", field="new_password")

        updated = account.model_copy(update={"password": new_password, "password_changed": True})
        self._accounts[account_id] = updated
        logger.info(f"Password changed for '{account_id}'")
        return updated


@dataclass
class UserSession:
    session_id: str
    account_id: str
    essay: EssayCorrectionSession


class SessionRegistry:
    """Logged-in sessions keyed by an opaque handle; nothing survives logout or restart."""

    def __init__(self, corrector: EssayCorrector):
        self.corrector = corrector
        self._sessions: Dict[str, UserSession] = {}

    def open(self, account: Account) -> UserSession:
        session = UserSession(
            session_id=secrets.token_urlsafe(24),
            account_id=account.account_id,
            essay=EssayCorrectionSession(self.corrector),
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: Optional[str]) -> UserSession:
        session = self._sessions.get(session_id or "")
        if session is None:
            raise AuthenticationException("로그인이 필요합니다.")
        return session

    def close(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
