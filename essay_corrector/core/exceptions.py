# essay_corrector/core/exceptions.py
from fastapi import HTTPException, status
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

# 사용자에게 그대로 보여지는 메시지
EMPTY_ESSAY_MESSAGE = "첨삭할 글을 입력해주세요."
REQUEST_FAILED_MESSAGE = "API 요청에 실패했습니다."
RESPONSE_FORMAT_MESSAGE = "API 응답 형식이 올바르지 않습니다."
GENERIC_FAILURE_MESSAGE = "첨삭 과정에서 오류가 발생했습니다."


class CorrectionException(Exception):
    """Base exception for essay correction errors"""
    error_code = "CORRECTION_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(CorrectionException):
    """Input validation errors"""
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.field = field
        super().__init__(message, details)


class LLMRequestException(CorrectionException):
    """Non-success HTTP status or transport failure talking to the model API"""
    error_code = "LLM_REQUEST_ERROR"

    def __init__(self, message: str = REQUEST_FAILED_MESSAGE, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        super().__init__(message, details)


class ResponseFormatException(CorrectionException):
    """The model API answered without the expected envelope"""
    error_code = "RESPONSE_FORMAT_ERROR"

    def __init__(self, message: str = RESPONSE_FORMAT_MESSAGE, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class EssayLockedException(CorrectionException):
    """The draft already has a correction result and is read-only"""
    error_code = "ESSAY_LOCKED"


class SubmissionInProgressException(CorrectionException):
    """A correction request is already in flight for this draft"""
    error_code = "SUBMISSION_IN_PROGRESS"


class AuthenticationException(CorrectionException):
    """Login, session or password change failures"""
    error_code = "AUTHENTICATION_ERROR"


class PromptLoadException(CorrectionException):
    """Prompt loading related errors"""
    error_code = "PROMPT_LOAD_ERROR"

    def __init__(self, message: str, version: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.version = version
        super().__init__(message, details)


_STATUS_BY_TYPE = {
    ValidationException: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EssayLockedException: status.HTTP_409_CONFLICT,
    SubmissionInProgressException: status.HTTP_409_CONFLICT,
    LLMRequestException: status.HTTP_502_BAD_GATEWAY,
    ResponseFormatException: status.HTTP_502_BAD_GATEWAY,
    AuthenticationException: status.HTTP_401_UNAUTHORIZED,
    PromptLoadException: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_error_response(status_code: int, error_type: str, message: str, request_id: str, **extra_details) -> HTTPException:
    """Create standardized error response"""
    detail = {
        "error": message,
        "type": error_type,
        "request_id": request_id,
        **extra_details
    }
    return HTTPException(status_code=status_code, detail=detail)


def to_http_exception(exc: CorrectionException, request_id: str) -> HTTPException:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type, code in _STATUS_BY_TYPE.items():
        if isinstance(exc, exc_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"[{request_id}] {exc.__class__.__name__}: {exc.message}", extra={"details": exc.details})
    else:
        logger.warning(f"[{request_id}] {exc.__class__.__name__}: {exc.message}")

    extra: Dict[str, Any] = {"code": exc.error_code}
    if isinstance(exc, ValidationException) and exc.field:
        extra["field"] = exc.field
    return create_error_response(status_code, exc.__class__.__name__, exc.message, request_id, **extra)
