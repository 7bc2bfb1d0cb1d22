# essay_corrector/core/dependencies.py
import logging
import time
from functools import lru_cache
from typing import AsyncIterator, Optional

from fastapi import Depends, Header, Request

from essay_corrector.client.bootstrap import build_llm
from essay_corrector.core.config import settings
from essay_corrector.core.exceptions import CorrectionException, to_http_exception
from essay_corrector.services.auth import RosterStore, SessionRegistry, UserSession
from essay_corrector.services.essay_corrector import EssayCorrector
from essay_corrector.utils.prompt_loader import PromptLoader
from essay_corrector.utils.tracer import LLM

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


@lru_cache()
def get_loader() -> PromptLoader:
    """프롬프트 로더 (버전 고정)"""
    return PromptLoader(version=settings.PROMPT_VERSION)


@lru_cache()
def get_llm() -> LLM:
    return build_llm()


@lru_cache()
def get_corrector() -> EssayCorrector:
    return EssayCorrector(get_llm(), get_loader())


@lru_cache()
def get_roster() -> RosterStore:
    return RosterStore()


@lru_cache()
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(get_corrector())


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", f"req_{int(time.time() * 1000)}")


def get_current_session(
    request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
    session_id: Optional[str] = Header(None, alias=SESSION_HEADER),
) -> UserSession:
    try:
        return registry.get(session_id)
    except CorrectionException as e:
        raise to_http_exception(e, get_request_id(request))


class PerformanceMonitor:
    """성능 모니터링 클래스"""

    def __init__(self):
        self.request_count = 0
        self.total_response_time = 0.0
        self.slow_requests = 0
        self.error_count = 0

    def record_request(self, response_time: float, success: bool = True):
        self.request_count += 1
        self.total_response_time += response_time

        if response_time > settings.SLOW_REQUEST_MS:
            self.slow_requests += 1

        if not success:
            self.error_count += 1

    def get_stats(self) -> dict:
        if self.request_count == 0:
            return {
                "total_requests": 0,
                "average_response_time": 0,
                "slow_request_ratio": 0,
                "error_ratio": 0
            }

        return {
            "total_requests": self.request_count,
            "average_response_time": self.total_response_time / self.request_count,
            "slow_request_ratio": self.slow_requests / self.request_count,
            "error_ratio": self.error_count / self.request_count
        }


_performance_monitor: Optional[PerformanceMonitor] = None


def get_performance_monitor() -> PerformanceMonitor:
    """성능 모니터 인스턴스 반환"""
    global _performance_monitor
    if _performance_monitor is None:
        _performance_monitor = PerformanceMonitor()
    return _performance_monitor


async def route_timer(request: Request) -> AsyncIterator[None]:
    start = time.perf_counter()
    method = request.method
    path = request.url.path
    request_id = f"req_{int(time.time() * 1000)}"
    request.state.request_id = request_id

    logger.info(f"[{request_id}] → {method} {path}")

    perf_monitor = get_performance_monitor()
    success = True

    try:
        yield
    except Exception as e:
        success = False
        logger.error(f"[{request_id}] Request failed: {e}")
        raise
    finally:
        dur_ms = (time.perf_counter() - start) * 1000.0
        slow_tag = " SLOW" if dur_ms > settings.SLOW_REQUEST_MS else ""
        perf_monitor.record_request(dur_ms, success)
        logger.info(f"[{request_id}] ← {method} {path} {dur_ms:.1f}ms{slow_tag}")
