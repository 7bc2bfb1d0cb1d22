import time
import logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv
load_dotenv()  # ★ 라우터/모듈 임포트 전에!

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from essay_corrector.api.v1.auth import router as auth_router
from essay_corrector.api.v1.essay import router as essay_router
from essay_corrector.core.config import settings
from essay_corrector.core.dependencies import get_llm, get_loader, get_performance_monitor
from essay_corrector.core.exceptions import CorrectionException, to_http_exception
from essay_corrector.utils.price_tracker import get_usage_summary

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI 애플리케이션 수명주기 관리"""
    startup_time = time.time()
    logger.info("Starting essay correction service...")

    # 프롬프트 사전 로딩
    try:
        loader = get_loader()
        logger.info(f"Prompts loaded: version={loader.version}, sections={loader.get_available_sections()}")
    except Exception as e:
        logger.warning(f"Prompt warmup failed: {e}")

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; correction requests will be rejected by the API")

    startup_duration = (time.time() - startup_time) * 1000
    logger.info(f"Application startup completed in {startup_duration:.1f}ms")

    yield

    logger.info(f"Shutting down. Final performance stats: {get_performance_monitor().get_stats()}")


def create_app() -> FastAPI:
    app = FastAPI(
        title="OREO Essay Correction API",
        version=APP_VERSION,
        description="중학생 논설문(서론 · OREO 본론 · 결론) 첨삭 서비스",
        lifespan=lifespan
    )

    @app.exception_handler(CorrectionException)
    async def correction_exception_handler(request: Request, exc: CorrectionException) -> JSONResponse:
        # raised outside a route body, e.g. while building cached dependencies
        request_id = getattr(request.state, "request_id", f"global_{int(time.time() * 1000)}")
        http_exc = to_http_exception(exc, request_id)
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", f"global_{int(time.time() * 1000)}")
        logger.error(f"[{request_id}] Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "detail": {
                    "error": "첨삭 과정에서 오류가 발생했습니다.",
                    "type": "InternalError",
                    "request_id": request_id,
                }
            }
        )

    # CORS (open by default; tighten as needed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router, prefix="/v1", tags=["auth"])
    app.include_router(essay_router, prefix="/v1", tags=["essay"])

    @app.get("/health")
    async def health():
        """Service status without calling the model API"""
        health_id = f"health_{int(time.time() * 1000)}"
        health_status = {
            "status": "healthy",
            "version": APP_VERSION,
            "prompt_version": settings.PROMPT_VERSION,
            "model": settings.GEMINI_MODEL,
            "health_id": health_id,
            "services": {},
            "performance": get_performance_monitor().get_stats(),
            "usage": get_usage_summary()["token_usage"],
        }

        try:
            get_loader().build_instruction("")
            health_status["services"]["prompts"] = "operational"
        except Exception as e:
            logger.warning(f"[{health_id}] Prompt check failed: {e}")
            health_status["services"]["prompts"] = "unavailable"
            health_status["status"] = "degraded"

        try:
            get_llm()
            health_status["services"]["llm"] = "initialized" if settings.GEMINI_API_KEY else "missing_api_key"
            if not settings.GEMINI_API_KEY:
                health_status["status"] = "degraded"
        except Exception as e:
            logger.warning(f"[{health_id}] LLM initialization check failed: {e}")
            health_status["services"]["llm"] = "unavailable"
            health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(status_code=status_code, content=health_status)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
