# essay_corrector/core/config.py
import os
from typing import Optional

from dotenv import load_dotenv

# .env 파일 로드
load_dotenv()


def _optional_float(name: str, default: str) -> Optional[float]:
    raw = os.getenv(name, default).strip()
    return float(raw) if raw else None


class Settings:
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_API_BASE: str = os.getenv(
        "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
    ).rstrip("/")
    # 빈 값이면 타임아웃 없이 전송 계층 기본값을 따른다
    API_TIMEOUT_S: Optional[float] = _optional_float("API_TIMEOUT_S", "60.0")
    PROMPT_VERSION: str = os.getenv("PROMPT_VERSION", "v1.0.0")

    # 데모용 계정 (해시/영속화 없음)
    ADMIN_ID: str = os.getenv("ADMIN_ID", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin1234")
    DEFAULT_STUDENT_PASSWORD: str = os.getenv("DEFAULT_STUDENT_PASSWORD", "1234")

    SLOW_REQUEST_MS: float = float(os.getenv("SLOW_REQUEST_MS", "2000"))

settings = Settings()
