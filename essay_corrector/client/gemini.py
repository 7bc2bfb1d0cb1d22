import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from essay_corrector.core.config import settings
from essay_corrector.core.exceptions import LLMRequestException, ResponseFormatException
from essay_corrector.utils.price_tracker import TokenUsage

logger = logging.getLogger(__name__)


def extract_candidate_text(data: Any) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a generateContent envelope."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise ResponseFormatException(details={"reason": f"missing {e}"}) from e
    if not isinstance(text, str):
        raise ResponseFormatException(details={"reason": "candidate text is not a string"})
    return text


class GeminiLLM:
    """generateContent 최소 래퍼: 요청 1회, 재시도 없음"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.api_base = (api_base or settings.GEMINI_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT_S
        self.http = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    async def generate_content(
        self,
        *,
        prompt: str,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:

        def _invoke_sync() -> Dict[str, Any]:
            try:
                resp = self.http.post(
                    self.endpoint,
                    headers={
                        "Content-Type": "application/json",
                        "x-goog-api-key": self.api_key,
                    },
                    json=self.build_payload(prompt),
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.error(f"Gemini request '{name or 'generate'}' failed before a response: {e}")
                raise LLMRequestException(details={"reason": str(e)}) from e

            if not resp.ok:
                logger.error(f"Gemini request '{name or 'generate'}' returned HTTP {resp.status_code}: {resp.text[:500]}")
                raise LLMRequestException(status_code=resp.status_code)

            try:
                data = resp.json()
            except ValueError as e:
                raise ResponseFormatException(details={"reason": "body is not JSON"}) from e

            text = extract_candidate_text(data)
            usage = TokenUsage.from_gemini(data.get("usageMetadata") or {})
            return {
                "text": text,
                "usage": usage.__dict__,
                "finish_reason": data["candidates"][0].get("finishReason"),
            }

        return await asyncio.to_thread(_invoke_sync)
