# essay_corrector/utils/tracer.py
from typing import Any, Dict, Optional, Protocol, runtime_checkable
import logging, os

from langfuse import Langfuse

from essay_corrector.utils.price_tracker import track_api_usage

logger = logging.getLogger(__name__)

public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
secret_key = os.getenv("LANGFUSE_SECRET_KEY")
host = os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")

LANGFUSE_AVAILABLE = bool(public_key and secret_key)

lf = None

if LANGFUSE_AVAILABLE:
    try:
        lf = Langfuse(public_key=public_key, secret_key=secret_key, host=host, release="v1.0.0")
        logger.info(f"Langfuse initialized. Host: {host}")
    except Exception as e:
        logger.warning(f"Langfuse initialization failed: {e}. Tracing disabled.")
        LANGFUSE_AVAILABLE = False
else:
    logger.info("Langfuse credentials not set. Tracing disabled.")


@runtime_checkable
class LLM(Protocol):
    model: Optional[str]

    async def generate_content(
        self, *, prompt: str,
        name: Optional[str] = None,
    ) -> Dict[str, Any]: ...


class ObservedLLM:
    def __init__(self, inner: LLM, service: str = "gemini"):
        self.inner = inner
        self.service = service

    @property
    def model(self) -> Optional[str]:
        return getattr(self.inner, "model", None)

    async def generate_content(
        self,
        *,
        prompt: str,
        name: Optional[str] = None,
        prompt_key: str = "correction",
        prompt_meta: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not (LANGFUSE_AVAILABLE and lf):
            result = await self.inner.generate_content(prompt=prompt, name=name)
            track_api_usage(result.get("usage", {}), operation=f"llm.{prompt_key}", model=self.model)
            return result

        # UI에서 "Type: Generation" + "Name: llm.correction" 로 필터
        with lf.start_as_current_generation(name=f"llm.{prompt_key}", model=self.model or self.service) as gen:
            md = {
                "service": self.service,
                "prompt_key": prompt_key,
                **(prompt_meta or {}),
            }
            gen.update(input={"prompt": prompt}, metadata=md)

            try:
                result = await self.inner.generate_content(prompt=prompt, name=name)

                usage_info = result.get("usage", {})
                cost_info = track_api_usage(usage_info, operation=f"llm.{prompt_key}", model=self.model)
                cost_data = cost_info.get("cost", {})

                gen.update(
                    output=result.get("text"),
                    metadata={
                        **md,
                        "cost_usd": cost_data.get("total_cost", 0),
                        "input_cost_usd": cost_data.get("input_cost", 0),
                        "output_cost_usd": cost_data.get("output_cost", 0),
                    },
                    usage_details={
                        "input": usage_info.get("prompt_tokens", 0),
                        "output": usage_info.get("completion_tokens", 0),
                        "total": usage_info.get("total_tokens", 0),
                    },
                )
                return result
            except Exception as e:
                gen.update(level="ERROR", status_message=str(e))
                raise
            finally:
                try:
                    lf.flush()
                except Exception as e:
                    logger.debug(f"Langfuse flush failed: {e}")
