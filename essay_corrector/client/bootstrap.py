from typing import Optional
from essay_corrector.client.gemini import GeminiLLM
from essay_corrector.utils.tracer import ObservedLLM, LLM

_llm_singleton: Optional[LLM] = None

def build_llm() -> LLM:
    global _llm_singleton
    if _llm_singleton is None:
        base = GeminiLLM()                  # 순수 Gemini 클라이언트
        _llm_singleton = ObservedLLM(base)  # Langfuse 관측 래퍼
    return _llm_singleton
