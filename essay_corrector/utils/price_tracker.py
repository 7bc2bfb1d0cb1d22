# essay_corrector/utils/price_tracker.py
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, Optional, Tuple

# USD per 1M tokens: (input, output)
GEMINI_PRICING: Dict[str, Tuple[float, float]] = {
    "gemini-2.0-flash": (0.10, 0.40),
    "gemini-2.0-flash-lite": (0.075, 0.30),
    "gemini-2.5-flash": (0.30, 2.50),
    "gemini-2.5-pro": (1.25, 10.0),
}
DEFAULT_MODEL = "gemini-2.0-flash"
HISTORY_LIMIT = 500


@dataclass
class TokenUsage:
    """Token counts for one or more generateContent calls."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: 'TokenUsage') -> 'TokenUsage':
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens
        )

    @classmethod
    def from_gemini(cls, usage_metadata: Dict[str, Any]) -> 'TokenUsage':
        """Build from a generateContent ``usageMetadata`` block."""
        prompt_tokens = int(usage_metadata.get("promptTokenCount", 0) or 0)
        completion_tokens = int(usage_metadata.get("candidatesTokenCount", 0) or 0)
        total_tokens = int(usage_metadata.get("totalTokenCount", 0) or prompt_tokens + completion_tokens)
        return cls(prompt_tokens, completion_tokens, total_tokens)

    @classmethod
    def from_dict(cls, usage_data: Dict[str, Any]) -> 'TokenUsage':
        return cls(
            prompt_tokens=int(usage_data.get("prompt_tokens", 0) or 0),
            completion_tokens=int(usage_data.get("completion_tokens", 0) or 0),
            total_tokens=int(usage_data.get("total_tokens", 0) or 0),
        )


def estimate_cost(usage: TokenUsage, model: Optional[str] = None) -> Dict[str, float]:
    """Dollar cost of ``usage``; unknown models are priced like the default model."""
    input_rate, output_rate = GEMINI_PRICING.get(model or DEFAULT_MODEL, GEMINI_PRICING[DEFAULT_MODEL])
    input_cost = usage.prompt_tokens / 1_000_000 * input_rate
    output_cost = usage.completion_tokens / 1_000_000 * output_rate
    return {
        "input_cost": round(input_cost, 9),
        "output_cost": round(output_cost, 9),
        "total_cost": round(input_cost + output_cost, 9),
    }


@dataclass
class PriceTracker:
    """Process-wide usage and cost accounting, split per model."""

    default_model: str = DEFAULT_MODEL
    usage_by_model: Dict[str, TokenUsage] = field(default_factory=dict)
    calls_by_model: Dict[str, int] = field(default_factory=dict)
    session_start: datetime = field(default_factory=datetime.now)
    call_history: Deque[Dict[str, Any]] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))

    @property
    def session_calls(self) -> int:
        return sum(self.calls_by_model.values())

    @property
    def total_usage(self) -> TokenUsage:
        total = TokenUsage()
        for usage in self.usage_by_model.values():
            total += usage
        return total

    def track_usage(
        self,
        usage_data: Dict[str, Any],
        operation: str = "correction",
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Record one call and return its usage and cost."""
        model = model or self.default_model
        call_usage = TokenUsage.from_dict(usage_data)

        self.usage_by_model[model] = self.usage_by_model.get(model, TokenUsage()) + call_usage
        self.calls_by_model[model] = self.calls_by_model.get(model, 0) + 1

        call_record = {
            "timestamp": datetime.now().isoformat(),
            "operation": operation,
            "model": model,
            "usage": call_usage.__dict__,
            "cost": estimate_cost(call_usage, model),
        }
        self.call_history.append(call_record)
        return call_record

    def get_session_summary(self) -> Dict[str, Any]:
        total = self.total_usage
        calls = self.session_calls
        total_cost = sum(
            estimate_cost(usage, model)["total_cost"] for model, usage in self.usage_by_model.items()
        )

        return {
            "session_info": {
                "start_time": self.session_start.isoformat(),
                "duration_seconds": (datetime.now() - self.session_start).total_seconds(),
                "total_calls": calls,
            },
            "token_usage": {
                "total_prompt_tokens": total.prompt_tokens,
                "total_completion_tokens": total.completion_tokens,
                "total_tokens": total.total_tokens,
                "avg_tokens_per_call": total.total_tokens / max(1, calls),
            },
            "cost_breakdown": {
                "total_cost": round(total_cost, 6),
                "avg_cost_per_call": round(total_cost / max(1, calls), 6),
                "by_model": {
                    model: {"calls": self.calls_by_model[model], **estimate_cost(usage, model)}
                    for model, usage in self.usage_by_model.items()
                },
            },
        }

    def reset_session(self) -> None:
        self.usage_by_model.clear()
        self.calls_by_model.clear()
        self.call_history.clear()
        self.session_start = datetime.now()


# Global tracker instance
_global_tracker = PriceTracker()


def track_api_usage(usage_data: Dict[str, Any], operation: str = "correction",
                    model: Optional[str] = None) -> Dict[str, Any]:
    return _global_tracker.track_usage(usage_data, operation, model)


def get_usage_summary() -> Dict[str, Any]:
    return _global_tracker.get_session_summary()
