"""해요체 → 합니다체 변환.

피드백 문장 자체는 학생에게 말하는 해요체를 유지하고, 첨삭 예시로 제시된
문장만 문어체(합니다체)로 바꾼다. 예시 문장으로 보는 범위는 두 가지다.

- 고정된 안내 문구("예시: ", "예를 들면: " 등) 뒤부터 줄바꿈 전까지
- 큰따옴표/작은따옴표로 감싼 부분

범위 밖의 텍스트는 한 글자도 바뀌지 않는다.
"""
import re
from typing import Dict, List, Optional, Tuple

EXAMPLE_LABELS: Tuple[str, ...] = (
    "예시: ",
    "예를 들면: ",
    "이렇게 써보세요: ",
    "다음과 같이 작성해보세요: ",
    "다음처럼 써보세요: ",
    "이런 식으로 작성해보세요: ",
    "이렇게 바꿔보세요: ",
    "이런 문장은 어떨까요? ",
    "다음 문장을 참고해보세요: ",
    "이런 표현은 어떨까요? ",
)

QUOTE_PAIRS: Tuple[Tuple[str, str], ...] = (
    ('"', '"'),
    ("“", "”"),
    ("'", "'"),
    ("‘", "’"),
)

# (해요체 어미, 합니다체 어미). 의문문(을까요)과 감탄문(군요)은 그대로 둔다.
ENDING_RULES: List[Tuple[str, str]] = [
    ("해요", "합니다"),
    ("예요", "입니다"),
    ("네요", "습니다"),
    ("세요", "십시오"),
    ("이에요", "입니다"),
    ("죠", "지요"),
    ("거예요", "것입니다"),
    ("을까요", "을까요"),
    ("나요", "납니다"),
    ("아요", "습니다"),
    ("어요", "습니다"),
    ("해도 돼요", "해도 됩니다"),
    ("하세요", "하십시오"),
    ("게요", "겠습니다"),
    ("군요", "군요"),
    ("겠네요", "겠습니다"),
]


def _build_ending_pattern(rules: List[Tuple[str, str]]) -> "re.Pattern[str]":
    # 긴 어미 우선, 한 번의 좌→우 치환. 변환 결과가 다시 규칙에 걸리지 않는다.
    ordered = sorted({casual for casual, _ in rules}, key=len, reverse=True)
    alternation = "|".join(re.escape(casual) for casual in ordered)
    return re.compile(rf"(?<=[가-힣])(?:{alternation})")


def _build_span_pattern() -> "re.Pattern[str]":
    alternatives = []
    for index, label in enumerate(EXAMPLE_LABELS):
        alternatives.append(rf"{re.escape(label)}(?P<label{index}>[^\n]+)")
    for index, (opening, closing) in enumerate(QUOTE_PAIRS):
        alternatives.append(
            rf"{re.escape(opening)}(?P<quote{index}>[^{re.escape(closing)}]+){re.escape(closing)}"
        )
    return re.compile("|".join(alternatives))


_FORMAL_BY_CASUAL: Dict[str, str] = dict(ENDING_RULES)
_ENDING_PATTERN = _build_ending_pattern(ENDING_RULES)
_SPAN_PATTERN = _build_span_pattern()


def to_formal_endings(sentence: str) -> str:
    """Rewrite every casual ending in ``sentence``, ignoring example detection."""
    return _ENDING_PATTERN.sub(lambda m: _FORMAL_BY_CASUAL[m.group(0)], sentence)


def _convert_span(match: "re.Match[str]") -> str:
    whole = match.group(0)
    for name, body in match.groupdict().items():
        if body is None:
            continue
        start = match.start(name) - match.start()
        end = match.end(name) - match.start()
        return whole[:start] + to_formal_endings(body) + whole[end:]
    return whole


def convert_to_formal_style(text: Optional[str]) -> Optional[str]:
    """Convert only the example sentences embedded in a feedback text."""
    if not text:
        return text
    return _SPAN_PATTERN.sub(_convert_span, text)
