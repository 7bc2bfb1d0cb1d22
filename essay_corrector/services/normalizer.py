from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Type

from essay_corrector.models.correction import (
    BodyECriteria,
    BodyO2Criteria,
    BodyOCriteria,
    BodyRCriteria,
    ConclusionCriteria,
    CorrectionResult,
    IntroductionCriteria,
    OREOSectionCorrection,
    RawFeedback,
    StructuredFeedback,
)
from essay_corrector.services.register import convert_to_formal_style

logger = logging.getLogger(__name__)

SECTIONS_KEY = "oreoSections"
# 본론 한 덩어리의 키와 구조화 모델
BODY_PART_MODELS: Dict[str, Type[StructuredFeedback]] = {
    "bodyO1": BodyOCriteria,
    "bodyR": BodyRCriteria,
    "bodyE": BodyECriteria,
    "bodyO2": BodyO2Criteria,
}

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_block(text: str) -> Optional[str]:
    """Return the greedy first-brace-to-last-brace substring, if any."""
    if not text or not isinstance(text, str):
        return None
    match = _JSON_BLOCK.search(text)
    return match.group(0) if match else None


def fallback_result(text: str) -> CorrectionResult:
    """Free-text-only result used whenever the answer carries no usable JSON."""
    return CorrectionResult(overall=text or "")


def reconcile_sections(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Bring the body feedback into the per-section array shape.

    - ``oreoSections`` already a list: kept as-is.
    - legacy flat ``bodyO1/bodyR/bodyE/bodyO2``: wrapped into a one-element
      list and the flat keys removed.

    Applying this twice gives the same result as applying it once.
    """
    reconciled = dict(payload)
    if isinstance(reconciled.get(SECTIONS_KEY), list):
        return reconciled

    section = {key: reconciled.pop(key, "") or "" for key in BODY_PART_MODELS}
    reconciled[SECTIONS_KEY] = [section]
    return reconciled


def _coerce_feedback(value: Any, model: Type[StructuredFeedback]) -> StructuredFeedback | RawFeedback:
    if isinstance(value, (model, RawFeedback)):
        return value
    if isinstance(value, dict):
        if value.get("kind") == "raw":
            return RawFeedback(text=str(value.get("text") or ""))
        data = {k: v for k, v in value.items() if k != "kind"}
        structured = model.model_validate(data)
        structured.general = convert_to_formal_style(structured.general) or ""
        return structured
    if value is None:
        return RawFeedback()
    return RawFeedback(text=value if isinstance(value, str) else json.dumps(value, ensure_ascii=False))


def _coerce_section(value: Any) -> OREOSectionCorrection:
    if isinstance(value, OREOSectionCorrection):
        value = value.model_dump(by_alias=True)
    if not isinstance(value, dict):
        logger.warning(f"Ignoring malformed OREO section feedback of type {type(value).__name__}")
        value = {}
    parts = {
        key: _coerce_feedback(value.get(key), model) for key, model in BODY_PART_MODELS.items()
    }
    return OREOSectionCorrection(**parts)


def normalize_payload(payload: Dict[str, Any]) -> CorrectionResult:
    """Turn a parsed model answer (either body shape) into the canonical result.

    Only the ``general`` commentary of structured feedback goes through the
    register conversion; per-criterion ``feedback`` strings stay untouched.
    """
    reconciled = reconcile_sections(payload)
    sections: List[OREOSectionCorrection] = [
        _coerce_section(section) for section in reconciled.get(SECTIONS_KEY) or []
    ]
    overall = reconciled.get("overall")
    return CorrectionResult(
        introduction=_coerce_feedback(reconciled.get("introduction"), IntroductionCriteria),
        oreo_sections=sections,
        conclusion=_coerce_feedback(reconciled.get("conclusion"), ConclusionCriteria),
        overall=overall if isinstance(overall, str) else ("" if overall is None else str(overall)),
    )


def normalize_response(text: str) -> CorrectionResult:
    """Parse the model's free-text answer into a CorrectionResult.

    Never raises on malformed output: missing or unparsable JSON degrades to a
    result holding the raw text as ``overall``.
    """
    block = extract_json_block(text)
    if block is None:
        logger.info("No JSON object found in model response; using raw text as overall feedback")
        return fallback_result(text)

    try:
        payload = json.loads(block)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON 파싱 오류: {e}")
        return fallback_result(text)

    if not isinstance(payload, dict):
        logger.warning(f"Model response JSON is a {type(payload).__name__}, expected an object")
        return fallback_result(text)

    try:
        return normalize_payload(payload)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError subclass
        logger.warning(f"Model response did not match the correction schema: {e}")
        return fallback_result(text)
