from essay_corrector.models.essay import EssayDraft


def compile_essay(draft: EssayDraft) -> str:
    """Join the structured form fields into the text block sent to the model."""
    parts = [
        f"제목: {draft.title}\n\n",
        f"서론: {draft.introduction}\n\n",
    ]
    for index, section in enumerate(draft.oreo_sections, start=1):
        parts.append(
            f"본론 {index}:\n"
            f"O (의견): {section.opinion}\n"
            f"R (이유): {section.reason}\n"
            f"E (예시): {section.example}\n"
            f"O (의견 재강조): {section.reemphasis}\n\n"
        )
    parts.append(f"결론: {draft.conclusion}")
    return "".join(parts)


def has_essay_content(draft: EssayDraft) -> bool:
    """True when anything besides the title was written (the title is never corrected)."""
    if draft.introduction.strip() or draft.conclusion.strip():
        return True
    return any(not section.is_blank() for section in draft.oreo_sections)
