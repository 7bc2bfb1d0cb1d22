# essay_corrector/models/correction.py
from typing import Annotated, Iterator, List, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CriteriaMet(BaseModel):
    met: bool = False
    feedback: str = ""

    @field_validator("met", mode="before")
    @classmethod
    def _null_met(cls, v):
        return False if v is None else v

    @field_validator("feedback", mode="before")
    @classmethod
    def _null_feedback(cls, v):
        return "" if v is None else v


class RawFeedback(BaseModel):
    """Legacy plain-string feedback; never scored."""
    kind: Literal["raw"] = "raw"
    text: str = ""


class StructuredFeedback(BaseModel):
    kind: Literal["structured"] = "structured"
    general: str = ""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        # null general or criterion falls back to the field default
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    # (rubric name, criterion) pairs in display order
    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        raise NotImplementedError


class IntroductionCriteria(StructuredFeedback):
    greeting: CriteriaMet = Field(default_factory=CriteriaMet)
    direction: CriteriaMet = Field(default_factory=CriteriaMet)

    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        yield "greeting", self.greeting
        yield "direction", self.direction


class BodyOCriteria(StructuredFeedback):
    opinion: CriteriaMet = Field(default_factory=CriteriaMet)

    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        yield "opinion", self.opinion


class BodyRCriteria(StructuredFeedback):
    reason: CriteriaMet = Field(default_factory=CriteriaMet)

    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        yield "reason", self.reason


class BodyECriteria(StructuredFeedback):
    example: CriteriaMet = Field(default_factory=CriteriaMet)

    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        yield "example", self.example


class BodyO2Criteria(StructuredFeedback):
    reemphasis: CriteriaMet = Field(default_factory=CriteriaMet)

    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        yield "reemphasis", self.reemphasis


class ConclusionCriteria(StructuredFeedback):
    summary: CriteriaMet = Field(default_factory=CriteriaMet)
    closing: CriteriaMet = Field(default_factory=CriteriaMet)

    def criteria(self) -> Iterator[Tuple[str, CriteriaMet]]:
        yield "summary", self.summary
        yield "closing", self.closing


IntroductionFeedback = Annotated[Union[IntroductionCriteria, RawFeedback], Field(discriminator="kind")]
BodyOFeedback = Annotated[Union[BodyOCriteria, RawFeedback], Field(discriminator="kind")]
BodyRFeedback = Annotated[Union[BodyRCriteria, RawFeedback], Field(discriminator="kind")]
BodyEFeedback = Annotated[Union[BodyECriteria, RawFeedback], Field(discriminator="kind")]
BodyO2Feedback = Annotated[Union[BodyO2Criteria, RawFeedback], Field(discriminator="kind")]
ConclusionFeedback = Annotated[Union[ConclusionCriteria, RawFeedback], Field(discriminator="kind")]


class OREOSectionCorrection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    body_o1: BodyOFeedback = Field(default_factory=RawFeedback, alias="bodyO1")
    body_r: BodyRFeedback = Field(default_factory=RawFeedback, alias="bodyR")
    body_e: BodyEFeedback = Field(default_factory=RawFeedback, alias="bodyE")
    body_o2: BodyO2Feedback = Field(default_factory=RawFeedback, alias="bodyO2")

    def parts(self) -> Tuple[Union[StructuredFeedback, RawFeedback], ...]:
        return self.body_o1, self.body_r, self.body_e, self.body_o2


class CorrectionResult(BaseModel):
    """Canonical shape every model answer is reconciled into before rendering."""
    model_config = ConfigDict(populate_by_name=True)

    introduction: IntroductionFeedback = Field(default_factory=RawFeedback)
    oreo_sections: List[OREOSectionCorrection] = Field(default_factory=list, alias="oreoSections")
    conclusion: ConclusionFeedback = Field(default_factory=RawFeedback)
    overall: str = ""

    def feedback_parts(self) -> Iterator[Union[StructuredFeedback, RawFeedback]]:
        yield self.introduction
        for section in self.oreo_sections:
            yield from section.parts()
        yield self.conclusion
