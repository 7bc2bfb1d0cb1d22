from pydantic import BaseModel, Field, validator
from typing import Optional

from essay_corrector.models.essay import SectionField


class StudentLoginRequest(BaseModel):
    grade: int = Field(ge=1, le=9, description="학년")
    class_no: int = Field(ge=1, le=99, description="반")
    number: int = Field(ge=1, le=99, description="번호")
    password: str = Field(min_length=1)

    class Config:
        json_schema_extra = {
            "example": {"grade": 1, "class_no": 8, "number": 1, "password": "1234"}
        }


class AdminLoginRequest(BaseModel):
    admin_id: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=4, max_length=64)

    @validator('new_password')
    def validate_new_password(cls, v):
        if not v.strip():
            raise ValueError("Password cannot be blank")
        return v


class SectionFieldUpdate(BaseModel):
    field: SectionField
    value: str = Field(max_length=4000)


class DraftUpdateRequest(BaseModel):
    """Partial update of the top-level draft fields; omitted fields stay as they are."""
    title: Optional[str] = Field(None, max_length=200)
    introduction: Optional[str] = Field(None, max_length=4000)
    conclusion: Optional[str] = Field(None, max_length=4000)
