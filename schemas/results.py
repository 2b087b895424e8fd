from pydantic import BaseModel, Field, FiniteFloat, field_validator, model_validator
from typing import Dict, Optional


def _to_key_str(v):
    # roll / class may arrive as numbers from the admin panel
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


# ===========================
#      SUBJECT MARK
# ===========================
class SubjectMark(BaseModel):
    """Written score plus an optional MCQ score for one subject"""
    written: Optional[FiniteFloat] = None
    mcq: Optional[FiniteFloat] = None

    @field_validator("written", "mcq", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("written", "mcq")
    @classmethod
    def not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("marks cannot be negative")
        return v

    @model_validator(mode="after")
    def require_written(self):
        if self.written is None:
            raise ValueError("written mark is required")
        return self

    @property
    def has_mcq(self) -> bool:
        return self.mcq is not None


# ===========================
#      RESULT PAYLOADS
# ===========================
class ResultCreate(BaseModel):
    roll: str = Field(min_length=1)
    name: str = Field(min_length=1)
    class_name: str = Field(alias="class", min_length=1)
    exam_type: str = Field(alias="examType", min_length=1)
    year: int
    marks: Dict[str, SubjectMark]

    class Config:
        populate_by_name = True

    @field_validator("roll", "class_name", mode="before")
    @classmethod
    def key_to_str(cls, v):
        return _to_key_str(v)

    @field_validator("marks")
    @classmethod
    def has_subjects(cls, v):
        if not v:
            raise ValueError("at least one subject is required")
        return v


class ResultUpdate(BaseModel):
    roll: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    class_name: Optional[str] = Field(default=None, alias="class", min_length=1)
    exam_type: Optional[str] = Field(default=None, alias="examType", min_length=1)
    year: Optional[int] = None
    marks: Optional[Dict[str, SubjectMark]] = None

    class Config:
        populate_by_name = True

    @field_validator("roll", "class_name", mode="before")
    @classmethod
    def key_to_str(cls, v):
        return _to_key_str(v)

    @field_validator("marks")
    @classmethod
    def has_subjects(cls, v):
        if v is not None and not v:
            raise ValueError("at least one subject is required")
        return v
