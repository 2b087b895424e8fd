from pydantic import BaseModel, Field, field_validator
from datetime import date
from typing import Optional


def _to_str(v):
    # class/year/roll are stored as strings whatever the form sends
    if v is None or isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return str(int(v)) if float(v).is_integer() else str(v)
    if isinstance(v, str):
        return v.strip()
    return v


class StudentBase(BaseModel):
    roll: Optional[str] = None
    section: Optional[str] = None
    shift: Optional[str] = None
    group: Optional[str] = None
    father_name: Optional[str] = Field(default=None, alias="fatherName")
    mother_name: Optional[str] = Field(default=None, alias="motherName")
    mobile_number: Optional[str] = Field(default=None, alias="mobileNumber")
    dob: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    photo: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("roll", mode="before")
    @classmethod
    def roll_to_str(cls, v):
        return _to_str(v)


# body of POST /students
class StudentCreate(StudentBase):
    name: str = Field(min_length=1)
    birth_reg: str = Field(alias="birthReg", min_length=1)
    class_name: str = Field(alias="class", min_length=1)
    year: str = Field(min_length=1)
    student_id: Optional[str] = Field(default=None, alias="studentId")

    @field_validator("class_name", "year", "birth_reg", "student_id", mode="before")
    @classmethod
    def key_to_str(cls, v):
        return _to_str(v)


class StudentUpdate(StudentBase):
    name: Optional[str] = None
    birth_reg: Optional[str] = Field(default=None, alias="birthReg")
    class_name: Optional[str] = Field(default=None, alias="class")
    year: Optional[str] = None

    @field_validator("class_name", "year", "birth_reg", mode="before")
    @classmethod
    def key_to_str(cls, v):
        return _to_str(v)
