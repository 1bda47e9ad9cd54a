from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PatientContextDto(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str
    first_name: str = ""
    last_name: str = ""
    gender: str = ""
    date_of_birth: date | None = None


class PatientCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    gender: Literal["male", "female", "other", ""] = ""
    date_of_birth: date | None = None


class FlowEntryDto(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str
    time: str = ""
    bp: str = ""
    heart_rate: str = Field(default="", alias="heartRate")
    rr: str = ""
    spo2: str = ""
    medications: list[str] = Field(default_factory=list)


class IvSedationListItemDto(BaseModel):
    id: str
    patient_id: str
    patient_name: str = ""
    sedation_date: str | None = None
    status: Literal["draft", "completed"]
    level_of_sedation: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_draft(self) -> bool:
        return self.status == "draft"
