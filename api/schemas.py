from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ThresholdsModel(BaseModel):
    severe: float = 50.0
    moderate: float = 10.0


class AuditFiltersModel(BaseModel):
    year: int
    month: int = Field(ge=1, le=12)
    focused_day: Optional[int] = Field(default=None, ge=1, le=31)
    thresholds: ThresholdsModel = Field(default_factory=ThresholdsModel)


class AdminPinModel(BaseModel):
    pin: str

