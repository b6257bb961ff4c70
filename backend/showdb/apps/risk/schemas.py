from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .models import AssessmentStatus, RiskLevel

Likelihood = Literal["rare", "unlikely", "possible", "likely", "certain"]
Severity = Literal["negligible", "minor", "moderate", "major", "catastrophic"]


class RiskAssessmentItemBase(BaseModel):
    hazard_description: str = Field(..., min_length=1)
    who_at_risk: str = Field(..., min_length=1, max_length=255)
    existing_controls: Optional[str] = None
    additional_actions: Optional[str] = None
    severity: Severity = "moderate"
    likelihood: Likelihood = "possible"
    risk_level: Optional[RiskLevel] = None
    action_owner: Optional[str] = Field(None, max_length=255)
    target_date: Optional[date] = None
    status: str = Field("open", max_length=32)
    sort_order: Optional[int] = None


class RiskAssessmentItemCreate(RiskAssessmentItemBase):
    pass


class RiskAssessmentItemUpdate(BaseModel):
    hazard_description: Optional[str] = Field(None, min_length=1)
    who_at_risk: Optional[str] = Field(None, min_length=1, max_length=255)
    existing_controls: Optional[str] = None
    additional_actions: Optional[str] = None
    severity: Optional[Severity] = None
    likelihood: Optional[Likelihood] = None
    risk_level: Optional[RiskLevel] = None
    action_owner: Optional[str] = Field(None, max_length=255)
    target_date: Optional[date] = None
    status: Optional[str] = Field(None, max_length=32)
    sort_order: Optional[int] = None


class RiskAssessmentItemRead(RiskAssessmentItemBase):
    id: str
    risk_assessment_id: str
    risk_level: RiskLevel
    created_at: datetime

    class Config:
        from_attributes = True


class RiskAssessmentBase(BaseModel):
    ride_id: str
    assessment_date: date
    assessor_name: str = Field(..., min_length=1, max_length=255)
    overall_status: AssessmentStatus = AssessmentStatus.DRAFT
    review_date: Optional[date] = None
    notes: Optional[str] = None


class RiskAssessmentCreate(RiskAssessmentBase):
    items: List[RiskAssessmentItemCreate] = []


class RiskAssessmentUpdate(BaseModel):
    assessment_date: Optional[date] = None
    assessor_name: Optional[str] = Field(None, min_length=1, max_length=255)
    overall_status: Optional[AssessmentStatus] = None
    review_date: Optional[date] = None
    notes: Optional[str] = None


class RiskAssessmentRead(RiskAssessmentBase):
    id: str
    user_id: str
    items: List[RiskAssessmentItemRead] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
