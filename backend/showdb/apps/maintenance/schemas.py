from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .models import AnnualInspectionStatusEnum, CheckFrequencyEnum, CheckStatusEnum


# ---------------------------------------------------------------------------
# Maintenance records
# ---------------------------------------------------------------------------


class MaintenanceRecordBase(BaseModel):
    ride_id: str
    maintenance_date: date
    maintenance_type: str = Field(..., min_length=1, max_length=128)
    description: str = Field(..., min_length=1)
    performed_by: Optional[str] = Field(None, max_length=255)
    cost: Optional[float] = Field(None, ge=0)
    parts_replaced: Optional[str] = None
    next_maintenance_due: Optional[date] = None
    notes: Optional[str] = None


class MaintenanceRecordCreate(MaintenanceRecordBase):
    pass


class MaintenanceRecordUpdate(BaseModel):
    maintenance_date: Optional[date] = None
    maintenance_type: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = Field(None, min_length=1)
    performed_by: Optional[str] = Field(None, max_length=255)
    cost: Optional[float] = Field(None, ge=0)
    parts_replaced: Optional[str] = None
    next_maintenance_due: Optional[date] = None
    notes: Optional[str] = None


class MaintenanceRecordRead(MaintenanceRecordBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Check templates
# ---------------------------------------------------------------------------


class CheckTemplateItemBase(BaseModel):
    check_item_text: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=128)
    is_required: bool = True


class CheckTemplateItemCreate(CheckTemplateItemBase):
    pass


class CheckTemplateItemRead(CheckTemplateItemBase):
    id: str
    template_id: str
    sort_order: int

    class Config:
        from_attributes = True


class CheckTemplateBase(BaseModel):
    ride_id: str
    template_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    check_frequency: CheckFrequencyEnum = CheckFrequencyEnum.DAILY
    custom_interval_days: Optional[int] = Field(None, ge=1, le=366)


class CheckTemplateCreate(CheckTemplateBase):
    is_active: bool = True
    items: List[CheckTemplateItemCreate] = []


class CheckTemplateUpdate(BaseModel):
    template_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    custom_interval_days: Optional[int] = Field(None, ge=1, le=366)
    # When present the item list is replaced wholesale, in the given order.
    items: Optional[List[CheckTemplateItemCreate]] = None


class CheckTemplateRead(CheckTemplateBase):
    id: str
    user_id: str
    is_active: bool
    is_archived: bool
    items: List[CheckTemplateItemRead] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Inspection checks
# ---------------------------------------------------------------------------


class InspectionCheckBase(BaseModel):
    ride_id: str
    check_date: date
    check_frequency: CheckFrequencyEnum = CheckFrequencyEnum.DAILY
    inspector_name: str = Field(..., min_length=1, max_length=255)
    status: CheckStatusEnum = CheckStatusEnum.PENDING
    weather_conditions: Optional[str] = Field(None, max_length=255)
    environment_notes: Optional[str] = None
    compliance_officer: Optional[str] = Field(None, max_length=255)
    signature_data: Optional[str] = None
    notes: Optional[str] = None


class InspectionCheckCreate(InspectionCheckBase):
    pass


class InspectionCheckUpdate(BaseModel):
    check_date: Optional[date] = None
    check_frequency: Optional[CheckFrequencyEnum] = None
    inspector_name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[CheckStatusEnum] = None
    weather_conditions: Optional[str] = Field(None, max_length=255)
    environment_notes: Optional[str] = None
    compliance_officer: Optional[str] = Field(None, max_length=255)
    signature_data: Optional[str] = None
    notes: Optional[str] = None


class CheckResultRead(BaseModel):
    id: str
    template_item_id: Optional[str] = None
    check_item_text: str
    category: Optional[str] = None
    is_required: bool
    is_checked: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class InspectionCheckRead(InspectionCheckBase):
    id: str
    user_id: str
    template_id: Optional[str] = None
    results: List[CheckResultRead] = []
    created_at: datetime

    class Config:
        from_attributes = True


class CheckResultInput(BaseModel):
    template_item_id: str
    is_checked: bool = False
    notes: Optional[str] = None


class CheckSubmission(BaseModel):
    """A filled-in checklist for one ride, answered against a template."""

    ride_id: str
    template_id: str
    check_date: Optional[date] = None
    inspector_name: str = Field(..., min_length=1, max_length=255)
    weather_conditions: Optional[str] = Field(None, max_length=255)
    environment_notes: Optional[str] = None
    compliance_officer: Optional[str] = Field(None, max_length=255)
    signature_data: Optional[str] = None
    notes: Optional[str] = None
    results: List[CheckResultInput] = []


class CheckReportRequest(BaseModel):
    recipient_email: EmailStr
    recipient_name: Optional[str] = Field(None, max_length=255)


class CheckReportResult(BaseModel):
    success: bool
    status: str
    checked: int
    total: int


# ---------------------------------------------------------------------------
# Inspection schedules
# ---------------------------------------------------------------------------


class InspectionScheduleBase(BaseModel):
    ride_id: str
    inspection_name: str = Field(..., min_length=1, max_length=255)
    inspection_type: str = Field(..., min_length=1, max_length=128)
    due_date: date
    advance_notice_days: int = Field(30, ge=0, le=365)
    is_active: bool = True
    notes: Optional[str] = None


class InspectionScheduleCreate(InspectionScheduleBase):
    pass


class InspectionScheduleUpdate(BaseModel):
    inspection_name: Optional[str] = Field(None, min_length=1, max_length=255)
    inspection_type: Optional[str] = Field(None, min_length=1, max_length=128)
    due_date: Optional[date] = None
    advance_notice_days: Optional[int] = Field(None, ge=0, le=365)
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class InspectionScheduleRead(InspectionScheduleBase):
    id: str
    user_id: str
    last_notification_sent: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# NDT schedules
# ---------------------------------------------------------------------------


class NDTScheduleBase(BaseModel):
    ride_id: str
    schedule_name: str = Field(..., min_length=1, max_length=255)
    component_description: str = Field(..., min_length=1)
    ndt_method: str = Field(..., min_length=1, max_length=64)
    frequency_months: int = Field(12, ge=1, le=120)
    last_inspection_date: Optional[date] = None
    next_inspection_due: Optional[date] = None
    is_active: bool = True
    notes: Optional[str] = None


class NDTScheduleCreate(NDTScheduleBase):
    pass


class NDTScheduleUpdate(BaseModel):
    schedule_name: Optional[str] = Field(None, min_length=1, max_length=255)
    component_description: Optional[str] = Field(None, min_length=1)
    ndt_method: Optional[str] = Field(None, min_length=1, max_length=64)
    frequency_months: Optional[int] = Field(None, ge=1, le=120)
    last_inspection_date: Optional[date] = None
    next_inspection_due: Optional[date] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class NDTScheduleRead(NDTScheduleBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# NDT reports
# ---------------------------------------------------------------------------


class NDTReportBase(BaseModel):
    inspection_date: date
    inspector_name: str = Field(..., min_length=1, max_length=255)
    inspection_company: Optional[str] = Field(None, max_length=255)
    ndt_method: Optional[str] = Field(None, min_length=1, max_length=64)
    component_tested: Optional[str] = Field(None, min_length=1)
    test_results: str = Field(..., min_length=1)
    defects_found: Optional[str] = None
    recommendations: Optional[str] = None
    certificate_number: Optional[str] = Field(None, max_length=128)
    next_inspection_due: Optional[date] = None
    document_id: Optional[str] = None


class NDTReportCreate(NDTReportBase):
    ndt_schedule_id: str


class NDTReportUpdate(BaseModel):
    inspector_name: Optional[str] = Field(None, min_length=1, max_length=255)
    inspection_company: Optional[str] = Field(None, max_length=255)
    test_results: Optional[str] = Field(None, min_length=1)
    defects_found: Optional[str] = None
    recommendations: Optional[str] = None
    certificate_number: Optional[str] = Field(None, max_length=128)
    document_id: Optional[str] = None


class NDTReportRead(NDTReportBase):
    id: str
    user_id: str
    ride_id: str
    ndt_schedule_id: str
    ndt_method: str
    component_tested: str
    created_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Annual inspection reports
# ---------------------------------------------------------------------------


class AnnualInspectionReportBase(BaseModel):
    ride_id: str
    inspection_year: int = Field(..., ge=1900, le=2200)
    inspection_date: date
    inspector_name: str = Field(..., min_length=1, max_length=255)
    inspection_company: str = Field(..., min_length=1, max_length=255)
    certificate_number: Optional[str] = Field(None, max_length=128)
    inspection_status: AnnualInspectionStatusEnum = AnnualInspectionStatusEnum.PASS
    conditions_notes: Optional[str] = None
    recommendations: Optional[str] = None
    next_inspection_due: Optional[date] = None
    document_id: Optional[str] = None


class AnnualInspectionReportCreate(AnnualInspectionReportBase):
    pass


class AnnualInspectionReportUpdate(BaseModel):
    inspection_year: Optional[int] = Field(None, ge=1900, le=2200)
    inspection_date: Optional[date] = None
    inspector_name: Optional[str] = Field(None, min_length=1, max_length=255)
    inspection_company: Optional[str] = Field(None, min_length=1, max_length=255)
    certificate_number: Optional[str] = Field(None, max_length=128)
    inspection_status: Optional[AnnualInspectionStatusEnum] = None
    conditions_notes: Optional[str] = None
    recommendations: Optional[str] = None
    next_inspection_due: Optional[date] = None
    document_id: Optional[str] = None


class AnnualInspectionReportRead(AnnualInspectionReportBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
