# backend/showdb/apps/maintenance/router.py

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from showdb.apps.accounts import models as account_models
from showdb.apps.notifications import models as notification_models
from showdb.database import get_db, get_read_db
from showdb.security import get_current_active_user

from . import models, schemas, services

router = APIRouter(tags=["maintenance"])


def _not_found(label: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")


def _create(db: Session, create_fn, user_id: str, payload):
    try:
        row = create_fn(db, user_id=user_id, payload=payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    db.commit()
    db.refresh(row)
    return row


# ---------------------------------------------------------------------------
# Maintenance records
# ---------------------------------------------------------------------------


@router.get("/maintenance-records", response_model=List[schemas.MaintenanceRecordRead])
def list_maintenance_records(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_maintenance_records(db, user_id=current_user.id, ride_id=ride_id)


@router.post(
    "/maintenance-records",
    response_model=schemas.MaintenanceRecordRead,
    status_code=status.HTTP_201_CREATED,
)
def create_maintenance_record(
    payload: schemas.MaintenanceRecordCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_maintenance_record, current_user.id, payload)


@router.patch("/maintenance-records/{record_id}", response_model=schemas.MaintenanceRecordRead)
def update_maintenance_record(
    record_id: str,
    payload: schemas.MaintenanceRecordUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    record = services.get_maintenance_record(db, user_id=current_user.id, record_id=record_id)
    if not record:
        raise _not_found("Maintenance record")
    services.update_maintenance_record(db, record, payload)
    db.commit()
    db.refresh(record)
    return record


@router.delete("/maintenance-records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_maintenance_record(
    record_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    record = services.get_maintenance_record(db, user_id=current_user.id, record_id=record_id)
    if not record:
        raise _not_found("Maintenance record")
    services.delete_row(db, record)
    db.commit()
    return None


# ---------------------------------------------------------------------------
# Check templates
# ---------------------------------------------------------------------------


def _template_or_404(db: Session, user_id: str, template_id: str):
    template = services.get_check_template(db, user_id=user_id, template_id=template_id)
    if not template:
        raise _not_found("Check template")
    return template


@router.get("/check-templates", response_model=List[schemas.CheckTemplateRead])
def list_check_templates(
    ride_id: Optional[str] = None,
    frequency: Optional[models.CheckFrequencyEnum] = None,
    include_archived: bool = False,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_check_templates(
        db,
        user_id=current_user.id,
        ride_id=ride_id,
        frequency=frequency,
        include_archived=include_archived,
    )


@router.get("/check-templates/active", response_model=schemas.CheckTemplateRead)
def get_active_check_template(
    ride_id: str,
    frequency: models.CheckFrequencyEnum = models.CheckFrequencyEnum.DAILY,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = services.active_check_template(db, user_id=current_user.id, ride_id=ride_id, frequency=frequency)
    if not template:
        raise _not_found("Active check template")
    return template


@router.post(
    "/check-templates",
    response_model=schemas.CheckTemplateRead,
    status_code=status.HTTP_201_CREATED,
)
def create_check_template(
    payload: schemas.CheckTemplateCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_check_template, current_user.id, payload)


@router.get("/check-templates/{template_id}", response_model=schemas.CheckTemplateRead)
def get_check_template(
    template_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _template_or_404(db, current_user.id, template_id)


@router.patch("/check-templates/{template_id}", response_model=schemas.CheckTemplateRead)
def update_check_template(
    template_id: str,
    payload: schemas.CheckTemplateUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = _template_or_404(db, current_user.id, template_id)
    services.update_check_template(db, template, payload)
    db.commit()
    db.refresh(template)
    return template


@router.post("/check-templates/{template_id}/activate", response_model=schemas.CheckTemplateRead)
def activate_check_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = _template_or_404(db, current_user.id, template_id)
    try:
        services.activate_check_template(db, template)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    db.commit()
    db.refresh(template)
    return template


@router.post(
    "/check-templates/{template_id}/duplicate",
    response_model=schemas.CheckTemplateRead,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_check_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = _template_or_404(db, current_user.id, template_id)
    copy = services.duplicate_check_template(db, template)
    db.commit()
    db.refresh(copy)
    return copy


@router.post("/check-templates/{template_id}/archive", response_model=schemas.CheckTemplateRead)
def archive_check_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = _template_or_404(db, current_user.id, template_id)
    services.set_check_template_archived(db, template, True)
    db.commit()
    db.refresh(template)
    return template


@router.post("/check-templates/{template_id}/unarchive", response_model=schemas.CheckTemplateRead)
def unarchive_check_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = _template_or_404(db, current_user.id, template_id)
    services.set_check_template_archived(db, template, False)
    db.commit()
    db.refresh(template)
    return template


@router.delete("/check-templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_check_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    template = _template_or_404(db, current_user.id, template_id)
    services.delete_row(db, template)
    db.commit()
    return None


# ---------------------------------------------------------------------------
# Inspection checks
# ---------------------------------------------------------------------------


@router.get("/inspection-checks", response_model=List[schemas.InspectionCheckRead])
def list_inspection_checks(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_inspection_checks(db, user_id=current_user.id, ride_id=ride_id)


@router.post(
    "/inspection-checks",
    response_model=schemas.InspectionCheckRead,
    status_code=status.HTTP_201_CREATED,
)
def create_inspection_check(
    payload: schemas.InspectionCheckCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_inspection_check, current_user.id, payload)


@router.post(
    "/inspection-checks/submit",
    response_model=schemas.InspectionCheckRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_inspection_check(
    payload: schemas.CheckSubmission,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.submit_check, current_user.id, payload)


@router.get("/inspection-checks/{check_id}", response_model=schemas.InspectionCheckRead)
def get_inspection_check(
    check_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    check = services.get_inspection_check(db, user_id=current_user.id, check_id=check_id)
    if not check:
        raise _not_found("Inspection check")
    return check


@router.post("/inspection-checks/{check_id}/report", response_model=schemas.CheckReportResult)
def send_inspection_check_report(
    check_id: str,
    payload: schemas.CheckReportRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    check = services.get_inspection_check(db, user_id=current_user.id, check_id=check_id)
    if not check:
        raise _not_found("Inspection check")
    try:
        log = services.send_check_report(db, user_id=current_user.id, check=check, payload=payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    db.commit()
    checked, total = services.check_summary(check)
    return schemas.CheckReportResult(
        success=log.status == notification_models.EmailStatus.SENT,
        status=log.status.value,
        checked=checked,
        total=total,
    )


@router.patch("/inspection-checks/{check_id}", response_model=schemas.InspectionCheckRead)
def update_inspection_check(
    check_id: str,
    payload: schemas.InspectionCheckUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    check = services.get_inspection_check(db, user_id=current_user.id, check_id=check_id)
    if not check:
        raise _not_found("Inspection check")
    services.update_inspection_check(db, check, payload)
    db.commit()
    db.refresh(check)
    return check


@router.delete("/inspection-checks/{check_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inspection_check(
    check_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    check = services.get_inspection_check(db, user_id=current_user.id, check_id=check_id)
    if not check:
        raise _not_found("Inspection check")
    services.delete_row(db, check)
    db.commit()
    return None


# ---------------------------------------------------------------------------
# Inspection schedules
# ---------------------------------------------------------------------------


@router.get("/inspection-schedules", response_model=List[schemas.InspectionScheduleRead])
def list_inspection_schedules(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_inspection_schedules(db, user_id=current_user.id, ride_id=ride_id)


@router.get("/inspection-schedules/due-soon", response_model=List[schemas.InspectionScheduleRead])
def list_inspection_schedules_due_soon(
    on: Optional[date] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.schedules_due_soon(db, today=on, user_id=current_user.id)


@router.post(
    "/inspection-schedules",
    response_model=schemas.InspectionScheduleRead,
    status_code=status.HTTP_201_CREATED,
)
def create_inspection_schedule(
    payload: schemas.InspectionScheduleCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_inspection_schedule, current_user.id, payload)


@router.patch("/inspection-schedules/{schedule_id}", response_model=schemas.InspectionScheduleRead)
def update_inspection_schedule(
    schedule_id: str,
    payload: schemas.InspectionScheduleUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    schedule = services.get_inspection_schedule(db, user_id=current_user.id, schedule_id=schedule_id)
    if not schedule:
        raise _not_found("Inspection schedule")
    services.update_inspection_schedule(db, schedule, payload)
    db.commit()
    db.refresh(schedule)
    return schedule


@router.delete("/inspection-schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inspection_schedule(
    schedule_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    schedule = services.get_inspection_schedule(db, user_id=current_user.id, schedule_id=schedule_id)
    if not schedule:
        raise _not_found("Inspection schedule")
    services.delete_row(db, schedule)
    db.commit()
    return None


# ---------------------------------------------------------------------------
# NDT schedules
# ---------------------------------------------------------------------------


@router.get("/ndt-schedules", response_model=List[schemas.NDTScheduleRead])
def list_ndt_schedules(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_ndt_schedules(db, user_id=current_user.id, ride_id=ride_id)


@router.post(
    "/ndt-schedules",
    response_model=schemas.NDTScheduleRead,
    status_code=status.HTTP_201_CREATED,
)
def create_ndt_schedule(
    payload: schemas.NDTScheduleCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_ndt_schedule, current_user.id, payload)


@router.patch("/ndt-schedules/{schedule_id}", response_model=schemas.NDTScheduleRead)
def update_ndt_schedule(
    schedule_id: str,
    payload: schemas.NDTScheduleUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    schedule = services.get_ndt_schedule(db, user_id=current_user.id, schedule_id=schedule_id)
    if not schedule:
        raise _not_found("NDT schedule")
    services.update_ndt_schedule(db, schedule, payload)
    db.commit()
    db.refresh(schedule)
    return schedule


@router.delete("/ndt-schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ndt_schedule(
    schedule_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    schedule = services.get_ndt_schedule(db, user_id=current_user.id, schedule_id=schedule_id)
    if not schedule:
        raise _not_found("NDT schedule")
    services.delete_row(db, schedule)
    db.commit()
    return None


# ---------------------------------------------------------------------------
# NDT reports
# ---------------------------------------------------------------------------


@router.get("/ndt-reports", response_model=List[schemas.NDTReportRead])
def list_ndt_reports(
    ride_id: Optional[str] = None,
    schedule_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_ndt_reports(db, user_id=current_user.id, ride_id=ride_id, schedule_id=schedule_id)


@router.post(
    "/ndt-reports",
    response_model=schemas.NDTReportRead,
    status_code=status.HTTP_201_CREATED,
)
def create_ndt_report(
    payload: schemas.NDTReportCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_ndt_report, current_user.id, payload)


@router.patch("/ndt-reports/{report_id}", response_model=schemas.NDTReportRead)
def update_ndt_report(
    report_id: str,
    payload: schemas.NDTReportUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    report = services.get_ndt_report(db, user_id=current_user.id, report_id=report_id)
    if not report:
        raise _not_found("NDT report")
    try:
        services.update_ndt_report(db, report, payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    db.commit()
    db.refresh(report)
    return report


@router.delete("/ndt-reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ndt_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    report = services.get_ndt_report(db, user_id=current_user.id, report_id=report_id)
    if not report:
        raise _not_found("NDT report")
    services.delete_row(db, report)
    db.commit()
    return None


# ---------------------------------------------------------------------------
# Annual inspection reports
# ---------------------------------------------------------------------------


@router.get("/annual-inspection-reports", response_model=List[schemas.AnnualInspectionReportRead])
def list_annual_inspection_reports(
    ride_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_annual_inspection_reports(db, user_id=current_user.id, ride_id=ride_id)


@router.post(
    "/annual-inspection-reports",
    response_model=schemas.AnnualInspectionReportRead,
    status_code=status.HTTP_201_CREATED,
)
def create_annual_inspection_report(
    payload: schemas.AnnualInspectionReportCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return _create(db, services.create_annual_inspection_report, current_user.id, payload)


@router.patch("/annual-inspection-reports/{report_id}", response_model=schemas.AnnualInspectionReportRead)
def update_annual_inspection_report(
    report_id: str,
    payload: schemas.AnnualInspectionReportUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    report = services.get_annual_inspection_report(db, user_id=current_user.id, report_id=report_id)
    if not report:
        raise _not_found("Annual inspection report")
    try:
        services.update_annual_inspection_report(db, report, payload)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    db.commit()
    db.refresh(report)
    return report


@router.delete("/annual-inspection-reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_annual_inspection_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    report = services.get_annual_inspection_report(db, user_id=current_user.id, report_id=report_id)
    if not report:
        raise _not_found("Annual inspection report")
    services.delete_row(db, report)
    db.commit()
    return None
