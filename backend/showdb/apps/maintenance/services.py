# backend/showdb/apps/maintenance/services.py
#
# CRUD for maintenance records, check templates, inspection checks,
# inspection schedules, NDT schedules and reports, and annual inspection
# reports. Every create checks that the ride belongs to the caller.

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import List, Optional, Tuple, Type, TypeVar

from sqlalchemy.orm import Session

from showdb.apps.accounts import services as account_services
from showdb.apps.documents import models as document_models
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import service as notification_service
from showdb.apps.rides import services as ride_services

from . import models, schemas

logger = logging.getLogger(__name__)

Row = TypeVar("Row")


def add_months(base: date, months: int) -> date:
    """
    Add calendar months to a date, clamping the day to the target month.
    """
    if months <= 0:
        return base
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _require_ride(db: Session, user_id: str, ride_id: str) -> None:
    if ride_services.get_ride(db, user_id=user_id, ride_id=ride_id) is None:
        raise LookupError("Ride not found")


def _list(db: Session, model: Type[Row], order_by, *, user_id: str, ride_id: Optional[str]) -> List[Row]:
    qs = db.query(model).filter(model.user_id == user_id)
    if ride_id:
        qs = qs.filter(model.ride_id == ride_id)
    return qs.order_by(order_by).all()


def _get(db: Session, model: Type[Row], *, user_id: str, row_id: str) -> Optional[Row]:
    row = db.get(model, row_id)
    if row is None or row.user_id != user_id:
        return None
    return row


def _create(db: Session, model: Type[Row], *, user_id: str, data: dict) -> Row:
    _require_ride(db, user_id, data["ride_id"])
    row = model(user_id=user_id, **data)
    db.add(row)
    db.flush()
    return row


def _apply(db: Session, row: Row, data: dict) -> Row:
    columns = row.__table__.columns
    for field, value in data.items():
        if value is None and field in columns and not columns[field].nullable:
            continue
        setattr(row, field, value)
    db.flush()
    return row


def delete_row(db: Session, row) -> None:
    db.delete(row)
    db.flush()


def _clean(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


# ---------------------------------------------------------------------------
# Maintenance records
# ---------------------------------------------------------------------------


def list_maintenance_records(db: Session, *, user_id: str, ride_id: Optional[str] = None) -> List[models.MaintenanceRecord]:
    return _list(
        db,
        models.MaintenanceRecord,
        models.MaintenanceRecord.maintenance_date.desc(),
        user_id=user_id,
        ride_id=ride_id,
    )


def get_maintenance_record(db: Session, *, user_id: str, record_id: str) -> Optional[models.MaintenanceRecord]:
    return _get(db, models.MaintenanceRecord, user_id=user_id, row_id=record_id)


def create_maintenance_record(
    db: Session,
    *,
    user_id: str,
    payload: schemas.MaintenanceRecordCreate,
) -> models.MaintenanceRecord:
    return _create(db, models.MaintenanceRecord, user_id=user_id, data=payload.model_dump())


def update_maintenance_record(
    db: Session,
    record: models.MaintenanceRecord,
    payload: schemas.MaintenanceRecordUpdate,
) -> models.MaintenanceRecord:
    return _apply(db, record, payload.model_dump(exclude_unset=True))


# ---------------------------------------------------------------------------
# Check templates
# ---------------------------------------------------------------------------


def _template_items(items) -> List[models.CheckTemplateItem]:
    return [
        models.CheckTemplateItem(
            check_item_text=item.check_item_text.strip(),
            category=(item.category or "").strip() or None,
            is_required=item.is_required,
            sort_order=index,
        )
        for index, item in enumerate(items)
    ]


def list_check_templates(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str] = None,
    frequency: Optional[models.CheckFrequencyEnum] = None,
    include_archived: bool = False,
) -> List[models.CheckTemplate]:
    qs = db.query(models.CheckTemplate).filter(models.CheckTemplate.user_id == user_id)
    if ride_id:
        qs = qs.filter(models.CheckTemplate.ride_id == ride_id)
    if frequency:
        qs = qs.filter(models.CheckTemplate.check_frequency == frequency)
    if not include_archived:
        qs = qs.filter(models.CheckTemplate.is_archived.is_(False))
    return qs.order_by(models.CheckTemplate.is_active.desc(), models.CheckTemplate.created_at.desc()).all()


def get_check_template(db: Session, *, user_id: str, template_id: str) -> Optional[models.CheckTemplate]:
    return _get(db, models.CheckTemplate, user_id=user_id, row_id=template_id)


def active_check_template(
    db: Session,
    *,
    user_id: str,
    ride_id: str,
    frequency: models.CheckFrequencyEnum,
) -> Optional[models.CheckTemplate]:
    return (
        db.query(models.CheckTemplate)
        .filter(
            models.CheckTemplate.user_id == user_id,
            models.CheckTemplate.ride_id == ride_id,
            models.CheckTemplate.check_frequency == frequency,
            models.CheckTemplate.is_active.is_(True),
        )
        .first()
    )


def _deactivate_siblings(db: Session, template: models.CheckTemplate) -> None:
    # At most one active template per ride and frequency.
    siblings = db.query(models.CheckTemplate).filter(
        models.CheckTemplate.user_id == template.user_id,
        models.CheckTemplate.ride_id == template.ride_id,
        models.CheckTemplate.check_frequency == template.check_frequency,
        models.CheckTemplate.is_active.is_(True),
    )
    if template.id:
        siblings = siblings.filter(models.CheckTemplate.id != template.id)
    for sibling in siblings:
        sibling.is_active = False


def create_check_template(
    db: Session,
    *,
    user_id: str,
    payload: schemas.CheckTemplateCreate,
) -> models.CheckTemplate:
    _require_ride(db, user_id, payload.ride_id)
    template = models.CheckTemplate(
        user_id=user_id,
        ride_id=payload.ride_id,
        template_name=payload.template_name.strip(),
        description=payload.description,
        check_frequency=payload.check_frequency,
        custom_interval_days=payload.custom_interval_days,
        is_active=payload.is_active,
        is_archived=False,
    )
    template.items = _template_items(payload.items)
    if template.is_active:
        _deactivate_siblings(db, template)
    db.add(template)
    db.flush()
    return template


def update_check_template(
    db: Session,
    template: models.CheckTemplate,
    payload: schemas.CheckTemplateUpdate,
) -> models.CheckTemplate:
    data = payload.model_dump(exclude_unset=True, exclude={"items"})
    if data.get("template_name"):
        data["template_name"] = data["template_name"].strip()
    _apply(db, template, data)
    if payload.items is not None:
        template.items = _template_items(payload.items)
        db.flush()
    return template


def activate_check_template(db: Session, template: models.CheckTemplate) -> models.CheckTemplate:
    if template.is_archived:
        raise ValueError("Archived templates cannot be activated")
    _deactivate_siblings(db, template)
    template.is_active = True
    db.flush()
    return template


def set_check_template_archived(
    db: Session,
    template: models.CheckTemplate,
    archived: bool,
) -> models.CheckTemplate:
    template.is_archived = archived
    if archived:
        template.is_active = False
    db.flush()
    return template


def duplicate_check_template(db: Session, template: models.CheckTemplate) -> models.CheckTemplate:
    """Inactive copy named "<name> (Copy)" with the same items."""
    copy = models.CheckTemplate(
        user_id=template.user_id,
        ride_id=template.ride_id,
        template_name=f"{template.template_name} (Copy)"[:255],
        description=template.description,
        check_frequency=template.check_frequency,
        custom_interval_days=template.custom_interval_days,
        is_active=False,
        is_archived=False,
    )
    copy.items = [
        models.CheckTemplateItem(
            check_item_text=item.check_item_text,
            category=item.category,
            is_required=item.is_required,
            sort_order=item.sort_order,
        )
        for item in template.items
    ]
    db.add(copy)
    db.flush()
    return copy


# ---------------------------------------------------------------------------
# Inspection checks
# ---------------------------------------------------------------------------


def list_inspection_checks(db: Session, *, user_id: str, ride_id: Optional[str] = None) -> List[models.InspectionCheck]:
    return _list(
        db,
        models.InspectionCheck,
        models.InspectionCheck.check_date.desc(),
        user_id=user_id,
        ride_id=ride_id,
    )


def get_inspection_check(db: Session, *, user_id: str, check_id: str) -> Optional[models.InspectionCheck]:
    return _get(db, models.InspectionCheck, user_id=user_id, row_id=check_id)


def create_inspection_check(
    db: Session,
    *,
    user_id: str,
    payload: schemas.InspectionCheckCreate,
) -> models.InspectionCheck:
    return _create(db, models.InspectionCheck, user_id=user_id, data=payload.model_dump())


def update_inspection_check(
    db: Session,
    check: models.InspectionCheck,
    payload: schemas.InspectionCheckUpdate,
) -> models.InspectionCheck:
    return _apply(db, check, payload.model_dump(exclude_unset=True))


def submit_check(db: Session, *, user_id: str, payload: schemas.CheckSubmission) -> models.InspectionCheck:
    """
    Record a completed check against a template.

    Every template item gets a result row; items the payload does not
    mention are stored unticked. Answers for items that are not on the
    template are rejected.
    """
    _require_ride(db, user_id, payload.ride_id)
    template = get_check_template(db, user_id=user_id, template_id=payload.template_id)
    if template is None or template.ride_id != payload.ride_id:
        raise LookupError("Check template not found")
    if template.is_archived:
        raise ValueError("Check template is archived")
    inspector_name = payload.inspector_name.strip()
    if not inspector_name:
        raise ValueError("Inspector name is required")

    answers = {answer.template_item_id: answer for answer in payload.results}
    unknown = set(answers) - {item.id for item in template.items}
    if unknown:
        raise ValueError(f"Unknown check items: {', '.join(sorted(unknown))}")

    check = models.InspectionCheck(
        user_id=user_id,
        ride_id=payload.ride_id,
        template_id=template.id,
        check_date=payload.check_date or date.today(),
        check_frequency=template.check_frequency,
        inspector_name=inspector_name,
        status=models.CheckStatusEnum.COMPLETED,
        weather_conditions=_clean(payload.weather_conditions),
        environment_notes=_clean(payload.environment_notes),
        compliance_officer=_clean(payload.compliance_officer),
        signature_data=_clean(payload.signature_data),
        notes=_clean(payload.notes),
    )
    results = []
    for item in template.items:
        answer = answers.get(item.id)
        results.append(
            models.CheckResult(
                template_item_id=item.id,
                check_item_text=item.check_item_text,
                category=item.category,
                is_required=item.is_required,
                sort_order=item.sort_order,
                is_checked=bool(answer and answer.is_checked),
                notes=_clean(answer.notes) if answer else None,
            )
        )
    check.results = results
    db.add(check)
    db.flush()
    logger.info(
        "Check submitted",
        extra={"check_id": check.id, "user_id": user_id, "items": len(results)},
    )
    return check


def check_summary(check: models.InspectionCheck) -> Tuple[int, int]:
    """(ticked, total) over the check's result rows."""
    results = list(check.results or [])
    return sum(1 for result in results if result.is_checked), len(results)


def pass_rate(checked: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(checked * 100 / total)


def send_check_report(
    db: Session,
    *,
    user_id: str,
    check: models.InspectionCheck,
    payload: schemas.CheckReportRequest,
) -> notification_models.EmailLog:
    """Email a submitted check, line by line, to `payload.recipient_email`."""
    ride = ride_services.get_ride(db, user_id=user_id, ride_id=check.ride_id)
    if ride is None:
        raise LookupError("Ride not found")
    template = db.get(models.CheckTemplate, check.template_id) if check.template_id else None
    profile = account_services.get_profile(db, user_id)
    checked, total = check_summary(check)
    frequency = _enum_value(check.check_frequency)
    status = _enum_value(check.status)

    context = {
        "recipient_name": payload.recipient_name,
        "company_name": profile.company_name if profile else None,
        "ride_name": ride.ride_name,
        "category": ride.category.name if ride.category else None,
        "manufacturer": ride.manufacturer,
        "serial_number": ride.serial_number,
        "template_name": template.template_name if template else None,
        "check_frequency": frequency,
        "check_date": check.check_date.isoformat(),
        "inspector_name": check.inspector_name,
        "compliance_officer": check.compliance_officer,
        "weather_conditions": check.weather_conditions,
        "status": status,
        "checked": checked,
        "total": total,
        "pass_rate": pass_rate(checked, total),
        "items": [
            {
                "text": result.check_item_text,
                "category": result.category,
                "is_required": result.is_required,
                "is_checked": result.is_checked,
                "notes": result.notes,
            }
            for result in check.results
        ],
        "notes": check.notes,
    }
    subject = (
        f"{frequency.capitalize()} Safety Check Report - {ride.ride_name} - "
        f"{check.check_date.strftime('%d/%m/%Y')}"
    )
    return notification_service.send_email(
        "check_report",
        payload.recipient_email,
        subject,
        context,
        correlation_id=f"check:{check.id}",
        critical=False,
        user_id=user_id,
        db=db,
    )


# ---------------------------------------------------------------------------
# Inspection schedules
# ---------------------------------------------------------------------------


def list_inspection_schedules(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str] = None,
) -> List[models.InspectionSchedule]:
    return _list(
        db,
        models.InspectionSchedule,
        models.InspectionSchedule.due_date.asc(),
        user_id=user_id,
        ride_id=ride_id,
    )


def get_inspection_schedule(db: Session, *, user_id: str, schedule_id: str) -> Optional[models.InspectionSchedule]:
    return _get(db, models.InspectionSchedule, user_id=user_id, row_id=schedule_id)


def create_inspection_schedule(
    db: Session,
    *,
    user_id: str,
    payload: schemas.InspectionScheduleCreate,
) -> models.InspectionSchedule:
    return _create(db, models.InspectionSchedule, user_id=user_id, data=payload.model_dump())


def update_inspection_schedule(
    db: Session,
    schedule: models.InspectionSchedule,
    payload: schemas.InspectionScheduleUpdate,
) -> models.InspectionSchedule:
    data = payload.model_dump(exclude_unset=True)
    # A moved due date gets a fresh reminder.
    if "due_date" in data and data["due_date"] != schedule.due_date:
        schedule.last_notification_sent = None
    return _apply(db, schedule, data)


def days_until_due(schedule: models.InspectionSchedule, today: date) -> int:
    return (schedule.due_date - today).days


def is_due_soon(schedule: models.InspectionSchedule, today: date) -> bool:
    days = days_until_due(schedule, today)
    return 0 <= days <= (schedule.advance_notice_days or 0)


def schedules_due_soon(
    db: Session,
    *,
    today: Optional[date] = None,
    user_id: Optional[str] = None,
) -> List[models.InspectionSchedule]:
    """Active schedules whose due date falls inside their advance notice window."""
    today = today or date.today()
    qs = db.query(models.InspectionSchedule).filter(
        models.InspectionSchedule.is_active.is_(True),
        models.InspectionSchedule.due_date >= today,
    )
    if user_id:
        qs = qs.filter(models.InspectionSchedule.user_id == user_id)
    rows = qs.order_by(models.InspectionSchedule.due_date.asc()).all()
    return [row for row in rows if is_due_soon(row, today)]


# ---------------------------------------------------------------------------
# NDT schedules
# ---------------------------------------------------------------------------


def _fill_next_due(data: dict) -> dict:
    if not data.get("next_inspection_due") and data.get("last_inspection_date"):
        data["next_inspection_due"] = add_months(data["last_inspection_date"], data["frequency_months"])
    return data


def list_ndt_schedules(db: Session, *, user_id: str, ride_id: Optional[str] = None) -> List[models.NDTSchedule]:
    return _list(
        db,
        models.NDTSchedule,
        models.NDTSchedule.next_inspection_due.asc(),
        user_id=user_id,
        ride_id=ride_id,
    )


def get_ndt_schedule(db: Session, *, user_id: str, schedule_id: str) -> Optional[models.NDTSchedule]:
    return _get(db, models.NDTSchedule, user_id=user_id, row_id=schedule_id)


def create_ndt_schedule(
    db: Session,
    *,
    user_id: str,
    payload: schemas.NDTScheduleCreate,
) -> models.NDTSchedule:
    return _create(db, models.NDTSchedule, user_id=user_id, data=_fill_next_due(payload.model_dump()))


def update_ndt_schedule(
    db: Session,
    schedule: models.NDTSchedule,
    payload: schemas.NDTScheduleUpdate,
) -> models.NDTSchedule:
    data = payload.model_dump(exclude_unset=True)
    if ("last_inspection_date" in data or "frequency_months" in data) and "next_inspection_due" not in data:
        merged = {
            "last_inspection_date": data.get("last_inspection_date", schedule.last_inspection_date),
            "frequency_months": data.get("frequency_months") or schedule.frequency_months,
        }
        if merged["last_inspection_date"]:
            data["next_inspection_due"] = add_months(merged["last_inspection_date"], merged["frequency_months"])
    return _apply(db, schedule, data)


def _require_document(db: Session, user_id: str, document_id: Optional[str]) -> None:
    if not document_id:
        return
    document = db.get(document_models.Document, document_id)
    if document is None or document.user_id != user_id:
        raise LookupError("Document not found")


# ---------------------------------------------------------------------------
# NDT reports
# ---------------------------------------------------------------------------


def list_ndt_reports(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str] = None,
    schedule_id: Optional[str] = None,
) -> List[models.NDTReport]:
    qs = db.query(models.NDTReport).filter(models.NDTReport.user_id == user_id)
    if ride_id:
        qs = qs.filter(models.NDTReport.ride_id == ride_id)
    if schedule_id:
        qs = qs.filter(models.NDTReport.ndt_schedule_id == schedule_id)
    return qs.order_by(models.NDTReport.inspection_date.desc()).all()


def get_ndt_report(db: Session, *, user_id: str, report_id: str) -> Optional[models.NDTReport]:
    return _get(db, models.NDTReport, user_id=user_id, row_id=report_id)


def create_ndt_report(
    db: Session,
    *,
    user_id: str,
    payload: schemas.NDTReportCreate,
) -> models.NDTReport:
    """
    Record an NDT test and roll its schedule forward.

    Method and component default to the schedule's. The next due date
    defaults to inspection date plus the schedule's frequency; the schedule
    takes the report's dates unless an earlier test is being back-filled.
    """
    schedule = get_ndt_schedule(db, user_id=user_id, schedule_id=payload.ndt_schedule_id)
    if schedule is None:
        raise LookupError("NDT schedule not found")
    _require_document(db, user_id, payload.document_id)

    data = payload.model_dump()
    data["ndt_method"] = data.get("ndt_method") or schedule.ndt_method
    data["component_tested"] = data.get("component_tested") or schedule.component_description
    if not data.get("next_inspection_due"):
        data["next_inspection_due"] = add_months(payload.inspection_date, schedule.frequency_months)

    report = models.NDTReport(user_id=user_id, ride_id=schedule.ride_id, **data)
    db.add(report)

    if schedule.last_inspection_date is None or payload.inspection_date >= schedule.last_inspection_date:
        schedule.last_inspection_date = payload.inspection_date
        schedule.next_inspection_due = report.next_inspection_due
    db.flush()
    return report


def update_ndt_report(
    db: Session,
    report: models.NDTReport,
    payload: schemas.NDTReportUpdate,
) -> models.NDTReport:
    data = payload.model_dump(exclude_unset=True)
    _require_document(db, report.user_id, data.get("document_id"))
    return _apply(db, report, data)


# ---------------------------------------------------------------------------
# Annual inspection reports
# ---------------------------------------------------------------------------


def list_annual_inspection_reports(
    db: Session,
    *,
    user_id: str,
    ride_id: Optional[str] = None,
) -> List[models.AnnualInspectionReport]:
    qs = db.query(models.AnnualInspectionReport).filter(models.AnnualInspectionReport.user_id == user_id)
    if ride_id:
        qs = qs.filter(models.AnnualInspectionReport.ride_id == ride_id)
    return qs.order_by(
        models.AnnualInspectionReport.inspection_year.desc(),
        models.AnnualInspectionReport.inspection_date.desc(),
    ).all()


def get_annual_inspection_report(
    db: Session,
    *,
    user_id: str,
    report_id: str,
) -> Optional[models.AnnualInspectionReport]:
    return _get(db, models.AnnualInspectionReport, user_id=user_id, row_id=report_id)


def create_annual_inspection_report(
    db: Session,
    *,
    user_id: str,
    payload: schemas.AnnualInspectionReportCreate,
) -> models.AnnualInspectionReport:
    _require_document(db, user_id, payload.document_id)
    return _create(db, models.AnnualInspectionReport, user_id=user_id, data=payload.model_dump())


def update_annual_inspection_report(
    db: Session,
    report: models.AnnualInspectionReport,
    payload: schemas.AnnualInspectionReportUpdate,
) -> models.AnnualInspectionReport:
    data = payload.model_dump(exclude_unset=True)
    _require_document(db, report.user_id, data.get("document_id"))
    return _apply(db, report, data)
