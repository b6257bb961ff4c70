from __future__ import annotations

from datetime import date

import pytest

from showdb.apps.accounts import models as account_models
from showdb.apps.calendar import services as calendar_services
from showdb.apps.calendar.router import router as calendar_router
from showdb.apps.documents import models as document_models
from showdb.apps.maintenance import models as maintenance_models
from showdb.apps.rides import models as ride_models


def _setup(db):
    user = account_models.User(email="calendar@example.com")
    other = account_models.User(email="other@example.com")
    category = ride_models.RideCategory(name="Spinning Ride")
    db.add_all([user, other, category])
    db.flush()
    ride = ride_models.Ride(user_id=user.id, category_id=category.id, ride_name="Waltzer")
    db.add(ride)
    db.commit()
    return user, other, ride


def _seed_month(db, user, ride):
    db.add_all(
        [
            maintenance_models.InspectionCheck(
                user_id=user.id,
                ride_id=ride.id,
                check_date=date(2026, 6, 12),
                inspector_name="J. Bloggs",
                status=maintenance_models.CheckStatusEnum.COMPLETED,
            ),
            maintenance_models.MaintenanceRecord(
                user_id=user.id,
                ride_id=ride.id,
                maintenance_date=date(2026, 5, 1),
                maintenance_type="Gearbox service",
                description="Oil change",
                next_maintenance_due=date(2026, 6, 3),
            ),
            document_models.Document(
                user_id=user.id,
                ride_id=None,
                document_name="Public Liability",
                document_type="insurance",
                file_path="pl.pdf",
                is_global=True,
                expires_at=date(2026, 6, 30),
            ),
            document_models.Document(
                user_id=user.id,
                ride_id=ride.id,
                document_name="ADIPS",
                document_type="certificate",
                file_path="adips-old.pdf",
                expires_at=date(2026, 6, 20),
                is_latest_version=False,
            ),
            maintenance_models.NDTSchedule(
                user_id=user.id,
                ride_id=ride.id,
                schedule_name="Sweep arms",
                component_description="Welds",
                ndt_method="MPI",
                next_inspection_due=date(2026, 6, 3),
            ),
            maintenance_models.NDTSchedule(
                user_id=user.id,
                ride_id=ride.id,
                schedule_name="Retired",
                component_description="Old part",
                ndt_method="UT",
                next_inspection_due=date(2026, 6, 4),
                is_active=False,
            ),
            maintenance_models.InspectionSchedule(
                user_id=user.id,
                ride_id=ride.id,
                inspection_name="Annual ADIPS",
                inspection_type="annual",
                due_date=date(2026, 6, 1),
            ),
            maintenance_models.InspectionSchedule(
                user_id=user.id,
                ride_id=ride.id,
                inspection_name="Next month",
                inspection_type="annual",
                due_date=date(2026, 7, 1),
            ),
        ]
    )
    db.commit()


@pytest.mark.parametrize("value", ["2026-13", "2026-6", "June", "", "2026-06-01"])
def test_parse_month_rejects_bad_values(value):
    with pytest.raises(ValueError):
        calendar_services.parse_month(value)


def test_parse_month_and_range():
    first = calendar_services.parse_month("2024-02")
    assert first == date(2024, 2, 1)
    assert calendar_services.month_range(first) == (date(2024, 2, 1), date(2024, 2, 29))


def test_aggregate_month_events(db_session):
    user, _, ride = _setup(db_session)
    _seed_month(db_session, user, ride)

    events = calendar_services.aggregate_month_events(
        db_session, user.id, date(2026, 6, 1), today=date(2026, 6, 10)
    )

    assert [(e.date.isoformat(), e.type) for e in events] == [
        ("2026-06-01", "inspection_schedule"),
        ("2026-06-03", "maintenance"),
        ("2026-06-03", "ndt"),
        ("2026-06-12", "inspection"),
        ("2026-06-30", "document_expiry"),
    ]
    by_type = {e.type: e for e in events}
    assert by_type["inspection"].title == "Waltzer Inspection"
    assert by_type["inspection"].status == "completed"
    assert by_type["maintenance"].title == "Waltzer - Gearbox service"
    assert by_type["ndt"].ride_name == "Waltzer"
    assert by_type["inspection_schedule"].status == "overdue"
    assert by_type["document_expiry"].title == "Public Liability Expires"
    assert by_type["document_expiry"].ride_id is None


def test_events_for_unknown_ride_get_placeholder_name(db_session):
    user, _, _ = _setup(db_session)
    db_session.add(
        maintenance_models.InspectionSchedule(
            user_id=user.id,
            ride_id="deleted-ride",
            inspection_name="Orphan",
            inspection_type="annual",
            due_date=date(2026, 6, 15),
        )
    )
    db_session.commit()

    events = calendar_services.aggregate_month_events(db_session, user.id, date(2026, 6, 1), today=date(2026, 6, 1))
    assert [e.title for e in events] == ["Unknown - Orphan"]
    assert events[0].status == "pending"


def test_events_are_scoped_to_user(db_session):
    user, other, ride = _setup(db_session)
    _seed_month(db_session, user, ride)

    assert calendar_services.aggregate_month_events(db_session, other.id, date(2026, 6, 1)) == []


def test_filter_events_and_events_on(db_session):
    user, _, ride = _setup(db_session)
    _seed_month(db_session, user, ride)
    events = calendar_services.aggregate_month_events(
        db_session, user.id, date(2026, 6, 1), today=date(2026, 6, 10)
    )

    assert calendar_services.filter_events(events, "all") == events
    assert calendar_services.filter_events(events, None) == events
    assert [e.type for e in calendar_services.filter_events(events, "ndt")] == ["ndt"]
    assert [e.type for e in calendar_services.events_on(events, date(2026, 6, 3))] == ["maintenance", "ndt"]


def test_calendar_event_serialises_camel_case_ride_fields(db_session):
    user, _, ride = _setup(db_session)
    _seed_month(db_session, user, ride)
    event = calendar_services.aggregate_month_events(db_session, user.id, date(2026, 6, 1))[0]

    dumped = event.model_dump(by_alias=True)
    assert dumped["rideId"] == ride.id
    assert dumped["rideName"] == "Waltzer"


def test_calendar_route_is_plan_gated():
    route = next(r for r in calendar_router.routes if r.path == "/calendar/events")
    assert route.methods == {"GET"}
    qualnames = {dep.call.__qualname__ for dep in route.dependant.dependencies}
    assert "require_plan.<locals>.dependency" in qualnames
