from __future__ import annotations

from datetime import date

import pytest

from showdb.apps.accounts import models as account_models
from showdb.apps.rides import models as ride_models
from showdb.apps.risk import models as risk_models
from showdb.apps.risk import schemas as risk_schemas
from showdb.apps.risk import services as risk_services
from showdb.apps.risk.router import router as risk_router


def _setup(db):
    user = account_models.User(email="risk@example.com")
    category = ride_models.RideCategory(name="Slide")
    db.add_all([user, category])
    db.flush()
    ride = ride_models.Ride(user_id=user.id, category_id=category.id, ride_name="Helter Skelter")
    db.add(ride)
    db.commit()
    return user, ride


def _assessment(db, user, ride, items=()):
    assessment = risk_services.create_assessment(
        db,
        user_id=user.id,
        payload=risk_schemas.RiskAssessmentCreate(
            ride_id=ride.id,
            assessment_date=date(2026, 4, 1),
            assessor_name="A. Assessor",
            items=list(items),
        ),
    )
    db.commit()
    return assessment


@pytest.mark.parametrize(
    "severity,likelihood,expected",
    [
        ("negligible", "rare", "low"),
        ("minor", "unlikely", "low"),
        ("moderate", "possible", "medium"),
        ("major", "likely", "high"),
        ("catastrophic", "rare", "medium"),
        ("catastrophic", "certain", "high"),
    ],
)
def test_derive_risk_level(severity, likelihood, expected):
    assert risk_services.derive_risk_level(severity, likelihood) == expected


def test_create_assessment_with_items(db_session):
    user, ride = _setup(db_session)
    assessment = _assessment(
        db_session,
        user,
        ride,
        items=[
            risk_schemas.RiskAssessmentItemCreate(
                hazard_description="Riders colliding at the slide exit",
                who_at_risk="Riders",
                severity="major",
                likelihood="likely",
            ),
            risk_schemas.RiskAssessmentItemCreate(
                hazard_description="Trip on stairs",
                who_at_risk="Public",
                severity="minor",
                likelihood="possible",
                risk_level="low",
            ),
        ],
    )

    assert assessment.overall_status == risk_models.AssessmentStatus.DRAFT.value
    assert [item.sort_order for item in assessment.items] == [0, 1]
    assert [item.risk_level for item in assessment.items] == ["high", "low"]


def test_create_assessment_requires_own_ride(db_session):
    user, ride = _setup(db_session)
    with pytest.raises(LookupError):
        risk_services.create_assessment(
            db_session,
            user_id="someone-else",
            payload=risk_schemas.RiskAssessmentCreate(
                ride_id=ride.id,
                assessment_date=date(2026, 4, 1),
                assessor_name="A. Assessor",
            ),
        )


def test_update_item_rederives_level(db_session):
    user, ride = _setup(db_session)
    assessment = _assessment(db_session, user, ride)
    item = risk_services.add_item(
        db_session,
        assessment,
        risk_schemas.RiskAssessmentItemCreate(
            hazard_description="Mat wear",
            who_at_risk="Riders",
            severity="minor",
            likelihood="rare",
        ),
    )
    assert item.risk_level == "low"

    risk_services.update_item(
        db_session,
        item,
        risk_schemas.RiskAssessmentItemUpdate(likelihood="certain", severity="catastrophic", risk_level=None),
    )
    assert item.risk_level == "high"

    risk_services.update_item(db_session, item, risk_schemas.RiskAssessmentItemUpdate(status="closed"))
    assert item.risk_level == "high"
    assert item.status == "closed"


def test_item_lookup_and_delete(db_session):
    user, ride = _setup(db_session)
    assessment = _assessment(
        db_session,
        user,
        ride,
        items=[risk_schemas.RiskAssessmentItemCreate(hazard_description="Wind", who_at_risk="Staff")],
    )
    item = assessment.items[0]

    assert risk_services.get_item(assessment, item.id) is item
    assert risk_services.get_item(assessment, "missing") is None

    risk_services.delete_item(db_session, assessment, item)
    db_session.commit()
    assert db_session.query(risk_models.RiskAssessmentItem).count() == 0


def test_update_and_delete_assessment(db_session):
    user, ride = _setup(db_session)
    assessment = _assessment(
        db_session,
        user,
        ride,
        items=[risk_schemas.RiskAssessmentItemCreate(hazard_description="Wind", who_at_risk="Staff")],
    )

    risk_services.update_assessment(
        db_session,
        assessment,
        risk_schemas.RiskAssessmentUpdate(assessor_name=None, overall_status="active"),
    )
    assert assessment.assessor_name == "A. Assessor"
    assert assessment.overall_status == "active"

    assert [a.id for a in risk_services.list_assessments(db_session, user_id=user.id, ride_id=ride.id)] == [assessment.id]

    risk_services.delete_assessment(db_session, assessment)
    db_session.commit()
    assert db_session.query(risk_models.RiskAssessmentItem).count() == 0
    assert risk_services.get_assessment(db_session, user_id=user.id, assessment_id=assessment.id) is None


def test_risk_routes_registered():
    paths = {route.path for route in risk_router.routes}
    assert {
        "/risk-assessments",
        "/risk-assessments/{assessment_id}",
        "/risk-assessments/{assessment_id}/items",
        "/risk-assessments/{assessment_id}/items/{item_id}",
    } <= paths
