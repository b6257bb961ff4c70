from __future__ import annotations

from datetime import date

import pytest

from showdb.apps.accounts import models as account_models
from showdb.apps.bulletins import models as bulletin_models
from showdb.apps.bulletins import schemas as bulletin_schemas
from showdb.apps.bulletins import services as bulletin_services
from showdb.apps.bulletins.router import router as bulletin_router
from showdb.apps.rides import models as ride_models


def _create_user(db, email: str) -> account_models.User:
    user = account_models.User(email=email, full_name="Show Person")
    db.add(user)
    db.commit()
    return user


def _create_category(db, name: str) -> ride_models.RideCategory:
    category = ride_models.RideCategory(name=name)
    db.add(category)
    db.commit()
    return category


def _create_ride(db, user, category, name: str, **extra) -> ride_models.Ride:
    ride = ride_models.Ride(user_id=user.id, category_id=category.id, ride_name=name, **extra)
    db.add(ride)
    db.commit()
    return ride


def _create_bulletin(db, category, title: str, content: str = "", issue_date=None) -> bulletin_models.TechnicalBulletin:
    bulletin = bulletin_services.create_bulletin(
        db,
        bulletin_schemas.TechnicalBulletinCreate(
            category_id=category.id,
            title=title,
            content=content,
            issue_date=issue_date,
        ),
    )
    db.commit()
    return bulletin


def test_create_bulletin_requires_known_category(db_session):
    with pytest.raises(LookupError):
        bulletin_services.create_bulletin(
            db_session,
            bulletin_schemas.TechnicalBulletinCreate(category_id="missing", title="Orphan"),
        )


def test_list_bulletins_newest_issue_first(db_session):
    category = _create_category(db_session, "Thrill")
    _create_bulletin(db_session, category, "Old", issue_date=date(2025, 1, 1))
    _create_bulletin(db_session, category, "New", issue_date=date(2026, 1, 1))

    titles = [b.title for b in bulletin_services.list_bulletins(db_session)]
    assert titles == ["New", "Old"]


def test_update_bulletin_ignores_nulls(db_session):
    category = _create_category(db_session, "Thrill")
    bulletin = _create_bulletin(db_session, category, "Waltzer cars", "check pins")

    bulletin_services.update_bulletin(
        db_session,
        bulletin,
        bulletin_schemas.TechnicalBulletinUpdate(title=None, priority=bulletin_models.BulletinPriority.HIGH),
    )

    assert bulletin.title == "Waltzer cars"
    assert bulletin.priority == bulletin_models.BulletinPriority.HIGH


def test_relevant_bulletins_are_filtered_per_user(db_session):
    owner = _create_user(db_session, "owner@example.com")
    spinning = _create_category(db_session, "Spinning Ride")
    slide = _create_category(db_session, "Slide")
    waltzer = _create_ride(db_session, owner, spinning, "Waltzer")
    _create_ride(db_session, owner, slide, "Helter Skelter")

    relevant = _create_bulletin(db_session, spinning, "Waltzer Safety Notice", "...")
    _create_bulletin(db_session, spinning, "Generator Maintenance", "diesel generator check")

    found = bulletin_services.relevant_bulletins_for_user(db_session, user_id=owner.id)
    assert [b.id for b in found] == [relevant.id]

    by_ride = bulletin_services.relevant_bulletins_for_user(db_session, user_id=owner.id, ride_id=waltzer.id)
    assert [b.id for b in by_ride] == [relevant.id]


def test_user_without_rides_sees_every_bulletin(db_session):
    user = _create_user(db_session, "new@example.com")
    category = _create_category(db_session, "Thrill")
    _create_bulletin(db_session, category, "One")
    _create_bulletin(db_session, category, "Two")

    assert len(bulletin_services.relevant_bulletins_for_user(db_session, user_id=user.id)) == 2


def test_relevant_bulletins_unknown_ride(db_session):
    owner = _create_user(db_session, "owner@example.com")
    other = _create_user(db_session, "other@example.com")
    category = _create_category(db_session, "Thrill")
    ride = _create_ride(db_session, other, category, "Miami")

    with pytest.raises(LookupError):
        bulletin_services.relevant_bulletins_for_user(db_session, user_id=owner.id, ride_id=ride.id)


def test_bulletin_routes_registered():
    paths = {(route.path, tuple(sorted(route.methods))) for route in bulletin_router.routes}

    assert ("/technical-bulletins", ("GET",)) in paths
    assert ("/technical-bulletins/relevant", ("GET",)) in paths
    assert ("/technical-bulletins/scrape", ("POST",)) in paths
    assert ("/technical-bulletins/{bulletin_id}", ("PATCH",)) in paths
