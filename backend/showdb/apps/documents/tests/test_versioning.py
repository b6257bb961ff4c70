from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from showdb.apps.accounts import models as account_models
from showdb.apps.documents import models as document_models
from showdb.apps.documents import versioning
from showdb.apps.rides import models as ride_models

BASE_TIME = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)


def _setup(db):
    user = account_models.User(email="versions@example.com")
    category = ride_models.RideCategory(name="Spinning Ride")
    db.add_all([user, category])
    db.flush()
    ride = ride_models.Ride(user_id=user.id, category_id=category.id, ride_name="Waltzer")
    db.add(ride)
    db.commit()
    return user, ride


def _upload(db, user, ride_id, *, minutes: int, name: str = "ADIPS Certificate", **kwargs):
    document = versioning.create_document(
        db,
        user_id=user.id,
        ride_id=ride_id,
        document_name=name,
        document_type="certificate",
        file_path=f"{user.id}/{ride_id or 'global'}/{minutes}-adips.pdf",
        **kwargs,
    )
    document.uploaded_at = BASE_TIME + timedelta(minutes=minutes)
    db.flush()
    return document


def _latest_rows(db, user, ride_id, name="ADIPS Certificate"):
    rows = versioning.list_versions(db, user_id=user.id, document_name=name, ride_id=ride_id)
    return [row for row in rows if row.is_latest_version]


@pytest.mark.parametrize(
    "current,expected",
    [
        (None, "1.0"),
        ("", "1.0"),
        ("1.0", "1.1"),
        ("2.9", "2.10"),
        ("3", "3.1"),
        ("1.2.3", "1.2.4"),
    ],
)
def test_next_version_number(current, expected):
    assert versioning.next_version_number(current) == expected


def test_next_version_number_rejects_non_numeric_minor():
    with pytest.raises(ValueError):
        versioning.next_version_number("1.beta")


def test_first_upload_is_latest_version_one(db_session):
    user, ride = _setup(db_session)
    document = _upload(db_session, user, ride.id, minutes=0)

    assert document.version_number == "1.0"
    assert document.is_latest_version is True
    assert document.is_global is False
    assert document.replaced_document_id is None


def test_new_version_flips_previous_latest(db_session):
    user, ride = _setup(db_session)
    first = _upload(db_session, user, ride.id, minutes=0)
    second = _upload(db_session, user, ride.id, minutes=5, use_version_control=True, version_notes="Renewed")
    db_session.commit()

    assert second.version_number == "1.1"
    assert second.replaced_document_id == first.id
    assert first.is_latest_version is False
    assert [row.id for row in _latest_rows(db_session, user, ride.id)] == [second.id]


def test_explicit_version_number_is_kept(db_session):
    user, ride = _setup(db_session)
    _upload(db_session, user, ride.id, minutes=0)
    second = _upload(db_session, user, ride.id, minutes=5, use_version_control=True, version_number="2.0")

    assert second.version_number == "2.0"
    assert versioning.suggest_next_version(
        db_session, user_id=user.id, document_name="ADIPS Certificate", ride_id=ride.id
    ) == "2.1"


def test_replacing_an_older_version_still_leaves_one_latest(db_session):
    user, ride = _setup(db_session)
    first = _upload(db_session, user, ride.id, minutes=0)
    second = _upload(db_session, user, ride.id, minutes=5, use_version_control=True)
    third = _upload(
        db_session,
        user,
        ride.id,
        minutes=10,
        use_version_control=True,
        replaced_document_id=first.id,
    )
    db_session.commit()

    assert third.replaced_document_id == first.id
    assert third.version_number == "1.2"
    assert second.is_latest_version is False
    assert [row.id for row in _latest_rows(db_session, user, ride.id)] == [third.id]


def test_replacing_a_document_from_another_key_is_refused(db_session):
    user, ride = _setup(db_session)
    other = _upload(db_session, user, ride.id, minutes=0, name="Insurance")

    with pytest.raises(LookupError):
        _upload(
            db_session,
            user,
            ride.id,
            minutes=5,
            use_version_control=True,
            replaced_document_id=other.id,
        )


def test_duplicate_name_without_version_control_is_refused(db_session):
    user, ride = _setup(db_session)
    _upload(db_session, user, ride.id, minutes=0)

    with pytest.raises(ValueError):
        _upload(db_session, user, ride.id, minutes=5)


def test_global_and_ride_documents_are_separate_keys(db_session):
    user, ride = _setup(db_session)
    ride_doc = _upload(db_session, user, ride.id, minutes=0, name="Insurance")
    global_doc = _upload(db_session, user, None, minutes=1, name="Insurance")
    global_v2 = _upload(db_session, user, None, minutes=2, name="Insurance", use_version_control=True)
    db_session.commit()

    assert global_doc.is_global is True
    assert global_v2.replaced_document_id == global_doc.id
    assert ride_doc.is_latest_version is True
    assert [row.id for row in _latest_rows(db_session, user, None, "Insurance")] == [global_v2.id]


def test_list_versions_newest_first(db_session):
    user, ride = _setup(db_session)
    first = _upload(db_session, user, ride.id, minutes=0)
    second = _upload(db_session, user, ride.id, minutes=5, use_version_control=True)
    third = _upload(db_session, user, ride.id, minutes=10, use_version_control=True)

    versions = versioning.list_versions(
        db_session, user_id=user.id, document_name="ADIPS Certificate", ride_id=ride.id
    )
    assert [row.id for row in versions] == [third.id, second.id, first.id]
    assert [row.version_number for row in versions] == ["1.2", "1.1", "1.0"]


def test_suggest_next_version_without_history(db_session):
    user, ride = _setup(db_session)
    assert versioning.suggest_next_version(
        db_session, user_id=user.id, document_name="Nothing yet", ride_id=ride.id
    ) == "1.0"


def test_promote_newest_remaining(db_session):
    user, ride = _setup(db_session)
    first = _upload(db_session, user, ride.id, minutes=0)
    second = _upload(db_session, user, ride.id, minutes=5, use_version_control=True)

    db_session.delete(second)
    db_session.flush()
    promoted = versioning.promote_newest_remaining(
        db_session, user_id=user.id, document_name="ADIPS Certificate", ride_id=ride.id
    )

    assert promoted is not None and promoted.id == first.id
    assert first.is_latest_version is True


def test_partial_index_rejects_two_latest_rows(db_session):
    user, ride = _setup(db_session)
    _upload(db_session, user, ride.id, minutes=0)
    db_session.commit()

    db_session.add(
        document_models.Document(
            user_id=user.id,
            ride_id=ride.id,
            document_name="ADIPS Certificate",
            document_type="certificate",
            file_path="dup.pdf",
            is_latest_version=True,
        )
    )
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()
