from __future__ import annotations

import io
from datetime import date

import pytest

from showdb.apps.accounts import models as account_models
from showdb.apps.documents import models as document_models
from showdb.apps.documents import schemas as document_schemas
from showdb.apps.documents import services as document_services
from showdb.apps.documents import storage, versioning
from showdb.apps.documents.router import router as documents_router
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import providers as notification_providers
from showdb.apps.rides import models as ride_models


class _RecordingProvider(notification_providers.EmailProvider):
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, *, template_key, recipient, subject, context, correlation_id):
        if self.fail:
            raise RuntimeError("provider down")
        self.sent.append(
            {"template_key": template_key, "recipient": recipient, "subject": subject, "context": context}
        )


@pytest.fixture()
def bucket(tmp_path, monkeypatch):
    monkeypatch.setattr(storage, "DOCUMENT_STORAGE_DIR", str(tmp_path))
    return tmp_path


def _setup(db):
    user = account_models.User(email="owner@example.com")
    category = ride_models.RideCategory(name="Spinning Ride")
    db.add_all([user, category])
    db.flush()
    db.add(account_models.Profile(user_id=user.id, company_name="Smith Amusements", subscription_status="basic"))
    ride = ride_models.Ride(
        user_id=user.id,
        category_id=category.id,
        ride_name="Waltzer",
        manufacturer="Maxwell",
        serial_number="W-77",
    )
    db.add(ride)
    db.commit()
    return user, ride


def _store(user, ride_id, filename: str, body: bytes = b"%PDF-1.4") -> str:
    key = storage.build_storage_key(user.id, ride_id, filename, timestamp_ms=1700000000000)
    storage.save(key, io.BytesIO(body))
    return key


def _document(db, user, ride_id, name: str, document_type: str, file_path: str, **kwargs):
    document = versioning.create_document(
        db,
        user_id=user.id,
        ride_id=ride_id,
        document_name=name,
        document_type=document_type,
        file_path=file_path,
        mime_type="application/pdf",
        **kwargs,
    )
    db.commit()
    return document


# ---------------------------------------------------------------------------
# storage
# ---------------------------------------------------------------------------


def test_storage_key_layout():
    key = storage.build_storage_key("user-1", None, "../Insurance Cert.pdf", timestamp_ms=42)
    assert key == "user-1/global/42-Insurance Cert.pdf"

    key = storage.build_storage_key("user-1", "ride-9", "a/b/c?.pdf", timestamp_ms=42)
    assert key == "user-1/ride-9/42-c_.pdf"


def test_storage_save_open_delete(bucket):
    key = "user-1/global/1-doc.pdf"
    assert storage.save(key, io.BytesIO(b"abc")) == 3
    assert storage.open_path(key).read_bytes() == b"abc"

    storage.delete(key)
    with pytest.raises(FileNotFoundError):
        storage.open_path(key)
    storage.delete(key)


def test_storage_rejects_keys_outside_root(bucket):
    with pytest.raises(storage.StorageError):
        storage.resolve_path("../../etc/passwd")


def test_storage_size_cap_removes_partial_file(bucket):
    key = "user-1/global/1-big.bin"
    with pytest.raises(storage.UploadTooLarge):
        storage.save(key, io.BytesIO(b"x" * 10), max_bytes=5)
    assert not (bucket / key).exists()


# ---------------------------------------------------------------------------
# services
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "expires_at,expected",
    [
        (None, "none"),
        (date(2026, 5, 31), "expired"),
        (date(2026, 6, 1), "expiring"),
        (date(2026, 7, 1), "expiring"),
        (date(2026, 7, 2), "upcoming"),
        (date(2026, 8, 30), "upcoming"),
        (date(2026, 8, 31), "valid"),
    ],
)
def test_expiry_status(expires_at, expected):
    assert document_services.expiry_status(expires_at, date(2026, 6, 1)) == expected


def test_list_documents_filters(db_session, bucket):
    user, ride = _setup(db_session)
    _document(db_session, user, ride.id, "ADIPS", "certificate", "a.pdf")
    _document(db_session, user, ride.id, "ADIPS", "certificate", "b.pdf", use_version_control=True)
    _document(db_session, user, None, "Public Liability", "insurance", "c.pdf")

    latest = document_services.list_documents(db_session, user_id=user.id)
    assert {doc.file_path for doc in latest} == {"b.pdf", "c.pdf"}

    everything = document_services.list_documents(db_session, user_id=user.id, include_history=True)
    assert len(everything) == 3

    ride_only = document_services.list_documents(db_session, user_id=user.id, ride_id=ride.id)
    assert [doc.file_path for doc in ride_only] == ["b.pdf"]

    global_only = document_services.list_documents(db_session, user_id=user.id, global_only=True)
    assert [doc.document_name for doc in global_only] == ["Public Liability"]
    assert global_only[0].ride_name is None


def test_get_document_is_owner_scoped(db_session):
    user, ride = _setup(db_session)
    doc = _document(db_session, user, ride.id, "ADIPS", "certificate", "a.pdf")

    assert document_services.get_document(db_session, user_id=user.id, document_id=doc.id) is doc
    assert document_services.get_document(db_session, user_id="someone-else", document_id=doc.id) is None


def test_update_document_keeps_type_when_null(db_session):
    user, ride = _setup(db_session)
    doc = _document(db_session, user, ride.id, "ADIPS", "certificate", "a.pdf")

    document_services.update_document(
        db_session,
        doc,
        document_schemas.DocumentUpdate(document_type=None, expires_at=date(2027, 1, 1)),
    )

    assert doc.document_type == "certificate"
    assert doc.expires_at == date(2027, 1, 1)


def test_delete_latest_promotes_previous_version(db_session):
    user, ride = _setup(db_session)
    first = _document(db_session, user, ride.id, "ADIPS", "certificate", "a.pdf")
    second = _document(db_session, user, ride.id, "ADIPS", "certificate", "b.pdf", use_version_control=True)

    promoted = document_services.delete_document(db_session, second)
    db_session.commit()

    assert promoted is not None and promoted.id == first.id
    assert first.is_latest_version is True
    assert db_session.query(document_models.Document).count() == 1


def test_delete_old_version_clears_replacement_link(db_session):
    user, ride = _setup(db_session)
    first = _document(db_session, user, ride.id, "ADIPS", "certificate", "a.pdf")
    second = _document(db_session, user, ride.id, "ADIPS", "certificate", "b.pdf", use_version_control=True)

    assert document_services.delete_document(db_session, first) is None
    db_session.commit()
    db_session.refresh(second)

    assert second.replaced_document_id is None
    assert second.is_latest_version is True


def test_send_documents_attaches_files_and_notifies(db_session, bucket, monkeypatch):
    user, ride = _setup(db_session)
    cert = _document(
        db_session,
        user,
        ride.id,
        "ADIPS",
        "certificate",
        _store(user, ride.id, "adips.pdf"),
        expires_at=date(2027, 3, 1),
    )
    _document(db_session, user, None, "Public Liability", "insurance", _store(user, None, "pl.pdf"))

    provider = _RecordingProvider()
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (provider, True))

    log = document_services.send_documents(
        db_session,
        user_id=user.id,
        payload=document_schemas.SendDocumentsRequest(
            ride_id=ride.id,
            document_ids=[cert.id],
            recipient_email="council@example.com",
            include_insurance=True,
        ),
    )
    db_session.commit()

    assert log.status == notification_models.EmailStatus.SENT
    sent = provider.sent[0]
    assert sent["template_key"] == "send_documents"
    assert sent["subject"] == "Ride Documentation: Waltzer (Maxwell) - S/N: W-77"
    assert [a["filename"] for a in sent["context"]["attachments"]] == [
        "Waltzer_ADIPS.pdf",
        "Waltzer_Public Liability.pdf",
    ]
    assert sent["context"]["recipient_name"] == "Council/Authority"
    assert sent["context"]["sender_name"] == "Smith Amusements"

    notification = db_session.query(notification_models.Notification).one()
    assert notification.title == "Documents Sent"
    assert notification.related_id == ride.id


def test_send_documents_failure_is_logged_without_notification(db_session, bucket, monkeypatch):
    user, ride = _setup(db_session)
    cert = _document(db_session, user, ride.id, "ADIPS", "certificate", _store(user, ride.id, "adips.pdf"))
    monkeypatch.setattr(
        notification_providers,
        "get_email_provider",
        lambda: (_RecordingProvider(fail=True), True),
    )

    log = document_services.send_documents(
        db_session,
        user_id=user.id,
        payload=document_schemas.SendDocumentsRequest(
            ride_id=ride.id,
            document_ids=[cert.id],
            recipient_email="council@example.com",
        ),
    )
    db_session.commit()

    assert log.status == notification_models.EmailStatus.FAILED
    assert log.error == "provider down"
    assert db_session.query(notification_models.Notification).count() == 0


def test_send_documents_requires_selection(db_session):
    user, ride = _setup(db_session)

    with pytest.raises(ValueError):
        document_services.send_documents(
            db_session,
            user_id=user.id,
            payload=document_schemas.SendDocumentsRequest(
                ride_id=ride.id,
                document_ids=["not-a-document"],
                recipient_email="council@example.com",
            ),
        )
    with pytest.raises(LookupError):
        document_services.send_documents(
            db_session,
            user_id=user.id,
            payload=document_schemas.SendDocumentsRequest(
                ride_id="missing",
                document_ids=["x"],
                recipient_email="council@example.com",
            ),
        )


def test_document_routes_registered():
    paths = {route.path for route in documents_router.routes}
    assert {
        "/documents",
        "/documents/versions",
        "/documents/suggested-version",
        "/documents/send",
        "/documents/{document_id}",
        "/documents/{document_id}/download",
    } <= paths
