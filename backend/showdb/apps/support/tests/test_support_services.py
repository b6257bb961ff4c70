from __future__ import annotations

import pytest
from pydantic import ValidationError

from showdb.apps.accounts import models as account_models
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import providers as notification_providers
from showdb.apps.support import models as support_models
from showdb.apps.support import schemas as support_schemas
from showdb.apps.support import services as support_services
from showdb.apps.support.router import router as support_router


class _RecordingProvider(notification_providers.EmailProvider):
    def __init__(self):
        self.sent = []

    def send(self, *, template_key, recipient, subject, context, correlation_id):
        self.sent.append((template_key, recipient, subject))


class _FailingProvider(notification_providers.EmailProvider):
    def send(self, *, template_key, recipient, subject, context, correlation_id):
        raise RuntimeError("smtp relay refused")


def _use_provider(monkeypatch, provider, configured=True):
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (provider, configured))


def _create_user(db, email="showman@example.com", **kwargs):
    user = account_models.User(email=email, **kwargs)
    db.add(user)
    db.commit()
    return user


def _logs(db):
    return db.query(notification_models.EmailLog).order_by(notification_models.EmailLog.created_at.asc()).all()


def test_create_message_mails_inbox(db_session, monkeypatch):
    provider = _RecordingProvider()
    _use_provider(monkeypatch, provider)
    user = _create_user(db_session)

    message = support_services.create_message(
        db_session,
        user=user,
        payload=support_schemas.SupportMessageCreate(subject="  Upload stuck ", message="Spinner never stops", priority="high"),
    )
    db_session.commit()

    assert message.subject == "Upload stuck"
    assert message.status == support_models.SupportStatus.OPEN.value
    assert provider.sent == [
        ("support_notification", support_services.SUPPORT_INBOX_EMAIL, "New Support Message: Upload stuck")
    ]


def test_create_message_kept_when_mail_fails(db_session, monkeypatch):
    _use_provider(monkeypatch, _FailingProvider())
    user = _create_user(db_session)

    message = support_services.create_message(
        db_session,
        user=user,
        payload=support_schemas.SupportMessageCreate(subject="Help", message="Please"),
    )
    db_session.commit()

    assert support_services.get_message(db_session, message.id) is message
    assert [log.status for log in _logs(db_session)] == [notification_models.EmailStatus.FAILED]


def test_list_messages_and_respond(db_session, monkeypatch):
    _use_provider(monkeypatch, notification_providers.NoopProvider(), configured=False)
    user = _create_user(db_session)
    other = _create_user(db_session, "other@example.com")
    admin = _create_user(db_session, "admin@example.com", is_admin=True)
    mine = support_services.create_message(
        db_session, user=user, payload=support_schemas.SupportMessageCreate(subject="Mine", message="m")
    )
    support_services.create_message(
        db_session, user=other, payload=support_schemas.SupportMessageCreate(subject="Theirs", message="m")
    )
    db_session.commit()

    assert [m.subject for m in support_services.list_messages(db_session, user_id=user.id)] == ["Mine"]
    assert len(support_services.list_messages(db_session)) == 2

    support_services.respond(
        db_session,
        mine,
        admin=admin,
        payload=support_schemas.SupportMessageRespond(admin_response="Fixed in the latest release"),
    )
    db_session.commit()

    assert mine.status == "responded"
    assert mine.responded_by == admin.id
    assert mine.responded_at is not None
    assert [m.subject for m in support_services.list_messages(db_session, status="open")] == ["Theirs"]


def test_ride_type_request_sends_confirmation_after_inbox_mail(db_session, monkeypatch):
    provider = _RecordingProvider()
    _use_provider(monkeypatch, provider)
    user = _create_user(db_session, full_name="Sam Smith")

    log = support_services.request_ride_type(
        db_session,
        user=user,
        payload=support_schemas.RideTypeRequest(name="Cyclone", type="stall", description="Hook-a-duck stall"),
    )
    db_session.commit()

    assert support_services.email_status(log) == "SENT"
    assert provider.sent == [
        ("ride_type_request", support_services.SUPPORT_INBOX_EMAIL, "New Food/Game Stall Request: Cyclone"),
        ("ride_type_request_confirmation", user.email, "Request Confirmed: Cyclone"),
    ]
    assert log.context_json["user_name"] == "Sam Smith"


def test_ride_type_request_without_provider_skips_confirmation(db_session, monkeypatch):
    _use_provider(monkeypatch, notification_providers.NoopProvider(), configured=False)
    user = _create_user(db_session)

    log = support_services.request_ride_type(
        db_session,
        user=user,
        payload=support_schemas.RideTypeRequest(name="Twister", type="ride", description="Spinning ride"),
    )
    db_session.commit()

    assert support_services.email_status(log) == "SKIPPED_NO_PROVIDER"
    assert [entry.template_key for entry in _logs(db_session)] == ["ride_type_request"]


def test_ride_type_request_validates_type():
    with pytest.raises(ValidationError):
        support_schemas.RideTypeRequest(name="Twister", type="boat", description="Spinning ride")


def test_document_type_request(db_session, monkeypatch):
    provider = _RecordingProvider()
    _use_provider(monkeypatch, provider)
    user = _create_user(db_session)

    log = support_services.request_document_type(
        db_session,
        user=user,
        payload=support_schemas.DocumentTypeRequest(document_type_name="Electrical Test Certificate"),
    )

    assert log.subject == "New Document Type Request"
    assert log.context_json["user_email"] == user.email
    assert provider.sent[0][1] == support_services.SUPPORT_INBOX_EMAIL


def test_feature_request_is_persisted(db_session, monkeypatch):
    _use_provider(monkeypatch, _FailingProvider())
    user = _create_user(db_session)

    request = support_services.create_feature_request(
        db_session,
        user=user,
        payload=support_schemas.FeatureRequestCreate(
            feature_title="Offline mode",
            feature_description="Use the app on site without signal.",
            use_case="   ",
        ),
    )
    db_session.commit()

    assert request.use_case is None
    assert request.status == "pending"
    assert [r.id for r in support_services.list_feature_requests(db_session)] == [request.id]
    assert _logs(db_session)[0].subject == "New Feature Request: Offline mode"


def test_feature_request_description_minimum():
    with pytest.raises(ValidationError):
        support_schemas.FeatureRequestCreate(feature_title="Short", feature_description="too short")


def test_email_status_without_log():
    assert support_services.email_status(None) == "FAILED"


def test_support_routes_registered():
    paths = {route.path for route in support_router.routes}
    assert {
        "/support/messages",
        "/support/admin/messages",
        "/support/admin/messages/{message_id}/respond",
        "/support/ride-type-requests",
        "/support/document-type-requests",
        "/support/admin/feature-requests",
    } <= paths
