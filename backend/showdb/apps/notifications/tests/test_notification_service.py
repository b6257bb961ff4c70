from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone

import pytest

from showdb.apps.accounts import models as account_models
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import providers as notification_providers
from showdb.apps.notifications import service as notification_service
from showdb.apps.notifications import templates
from showdb.apps.notifications.router import router as notifications_router


class _FailingProvider(notification_providers.EmailProvider):
    def send(self, *, template_key, recipient, subject, context, correlation_id):
        raise RuntimeError("mailbox unavailable")


def _create_user(db) -> account_models.User:
    user = account_models.User(email="notify@example.com", full_name="Notify User")
    db.add(user)
    db.commit()
    return user


# ---------------------------------------------------------------------------
# send_email
# ---------------------------------------------------------------------------


def test_send_email_no_provider_marks_skipped(db_session, monkeypatch):
    user = _create_user(db_session)
    monkeypatch.setattr(
        notification_providers,
        "get_email_provider",
        lambda: (notification_providers.NoopProvider(), False),
    )

    log = notification_service.send_email(
        "welcome",
        user.email,
        "Welcome",
        {"email": user.email},
        correlation_id="welcome:1",
        user_id=user.id,
        db=db_session,
    )

    assert log.status == notification_models.EmailStatus.SKIPPED_NO_PROVIDER
    assert log.error == "No provider configured"
    assert log.sent_at is None


def test_send_email_success_marks_sent(db_session, monkeypatch):
    user = _create_user(db_session)
    monkeypatch.setattr(
        notification_providers,
        "get_email_provider",
        lambda: (notification_providers.NoopProvider(), True),
    )

    log = notification_service.send_email(
        "welcome", user.email, "Welcome", {}, correlation_id=None, user_id=user.id, db=db_session
    )

    assert log.status == notification_models.EmailStatus.SENT
    assert log.sent_at is not None


def test_send_email_failure_non_critical_is_logged(db_session, monkeypatch):
    user = _create_user(db_session)
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (_FailingProvider(), True))

    log = notification_service.send_email(
        "welcome", user.email, "Welcome", {}, correlation_id=None, user_id=user.id, db=db_session
    )
    db_session.commit()

    assert log.status == notification_models.EmailStatus.FAILED
    assert log.error == "mailbox unavailable"
    assert db_session.query(notification_models.EmailLog).count() == 1


def test_send_email_failure_critical_raises(db_session, monkeypatch):
    user = _create_user(db_session)
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (_FailingProvider(), True))

    with pytest.raises(RuntimeError):
        notification_service.send_email(
            "welcome",
            user.email,
            "Welcome",
            {},
            correlation_id=None,
            critical=True,
            user_id=user.id,
            db=db_session,
        )


def test_list_email_logs_filters(db_session, monkeypatch):
    user = _create_user(db_session)
    monkeypatch.setattr(
        notification_providers,
        "get_email_provider",
        lambda: (notification_providers.NoopProvider(), False),
    )
    notification_service.send_email("welcome", user.email, "Welcome", {}, None, user_id=user.id, db=db_session)
    notification_service.send_email("feature_request", "support@example.com", "Idea", {}, None, db=db_session)
    db_session.commit()

    assert len(notification_service.list_email_logs(db_session)) == 2
    by_user = notification_service.list_email_logs(db_session, user_id=user.id)
    assert [log.template_key for log in by_user] == ["welcome"]
    assert [log.subject for log in notification_service.list_email_logs(db_session, recipient=" SUPPORT@")] == ["Idea"]
    assert notification_service.list_email_logs(db_session, status=notification_models.EmailStatus.SENT) == []


def test_subject_is_truncated(db_session, monkeypatch):
    monkeypatch.setattr(
        notification_providers,
        "get_email_provider",
        lambda: (notification_providers.NoopProvider(), False),
    )
    log = notification_service.send_email("welcome", "a@example.com", "x" * 400, {}, None, db=db_session)
    assert len(log.subject) == 255


# ---------------------------------------------------------------------------
# providers
# ---------------------------------------------------------------------------


def test_get_email_provider_from_env(monkeypatch):
    monkeypatch.delenv("NOTIFICATIONS_EMAIL_PROVIDER", raising=False)

    monkeypatch.setenv("EMAIL_PROVIDER", "none")
    provider, configured = notification_providers.get_email_provider()
    assert isinstance(provider, notification_providers.NoopProvider) and configured is False

    monkeypatch.setenv("EMAIL_PROVIDER", "resend")
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    assert notification_providers.get_email_provider()[1] is False

    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    provider, configured = notification_providers.get_email_provider()
    assert isinstance(provider, notification_providers.ResendProvider) and configured is True

    monkeypatch.setenv("EMAIL_PROVIDER", "pigeon")
    with pytest.raises(ValueError):
        notification_providers.get_email_provider()


def test_resend_payload_includes_attachments(tmp_path):
    attachment = tmp_path / "cert.pdf"
    attachment.write_bytes(b"%PDF")
    provider = notification_providers.ResendProvider("re_test", sender="Docs <docs@example.com>")

    payload = provider.build_payload(
        template_key="send_documents",
        recipient="council@example.com",
        subject="Ride Documentation: Waltzer",
        context={
            "ride_name": "Waltzer",
            "documents": [{"document_name": "ADIPS", "document_type": "certificate"}],
            "attachments": [{"filename": "Waltzer_ADIPS.pdf", "path": str(attachment)}],
        },
    )

    assert payload["from"] == "Docs <docs@example.com>"
    assert payload["to"] == ["council@example.com"]
    assert "Ride Name: Waltzer" in payload["text"]
    assert payload["attachments"] == [
        {
            "filename": "Waltzer_ADIPS.pdf",
            "content": base64.b64encode(b"%PDF").decode("ascii"),
            "content_type": "application/octet-stream",
        }
    ]


# ---------------------------------------------------------------------------
# templates
# ---------------------------------------------------------------------------


def test_every_template_renders_with_empty_context():
    for key in templates.RENDERERS:
        assert templates.render(key, {}).endswith("\n")


def test_render_unknown_template():
    with pytest.raises(ValueError):
        templates.render("nope", {})


def test_document_expiry_reminder_groups_windows():
    body = templates.render(
        "document_expiry_reminder",
        {
            "company_name": "Smith Amusements",
            "windows": [
                {"days": 30, "documents": [{"document_name": "ADIPS", "document_type": "certificate", "ride_name": "Waltzer"}]},
                {"days": 7, "documents": [{"document_name": "PL", "document_type": "insurance"}]},
            ],
        },
    )

    assert body.startswith("Hello Smith Amusements,")
    assert body.index("Expiring in 30 days:") < body.index("Expiring in 7 days:")
    assert "Ride: Waltzer" in body


def test_ride_type_labels():
    assert templates.ride_type_label("stall") == "Food/Game Stall"
    assert templates.ride_type_label("Ride") == "Fairground Ride"
    assert templates.ride_type_label("other") == "Generator/Equipment"


# ---------------------------------------------------------------------------
# in-app notifications
# ---------------------------------------------------------------------------


def test_create_notification_dedupes_within_window(db_session):
    user = _create_user(db_session)

    first = notification_service.create_notification(
        db_session, user_id=user.id, title="Overdue Inspections", message="1 overdue", dedupe_hours=24
    )
    second = notification_service.create_notification(
        db_session, user_id=user.id, title="Overdue Inspections", message="2 overdue", dedupe_hours=24
    )
    assert first is not None
    assert second is None

    first.created_at = datetime.now(timezone.utc) - timedelta(hours=25)
    db_session.flush()
    third = notification_service.create_notification(
        db_session, user_id=user.id, title="Overdue Inspections", message="3 overdue", dedupe_hours=24
    )
    assert third is not None


def test_mark_read_and_mark_all_read(db_session):
    user = _create_user(db_session)
    rows = [
        notification_service.create_notification(db_session, user_id=user.id, title=f"N{i}", message="m")
        for i in range(3)
    ]
    db_session.commit()

    assert notification_service.mark_read(db_session, user_id="someone-else", notification_id=rows[0].id) is None
    assert notification_service.mark_read(db_session, user_id=user.id, notification_id=rows[0].id).is_read is True
    assert len(notification_service.list_notifications(db_session, user_id=user.id, unread_only=True)) == 2

    assert notification_service.mark_all_read(db_session, user_id=user.id) == 2
    db_session.commit()
    db_session.expire_all()
    assert notification_service.list_notifications(db_session, user_id=user.id, unread_only=True) == []


def test_notification_routes_registered():
    paths = {route.path for route in notifications_router.routes}
    assert {
        "/email-logs",
        "/notifications",
        "/notifications/read-all",
        "/notifications/{notification_id}/read",
    } <= paths
