from __future__ import annotations

from datetime import date, datetime, timezone

from showdb.apps.accounts import models as account_models
from showdb.apps.documents import models as document_models
from showdb.apps.maintenance import models as maintenance_models
from showdb.apps.notifications import models as notification_models
from showdb.apps.notifications import providers as notification_providers
from showdb.apps.notifications import reminders
from showdb.apps.rides import models as ride_models

TODAY = date(2026, 3, 1)


class _RecordingProvider(notification_providers.EmailProvider):
    def __init__(self):
        self.sent = []

    def send(self, *, template_key, recipient, subject, context, correlation_id):
        self.sent.append({"template_key": template_key, "recipient": recipient, "subject": subject, "context": context})


def _use_provider(monkeypatch, provider, configured=True):
    monkeypatch.setattr(notification_providers, "get_email_provider", lambda: (provider, configured))


def _user(db, email, plan):
    user = account_models.User(email=email)
    db.add(user)
    db.flush()
    db.add(account_models.Profile(user_id=user.id, company_name=f"{email} Ltd", subscription_status=plan))
    db.flush()
    return user


def _ride(db, user, name="Waltzer"):
    category = db.query(ride_models.RideCategory).first()
    if category is None:
        category = ride_models.RideCategory(name="Spinning Ride")
        db.add(category)
        db.flush()
    ride = ride_models.Ride(user_id=user.id, category_id=category.id, ride_name=name)
    db.add(ride)
    db.flush()
    return ride


def _document(db, user, name, expires_at, ride=None, **kwargs):
    doc = document_models.Document(
        user_id=user.id,
        ride_id=ride.id if ride else None,
        document_name=name,
        document_type="certificate",
        file_path=f"{name}.pdf",
        is_global=ride is None,
        expires_at=expires_at,
        **kwargs,
    )
    db.add(doc)
    db.flush()
    return doc


# ---------------------------------------------------------------------------
# document expiry
# ---------------------------------------------------------------------------


def test_document_expiry_groups_per_basic_user(db_session, monkeypatch):
    provider = _RecordingProvider()
    _use_provider(monkeypatch, provider)

    basic = _user(db_session, "basic@example.com", "basic")
    advanced = _user(db_session, "advanced@example.com", "advanced")
    ride = _ride(db_session, basic)
    _document(db_session, basic, "ADIPS", date(2026, 3, 31), ride=ride)
    _document(db_session, basic, "Public Liability", date(2026, 3, 8))
    _document(db_session, basic, "Not in window", date(2026, 3, 9))
    _document(db_session, basic, "Superseded", date(2026, 3, 8), is_latest_version=False, version_number="0.9")
    _document(db_session, advanced, "Advanced PL", date(2026, 3, 8))
    db_session.commit()

    result = reminders.send_document_expiry_reminders(db_session, today=TODAY, windows=(30, 7))

    assert result.total == 3
    assert result.emails_sent == 1
    assert result.skipped == 1
    assert len(provider.sent) == 1

    mail = provider.sent[0]
    assert mail["recipient"] == "basic@example.com"
    assert mail["subject"] == "Document Expiry Reminder - 2 Document(s) Expiring Soon"
    windows = mail["context"]["windows"]
    assert [w["days"] for w in windows] == [30, 7]
    assert windows[0]["documents"][0]["ride_name"] == "Waltzer"
    assert windows[1]["documents"][0]["document_name"] == "Public Liability"


def test_document_expiry_without_provider_counts_skipped(db_session, monkeypatch):
    _use_provider(monkeypatch, notification_providers.NoopProvider(), configured=False)
    basic = _user(db_session, "basic@example.com", "basic")
    _document(db_session, basic, "Public Liability", date(2026, 3, 8))
    db_session.commit()

    result = reminders.send_document_expiry_reminders(db_session, today=TODAY, windows=(7,))

    assert (result.emails_sent, result.emails_failed, result.skipped) == (0, 0, 1)
    log = db_session.query(notification_models.EmailLog).one()
    assert log.status == notification_models.EmailStatus.SKIPPED_NO_PROVIDER


def test_document_expiry_with_nothing_due(db_session, monkeypatch):
    _use_provider(monkeypatch, _RecordingProvider())
    result = reminders.send_document_expiry_reminders(db_session, today=TODAY, windows=(7,))
    assert result.total == 0
    assert result.emails_sent == 0


def test_parse_windows():
    assert reminders._parse_windows("7, 30,7,") == (30, 7)
    assert reminders._parse_windows("") == ()


# ---------------------------------------------------------------------------
# inspection schedules
# ---------------------------------------------------------------------------


def _schedule(db, user, ride, due_date, **kwargs):
    schedule = maintenance_models.InspectionSchedule(
        user_id=user.id,
        ride_id=ride.id,
        inspection_name="Annual ADIPS",
        inspection_type="annual",
        due_date=due_date,
        advance_notice_days=kwargs.pop("advance_notice_days", 14),
        **kwargs,
    )
    db.add(schedule)
    db.flush()
    return schedule


def test_inspection_reminder_sent_once_per_day(db_session, monkeypatch):
    provider = _RecordingProvider()
    _use_provider(monkeypatch, provider)
    user = _user(db_session, "insp@example.com", "advanced")
    ride = _ride(db_session, user)
    due = _schedule(db_session, user, ride, date(2026, 3, 11))
    _schedule(db_session, user, ride, date(2026, 5, 1))
    _schedule(db_session, user, ride, date(2026, 3, 2), is_active=False)
    db_session.commit()

    first = reminders.send_inspection_reminders(db_session, today=TODAY)
    db_session.commit()

    assert first.emails_sent == 1
    assert provider.sent[0]["subject"] == "Inspection Reminder: Annual ADIPS - Waltzer"
    assert provider.sent[0]["context"]["days_until_due"] == 10
    assert due.last_notification_sent is not None

    due.last_notification_sent = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    db_session.commit()

    second = reminders.send_inspection_reminders(db_session, today=TODAY)
    assert second.total == 0
    assert len(provider.sent) == 1

    third = reminders.send_inspection_reminders(db_session, today=date(2026, 3, 2))
    assert third.emails_sent == 1
    assert provider.sent[1]["context"]["days_until_due"] == 9


def test_inspection_reminder_not_stamped_without_provider(db_session, monkeypatch):
    _use_provider(monkeypatch, notification_providers.NoopProvider(), configured=False)
    user = _user(db_session, "insp@example.com", "advanced")
    ride = _ride(db_session, user)
    schedule = _schedule(db_session, user, ride, date(2026, 3, 5))
    db_session.commit()

    result = reminders.send_inspection_reminders(db_session, today=TODAY)

    assert result.skipped == 1
    assert schedule.last_notification_sent is None


# ---------------------------------------------------------------------------
# in-app system notifications
# ---------------------------------------------------------------------------


def test_system_notifications_created_and_deduped(db_session):
    user = _user(db_session, "sys@example.com", "advanced")
    ride = _ride(db_session, user)
    db_session.add(
        maintenance_models.InspectionCheck(
            user_id=user.id,
            ride_id=ride.id,
            check_date=date(2026, 2, 20),
            inspector_name="J. Bloggs",
            status=maintenance_models.CheckStatusEnum.PENDING,
        )
    )
    _schedule(db_session, user, ride, date(2026, 2, 25))
    _document(db_session, user, "Expired PL", date(2026, 2, 1))
    _document(db_session, user, "ADIPS", date(2026, 3, 20), ride=ride)
    _document(db_session, user, "Far away", date(2026, 9, 1))
    db_session.commit()

    created = reminders.generate_system_notifications(db_session, user.id, today=TODAY)
    db_session.commit()

    by_title = {n.title: n for n in created}
    assert set(by_title) == {"Overdue Inspections", "Documents Expiring Soon"}
    assert by_title["Overdue Inspections"].message.startswith("You have 2 overdue")
    assert by_title["Documents Expiring Soon"].message.startswith("2 document(s)")
    assert by_title["Overdue Inspections"].type == notification_models.NotificationType.WARNING.value

    assert reminders.generate_system_notifications(db_session, user.id, today=TODAY) == []


def test_system_notifications_nothing_to_report(db_session):
    user = _user(db_session, "quiet@example.com", "basic")
    db_session.commit()
    assert reminders.generate_system_notifications(db_session, user.id, today=TODAY) == []
    assert db_session.query(notification_models.Notification).count() == 0
