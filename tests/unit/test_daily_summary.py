"""
Unit tests for the daily admin summary and its mail delivery
"""
import smtplib
import pytest
from datetime import timedelta
from unittest.mock import MagicMock, patch

from overseas_tracker.config.settings import MailSettings
from overseas_tracker.core.exceptions import MailDeliveryError
from overseas_tracker.services.daily_summary_service import DailySummaryService
from overseas_tracker.services.mail_sender import MailSender

DAY = timedelta(days=1)


def _mail_sender(**overrides) -> MailSender:
    values = dict(
        enabled=True,
        host="smtp.example.com",
        port=587,
        username="mailer",
        password="secret",
        sender="Tracker <noreply@example.com>",
        recipients=["ops@example.com", "boss@example.com"],
        use_ssl=False,
        use_tls=True,
    )
    values.update(overrides)
    return MailSender(MailSettings(**values))


@pytest.mark.asyncio
async def test_summary_sections(db_session, trip_service, make_trip, test_company, clock):
    starting = await make_trip(clock.today(), clock.today() + 3 * DAY, name="Alice", company_id=test_company.id)
    back = await make_trip(clock.today() - 4 * DAY, clock.today() - DAY, name="Bob")
    await make_trip(clock.today() + DAY, clock.today() + 2 * DAY, name="Carol")
    await make_trip(clock.today() - 9 * DAY, clock.today() - 5 * DAY, name="Dave")

    summary = await DailySummaryService(db_session, clock).build_summary()

    assert summary.report_date == clock.today()
    assert [t.trip_id for t in summary.starting_today] == [starting.id]
    assert summary.starting_today[0].company_name == "Acme Pty Ltd"
    assert [t.trip_id for t in summary.completed_yesterday] == [back.id]
    assert summary.completed_yesterday[0].company_name is None


@pytest.mark.asyncio
async def test_summary_skips_cancelled(db_session, trip_service, make_trip, clock):
    from overseas_tracker.models.trip import TripStatus
    from overseas_tracker.schemas.trip import TripPatch

    trip = await make_trip(clock.today(), clock.today() + DAY)
    await trip_service.update_trip(trip.id, 1, TripPatch(status=TripStatus.CANCELLED))

    summary = await DailySummaryService(db_session, clock).build_summary()

    assert summary.is_empty


@pytest.mark.asyncio
async def test_render_text(db_session, make_trip, clock):
    await make_trip(clock.today(), clock.today() + 3 * DAY, name="Alice")

    service = DailySummaryService(db_session, clock)
    text = service.render_text(await service.build_summary())

    assert "DAILY TRIP SUMMARY - 10/03/2024" in text
    assert "Trips Starting Today (1)" in text
    assert "* Name: Alice" in text
    assert "Company: No company" in text
    assert "Trips Completed Yesterday" not in text


@pytest.mark.asyncio
async def test_render_text_when_empty(db_session, clock):
    service = DailySummaryService(db_session, clock)
    text = service.render_text(await service.build_summary())

    assert "No trips starting today or completed yesterday." in text


@pytest.mark.asyncio
async def test_send_skipped_when_mail_disabled(db_session, make_trip, clock):
    await make_trip(clock.today(), clock.today() + DAY)
    sender = _mail_sender(enabled=False)

    result = await DailySummaryService(db_session, clock, sender).send_daily_summary()

    assert result == {"report_date": "2024-03-10", "starting": 1, "completed": 0, "sent": False}


@pytest.mark.asyncio
async def test_send_delivers_over_smtp(db_session, make_trip, clock):
    await make_trip(clock.today(), clock.today() + DAY)
    sender = _mail_sender()

    with patch("overseas_tracker.services.mail_sender.smtplib.SMTP") as smtp_cls:
        server = MagicMock()
        smtp_cls.return_value = server

        result = await DailySummaryService(db_session, clock, sender).send_daily_summary()

    assert result["sent"] is True
    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "secret")
    from_addr, to_addrs, message = server.sendmail.call_args.args
    assert from_addr == "noreply@example.com"
    assert to_addrs == ["ops@example.com", "boss@example.com"]
    assert "Daily Trip Summary - 10/03/2024" in message
    server.quit.assert_called_once()


@pytest.mark.asyncio
async def test_send_failure_raises_mail_error():
    sender = _mail_sender(use_tls=False, username=None, password=None)

    with patch("overseas_tracker.services.mail_sender.smtplib.SMTP") as smtp_cls:
        server = MagicMock()
        server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({})
        smtp_cls.return_value = server

        with pytest.raises(MailDeliveryError):
            await sender.send("subject", "body")

    server.login.assert_not_called()
    server.starttls.assert_not_called()
