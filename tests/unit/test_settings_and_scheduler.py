"""
Configuration loading and scheduler wiring
"""
import pytest
from datetime import date
from zoneinfo import ZoneInfo
from pydantic import ValidationError

from overseas_tracker.config.settings import MailSettings, SchedulerSettings, Settings
from overseas_tracker.core.clock import Clock, FixedClock
from overseas_tracker.services.mail_sender import MailSender
from overseas_tracker.services.scheduler import SUMMARY_JOB_ID, TRANSITION_JOB_ID, build_scheduler


def test_timezone_validated():
    assert Settings(timezone="Europe/London").get_zoneinfo() == ZoneInfo("Europe/London")
    with pytest.raises(ValidationError):
        Settings(timezone="Mars/Olympus")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TIMEZONE", "Asia/Tokyo")
    monkeypatch.setenv("MAIL_RECIPIENTS", "a@example.com, b@example.com")
    monkeypatch.setenv("SCHEDULER_TRANSITION_HOUR", "1")

    settings = Settings()

    assert settings.timezone == "Asia/Tokyo"
    assert settings.mail.recipients == ["a@example.com", "b@example.com"]
    assert settings.scheduler.transition_hour == 1


def test_mail_sender_needs_recipients():
    assert not MailSender(MailSettings(enabled=True, recipients=[])).enabled
    assert not MailSender(MailSettings(enabled=False, recipients=["a@example.com"])).enabled
    assert MailSender(MailSettings(enabled=True, recipients=["a@example.com"])).enabled


def test_clock_today_uses_configured_calendar():
    clock = FixedClock(date(2024, 3, 10), ZoneInfo("Australia/Sydney"))
    assert clock.today() == date(2024, 3, 10)
    assert clock.now().tzinfo is not None
    assert clock.yesterday() == date(2024, 3, 9)

    live = Clock(ZoneInfo("Pacific/Kiritimati"))
    assert live.today() >= Clock(ZoneInfo("Pacific/Pago_Pago")).today()


def test_build_scheduler_registers_daily_jobs():
    settings = Settings(
        timezone="Australia/Sydney",
        scheduler=SchedulerSettings(transition_hour=0, transition_minute=5, summary_hour=8, summary_minute=0),
    )
    clock = Clock(settings.get_zoneinfo())

    scheduler = build_scheduler(settings, None, clock, MailSender(settings.mail))

    jobs = {job.id: job for job in scheduler.get_jobs()}
    assert set(jobs) == {TRANSITION_JOB_ID, SUMMARY_JOB_ID}
    transition_fields = {f.name: str(f) for f in jobs[TRANSITION_JOB_ID].trigger.fields}
    assert transition_fields["hour"] == "0"
    assert transition_fields["minute"] == "5"
    assert str(jobs[SUMMARY_JOB_ID].trigger.timezone) == "Australia/Sydney"
