"""
Plain-text SMTP delivery for admin notifications
"""
import asyncio
import logging
import smtplib
import ssl
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import List

from overseas_tracker.config.settings import MailSettings
from overseas_tracker.core.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class MailSender:
    """Sends mail through the configured SMTP server in a worker thread"""

    def __init__(self, mail_settings: MailSettings):
        self.settings = mail_settings

    @property
    def enabled(self) -> bool:
        return self.settings.enabled and bool(self.settings.recipients)

    def _build_message(self, recipients: List[str], subject: str, body: str) -> MIMEText:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.settings.sender
        msg["To"] = ", ".join(recipients)
        return msg

    def _send_sync(self, recipients: List[str], subject: str, body: str) -> None:
        cfg = self.settings
        msg = self._build_message(recipients, subject, body)

        if cfg.use_ssl:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(cfg.host, cfg.port, context=context, timeout=cfg.timeout_seconds)
        else:
            server = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout_seconds)
            if cfg.use_tls:
                server.starttls(context=ssl.create_default_context())

        try:
            if cfg.username and cfg.password:
                server.login(cfg.username, cfg.password)
            server.sendmail(parseaddr(cfg.sender)[1], recipients, msg.as_string())
        finally:
            server.quit()

    async def send(self, subject: str, body: str) -> None:
        """
        Send a plain-text message to the configured recipients

        Raises:
            MailDeliveryError: SMTP connection, login or delivery failed
        """
        recipients = list(self.settings.recipients)
        try:
            await asyncio.to_thread(self._send_sync, recipients, subject, body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send to {recipients} failed: {e}")
            raise MailDeliveryError(str(e)) from e

        logger.info(f"Email '{subject}' sent to {len(recipients)} recipient(s)")
