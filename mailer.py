import logging
import smtplib
from email.message import EmailMessage

from fastapi import Depends

from config import Settings, get_settings
from errors import MailError

logger = logging.getLogger(__name__)


class Mailer:
    def send(self, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


class SMTPMailer(Mailer):
    """Sends HTML mail through an authenticated SMTP account.

    Port 465 uses implicit TLS, any other port upgrades with STARTTLS.
    """

    def __init__(self, host, port, username, password, sender=None, timeout=10.0):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout

    def _connect(self):
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        smtp.starttls()
        return smtp

    def send(self, to, subject, html):
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        try:
            with self._connect() as smtp:
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email error: {e}")
            raise MailError(detail=str(e))
        logger.info("Sent '%s' to %s", subject, to)


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return SMTPMailer(
        settings.MAIL_HOST,
        settings.MAIL_PORT,
        settings.MAIL_USERNAME,
        settings.MAIL_PASSWORD,
        settings.MAIL_FROM,
        settings.MAIL_TIMEOUT,
    )
