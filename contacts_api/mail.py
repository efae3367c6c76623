"""
Outbound email.

``Mailer`` wraps an SMTP transport configured from Settings. It is built
once in ``create_app`` and handed to request handlers through
``get_mailer`` so tests can swap in a fake.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from fastapi import Request

from contacts_api.config import Settings
from contacts_api.errors import ServerError

logger = logging.getLogger(__name__)


class MailDeliveryError(ServerError):
    pass


class Mailer:
    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port or 465
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.smtp_from

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password and self.sender)

    def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send an HTML email.

        Returns False without sending when SMTP is not configured.

        :raises MailDeliveryError: If the SMTP server rejects the message.
        """
        if not self.configured:
            logger.warning("SMTP is not configured; skipping email to %s", to)
            return False
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.attach(MIMEText(html, "html", "utf-8"))
        try:
            if self.port == 465:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.host, self.port, context=context) as server:
                    server.login(self.user, self.password)
                    server.sendmail(self.sender, [to], msg.as_string())
            else:
                with smtplib.SMTP(self.host, self.port) as server:
                    server.ehlo()
                    server.starttls(context=ssl.create_default_context())
                    server.login(self.user, self.password)
                    server.sendmail(self.sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Failed to send email to {to}: {exc}") from exc
        logger.info("Sent '%s' to %s", subject, to)
        return True


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
