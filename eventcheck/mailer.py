"""
Ticket email rendering and delivery.

`render_email` is a pure function of the settings, the template and the attendee.
Delivery goes through an `EmailTransport`; every transport raises `DeliveryError` on
failure and never retries on its own.
"""

import html
import logging
import smtplib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Protocol

from eventcheck.attendee import Attendee
from eventcheck.errors import DeliveryError
from eventcheck.settings import AppSettings, SmtpSettings

logger = logging.getLogger(__name__)


def render_email(settings: AppSettings, template: str, attendee: Attendee | None) -> str:
    """
    Fill a ticket email template and wrap it with the branded header and footer.

    Placeholders: `{{name}}`, `{{event}}`, `{{id}}`, `{{invoiceId}}`, `{{amount}}` and
    `{{link}}`. Values are HTML-escaped. Without an attendee, generic values are used so
    that the template can be previewed.

    Args:
        settings: Application settings (branding, ticket price).
        template: HTML template body.
        attendee: The recipient, or None for a preview.

    Returns:
        str: HTML markup.
    """
    values = {
        "name": attendee.name if attendee and attendee.name else "Valued Guest",
        "event": attendee.form_title if attendee and attendee.form_title else "Event",
        "id": attendee.id if attendee else "NO-ID",
        "invoiceId": attendee.invoice_id if attendee and attendee.invoice_id else "N/A",
        "amount": f"{settings.ticket_price:g}",
        "link": "#register-link",
    }
    body = template
    for key, value in values.items():
        body = body.replace("{{" + key + "}}", html.escape(str(value)))

    if settings.email_header_logo:
        header = (
            f'<div style="background: {settings.email_header_color}; padding: 24px; '
            f'text-align: center; border-bottom: 1px solid #e5e7eb;">'
            f'<img src="{html.escape(settings.email_header_logo)}" '
            f'style="max-height: 60px; max-width: 200px;" alt="Logo"/></div>'
        )
    else:
        header = (
            f'<div style="background: {settings.email_header_color}; padding: 16px; '
            f'border-bottom: 1px solid #e5e7eb;"></div>'
        )

    return (
        '<div style="font-family: \'Segoe UI\', Tahoma, Geneva, Verdana, sans-serif; '
        "color: #333; max-width: 600px; margin: 0 auto; border: 1px solid #e5e7eb; "
        'border-radius: 12px; overflow: hidden;">'
        f"{header}"
        f'<div style="padding: 32px;">{body}</div>'
        f'<div style="background: {settings.email_footer_color}; padding: 20px; '
        'text-align: center; font-size: 12px; color: #6b7280; '
        f'border-top: 1px solid #e5e7eb;">{settings.email_footer_text}</div>'
        "</div>"
    )


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True)
class EmailResult:
    """Result of a delivered message."""

    recipient: str
    message_id: str
    sent_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EmailTransport(Protocol):
    def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        attachments: list[Attachment] | None = None,
    ) -> EmailResult:
        """
        Deliver one message.

        Raises:
            DeliveryError: If the message could not be delivered.
        """
        ...


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    to: str
    subject: str
    html_body: str
    attachments: list[Attachment]
    message_id: str


@dataclass
class ConsoleTransport:
    """
    Transport that logs messages instead of sending them.

    Used for local runs and tests. Messages are kept in `sent` for inspection.
    """

    sent: list[SentEmail] = field(default_factory=list)
    body_preview_length: int = 100

    def send(self, to, subject, html_body, attachments=None) -> EmailResult:
        if not to or "@" not in to:
            raise DeliveryError(f"Invalid recipient address: {to!r}", recipient=to)

        message_id = make_msgid(domain="eventcheck.local")
        self.sent.append(
            SentEmail(
                to=to,
                subject=subject,
                html_body=html_body,
                attachments=list(attachments or []),
                message_id=message_id,
            )
        )

        preview = html_body[: self.body_preview_length]
        if len(html_body) > self.body_preview_length:
            preview += "..."
        logger.info(
            "EMAIL (console): To=%s, Subject=%s, Attachments=%d, Body=%s, MessageID=%s",
            to,
            subject,
            len(attachments or []),
            preview,
            message_id,
        )
        return EmailResult(recipient=to, message_id=message_id)

    def get_last_email(self) -> SentEmail | None:
        return self.sent[-1] if self.sent else None


class SmtpTransport:
    """Delivers messages through an SMTP server using STARTTLS and login."""

    def __init__(self, smtp: SmtpSettings):
        self.smtp = smtp

    def build_message(self, to, subject, html_body, attachments=None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.smtp.sender or self.smtp.user
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html_body, subtype="html")
        for attachment in attachments or []:
            maintype, _, subtype = attachment.content_type.partition("/")
            message.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return message

    def send(self, to, subject, html_body, attachments=None) -> EmailResult:
        if not self.smtp.is_configured:
            raise DeliveryError("SMTP credentials are not configured.", recipient=to)

        message = self.build_message(to, subject, html_body, attachments)
        try:
            with smtplib.SMTP(
                self.smtp.host, self.smtp.port, timeout=self.smtp.timeout
            ) as server:
                if self.smtp.use_tls:
                    server.starttls()
                server.login(self.smtp.user, self.smtp.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            raise DeliveryError(f"Failed to send email to {to}: {e}", recipient=to) from e

        logger.info("Sent email to %s via %s", to, self.smtp.host)
        return EmailResult(recipient=to, message_id=message["Message-ID"])


def build_transport(kind: str, settings: AppSettings) -> EmailTransport:
    """Create the transport named in the configuration (`console` or `smtp`)."""
    if kind == "console":
        return ConsoleTransport()
    if kind == "smtp":
        return SmtpTransport(settings.smtp)
    raise ValueError(f"Unknown email transport: {kind!r}")
