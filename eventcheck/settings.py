from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_EMAIL_BODY = (
    "<p>Hi <strong>{{name}}</strong>,</p>"
    "<p>Thank you for registering for <strong>{{event}}</strong>!</p>"
    "<p>Attached is your official PDF ticket. Please present the QR code at the entrance.</p>"
    "<p>Invoice ID: {{invoiceId}}<br>Amount Paid: {{amount}}</p>"
    "<p>See you there!</p>"
)


class _SettingsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PdfSettings(_SettingsModel):
    """Branding for the PDF ticket attached to ticket emails."""

    enabled: bool = Field(True, description="Attach a PDF ticket to ticket emails.")
    logo_url: str = Field("", description="Logo shown on the ticket (informational).")
    organization_name: str = Field("Event Organizers Inc.")
    organization_info: str = Field(
        "123 Event Street, City, Country\nTax ID: 12-3456789",
        description="Address, tax id and similar lines, newline separated.",
    )
    primary_color: str = Field("#4F46E5", description="Ticket header color.")
    footer_text: str = Field(
        "This ticket is non-transferable. Please bring a valid ID."
    )


class SmtpSettings(_SettingsModel):
    host: str = Field("smtp.example.com", description="SMTP server host.")
    port: int = Field(587, description="SMTP server port.")
    user: str = Field("", description="SMTP login; empty disables SMTP delivery.")
    password: str = Field("", description="SMTP password.")
    sender: str = Field("", description="From address; defaults to the SMTP user.")
    use_tls: bool = Field(True, description="Upgrade the connection with STARTTLS.")
    timeout: float = Field(30.0, description="Socket timeout in seconds.")

    @property
    def is_configured(self) -> bool:
        return bool(self.user and self.password)


class AppSettings(_SettingsModel):
    """
    Settings supplied by the settings collaborator.

    Apart from the SMTP block, these values are opaque to the console and only passed
    through to the email renderer and the ticket PDF.
    """

    currency: str = Field("USD")
    ticket_price: float = Field(0, description="Amount shown in ticket emails.")
    email_header_logo: str = Field("", description="Logo URL for the email header.")
    email_header_color: str = Field("#f8fafc")
    email_footer_color: str = Field("#f8fafc")
    email_subject: str = Field("Your Event Ticket & Invoice")
    email_body_template: str = Field(
        DEFAULT_EMAIL_BODY, description="HTML body with {{placeholders}}."
    )
    email_footer_text: str = Field(
        "© Event Organizers Inc. All rights reserved."
    )
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    pdf_settings: PdfSettings = Field(default_factory=PdfSettings)
