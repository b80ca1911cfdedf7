import logging
import smtplib
import ssl
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import List, Optional
from app.core.config import settings
from app.services.credentials import credential_url, qr_png_bytes
from app.services.delivery import DeliveryResult

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self):
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.timeout = settings.EMAIL_TIMEOUT

    def send_email(
        self,
        to_emails: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        inline_png: Optional[bytes] = None,
    ) -> DeliveryResult:
        """Send an email over SMTP with STARTTLS"""
        message_id = make_msgid(domain=self.from_email.split("@")[-1])

        if not settings.SEND_EMAILS:
            logger.info(f"Email sending disabled. Would send: {subject} to {to_emails}")
            return DeliveryResult(success=True, message_id=message_id)

        try:
            message = MIMEMultipart("related")
            message["Subject"] = subject
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = ", ".join(to_emails)
            message["Message-ID"] = message_id

            alternative = MIMEMultipart("alternative")
            if text_content:
                alternative.attach(MIMEText(text_content, "plain"))
            alternative.attach(MIMEText(html_content, "html"))
            message.attach(alternative)

            if inline_png:
                image = MIMEImage(inline_png, _subtype="png")
                image.add_header("Content-ID", "<entry-pass>")
                image.add_header("Content-Disposition", "inline", filename="entry-pass.png")
                message.attach(image)

            context = ssl.create_default_context()
            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=self.timeout) as server:
                server.starttls(context=context)
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.from_email, to_emails, message.as_string())

            logger.info(f"Email sent successfully to {to_emails}")
            return DeliveryResult(success=True, message_id=message_id)

        except Exception as e:
            logger.error(f"Failed to send email to {to_emails}: {str(e)}")
            return DeliveryResult(success=False, error=str(e))

    def send_confirmation_email(
        self,
        to_email: str,
        student_name: str,
        event_title: str,
        event_date: str,
        event_venue: str,
        token: str,
    ) -> DeliveryResult:
        """Send the registration confirmation carrying the entry pass"""
        pass_url = credential_url(token)
        subject = f"You're in! Your entry pass for {event_title}"

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <title>{subject}</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }}
                .container {{ max-width: 600px; margin: 0 auto; background-color: white; padding: 30px; border-radius: 10px; }}
                .title {{ color: #1f2937; font-size: 20px; margin: 20px 0; }}
                .details {{ background-color: #f9fafb; padding: 15px; border-radius: 6px; margin: 20px 0; }}
                .button {{ display: inline-block; background-color: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; }}
            </style>
        </head>
        <body>
            <div class="container">
                <h2 class="title">Registration confirmed</h2>
                <p>Hi {student_name},</p>
                <p>You are registered for <strong>{event_title}</strong>.</p>
                <div class="details">
                    <p><strong>Date:</strong> {event_date}</p>
                    <p><strong>Venue:</strong> {event_venue}</p>
                </div>
                <p>Show this QR code at the entrance:</p>
                <p><img src="cid:entry-pass" alt="Entry pass" width="240" height="240"></p>
                <p><a class="button" href="{pass_url}">Open your pass</a></p>
                <p>See you there!</p>
            </div>
        </body>
        </html>
        """

        text_content = f"""
        Registration confirmed

        Hi {student_name},

        You are registered for {event_title}.
        Date: {event_date}
        Venue: {event_venue}

        Your entry pass: {pass_url}
        """

        return self.send_email([to_email], subject, html_content, text_content, inline_png=qr_png_bytes(token))


email_service = EmailService()
