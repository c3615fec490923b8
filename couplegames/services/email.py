"""Email service for sending transactional emails."""

import logging
import os
import smtplib
import socket
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)


class EmailService:
    """
    Sends transactional email over SMTP.

    When SMTP credentials are missing (local development, tests) the
    message is logged instead of sent and the call reports success, so
    flows that depend on email keep working.
    """

    def __init__(self):
        self.smtp_host = os.getenv('SMTP_HOST', 'smtp.gmail.com')
        self.smtp_port = int(os.getenv('SMTP_PORT', '587'))
        self.smtp_user = os.getenv('SMTP_USER', '')
        self.smtp_password = os.getenv('SMTP_PASSWORD', '')
        self.from_email = os.getenv('FROM_EMAIL', self.smtp_user)
        self.from_name = os.getenv('FROM_NAME', 'משחקי זוגיות')
        self.frontend_url = os.getenv('FRONTEND_URL', 'http://localhost:3000')
        self.smtp_timeout = int(os.getenv('SMTP_TIMEOUT', '10'))

    @property
    def is_configured(self):
        return bool(self.smtp_user and self.smtp_password)

    def _create_connection(self):
        """Create SMTP connection with timeout."""
        server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout)
        server.starttls()
        server.login(self.smtp_user, self.smtp_password)
        return server

    def send_email(self, to_email, subject, html_content, text_content=None, debug_info=None):
        """
        Send an email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML body content
            text_content: Plain text fallback (optional)
            debug_info: Extra info logged in dev mode (optional)

        Returns:
            bool: True if sent (or logged in dev mode), False otherwise
        """
        if not self.is_configured:
            logger.info(
                "SMTP not configured, not sending. To: %s Subject: %s%s",
                to_email, subject, f"\n{debug_info}" if debug_info else '',
            )
            return True

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = to_email
        if text_content:
            msg.attach(MIMEText(text_content, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_content, 'html', 'utf-8'))

        try:
            logger.debug("Connecting to SMTP %s:%s", self.smtp_host, self.smtp_port)
            server = self._create_connection()
            server.sendmail(self.from_email, to_email, msg.as_string())
            server.quit()
        except socket.timeout:
            logger.error("SMTP connection timed out after %ss", self.smtp_timeout)
            return False
        except smtplib.SMTPAuthenticationError as e:
            logger.error("SMTP authentication failed for %s: %s", self.smtp_user, e)
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to_email, e)
            return False

        logger.info("Sent email to %s", to_email)
        return True

    def send_verification_email(self, to_email, name, token):
        """
        Send the address-verification link to a newly registered user.

        Args:
            to_email: User's email address
            name: User's display name for the greeting
            token: The verification token

        Returns:
            bool: True if sent successfully
        """
        verify_link = f"{self.frontend_url}/auth/verify-email?token={token}"
        subject = "אימות כתובת המייל - משחקי זוגיות"
        debug_info = f"EMAIL VERIFICATION LINK:\n{verify_link}"

        html_content = f"""
        <!DOCTYPE html>
        <html dir="rtl" lang="he">
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background: #7C3AED; padding: 30px; border-radius: 10px 10px 0 0; text-align: center;">
                <h1 style="color: white; margin: 0; font-size: 24px;">ברוכים הבאים!</h1>
            </div>
            <div style="background: #ffffff; padding: 30px; border: 1px solid #e5e7eb; border-top: none; border-radius: 0 0 10px 10px;">
                <p style="font-size: 16px;">שלום <strong>{name}</strong>,</p>
                <p style="font-size: 16px;">כדי להשלים את ההרשמה יש לאמת את כתובת המייל:</p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{verify_link}" style="background: #7C3AED; color: white; padding: 14px 30px; text-decoration: none; border-radius: 8px; font-weight: 600; display: inline-block;">אימות כתובת מייל</a>
                </div>
                <p style="font-size: 14px; color: #6b7280;">הקישור בתוקף ל-24 שעות.</p>
                <p style="font-size: 12px; color: #9ca3af;">אם הכפתור לא עובד, ניתן להעתיק את הקישור לדפדפן:</p>
                <p style="font-size: 12px; color: #7C3AED; word-break: break-all;">{verify_link}</p>
            </div>
        </body>
        </html>
        """

        text_content = f"""
        שלום {name},

        כדי להשלים את ההרשמה יש לאמת את כתובת המייל בקישור הבא:
        {verify_link}

        הקישור בתוקף ל-24 שעות.
        """

        return self.send_email(to_email, subject, html_content, text_content, debug_info)


# Singleton instance
email_service = EmailService()
