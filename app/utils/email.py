import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from app.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body: str, html_body: Optional[str] = None) -> bool:
    """Send email using SMTP. Returns False instead of raising on failure."""
    if not settings.SMTP_USER or not settings.SMTP_PASSWORD:
        logger.info(f"Email not configured. Would send to {to_email}: {subject}")
        return False

    msg = MIMEMultipart()
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    if html_body:
        msg.attach(MIMEText(html_body, "html"))
    else:
        msg.attach(MIMEText(body, "plain"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
            server.starttls()
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending email to {to_email}: {e}")
        return False


def send_application_received_email(email: str, name: str, business_name: str, application_id: str) -> bool:
    subject = f"Seller application received - {application_id}"
    html_body = f"""
    <html>
        <body>
            <h2>Thanks for applying, {name}!</h2>
            <p>We received the seller application for <strong>{business_name}</strong>.</p>
            <p>Your application ID is <strong>{application_id}</strong>. We will email you once it has been reviewed.</p>
        </body>
    </html>
    """
    return send_email(email, subject, "", html_body)


def send_application_approved_email(email: str, name: str, business_name: str) -> bool:
    dashboard_url = f"{settings.FRONTEND_URL}/seller/dashboard"
    subject = "Your seller application has been approved"
    html_body = f"""
    <html>
        <body>
            <h2>Welcome aboard, {name}!</h2>
            <p>The seller application for <strong>{business_name}</strong> has been approved.</p>
            <p><a href="{dashboard_url}">Open your seller dashboard</a></p>
        </body>
    </html>
    """
    return send_email(email, subject, "", html_body)


def send_application_rejected_email(email: str, name: str, business_name: str, reason: str) -> bool:
    reapply_url = f"{settings.FRONTEND_URL}/become-seller"
    subject = "Update on your seller application"
    html_body = f"""
    <html>
        <body>
            <h2>Hello {name},</h2>
            <p>We were unable to approve the seller application for <strong>{business_name}</strong>.</p>
            <p><strong>Reason:</strong> {reason}</p>
            <p>You are welcome to <a href="{reapply_url}">apply again</a>.</p>
        </body>
    </html>
    """
    return send_email(email, subject, "", html_body)


def send_changes_requested_email(email: str, name: str, business_name: str, reason: str, notes: Optional[str] = None) -> bool:
    subject = "Changes required - Seller application"
    notes_html = f"<p><strong>Additional notes:</strong> {notes}</p>" if notes else ""
    html_body = f"""
    <html>
        <body>
            <h2>Hello {name},</h2>
            <p>We reviewed the seller application for <strong>{business_name}</strong> and need a few changes.</p>
            <p><strong>Required changes:</strong> {reason}</p>
            {notes_html}
            <p>Please update your application and resubmit.</p>
        </body>
    </html>
    """
    return send_email(email, subject, "", html_body)
