import smtplib
import os
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from campus_connect.core.config import settings
from campus_connect.core.constants import DEPARTMENT_LABELS, Department

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "email")

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def get_template(template_name):
    return _env.get_template(template_name)


# Helper to send email via SMTP
def send_email_via_smtp(to_email, subject, html_content):
    # Only HOST is required. User/Pass are optional (for Mailpit)
    if not settings.SMTP_HOST:
        logger.warning("SMTP Host not configured. Skipping email.")
        return

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_content, "html"))

    logger.debug(f"Connecting to SMTP: {settings.SMTP_HOST}:{settings.SMTP_PORT}")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.ehlo()

            # TLS only on submission ports; Mailpit (1025) runs plain
            if settings.SMTP_PORT in [587, 2525]:
                server.starttls()
                server.ehlo()

            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)

            server.sendmail(settings.EMAILS_FROM_EMAIL, to_email, msg.as_string())
    except (smtplib.SMTPException, OSError):
        # Runs as a background task after the response is sent
        logger.exception(f"Failed to send email to {to_email}")
        return

    logger.success(f"Email sent successfully to {to_email}")


def _department_label(code) -> str:
    try:
        return DEPARTMENT_LABELS[Department(code)]
    except ValueError:
        return str(code)


# ---------------------------------------------------------
# 1. EMAIL VERIFICATION (sent at sign-up)
# ---------------------------------------------------------
def send_verification_email(data: dict):
    """
    data requires: name, email, role, department, token
    """
    template = get_template("verify_email.html")
    html_content = template.render(
        name=data.get("name"),
        role=data.get("role"),
        department_name=_department_label(data.get("department")),
        needs_approval=data.get("role") != "super_admin",
        verify_url=f"{settings.API_URL}/api/auth/verify-email?token={data.get('token')}",
    )
    send_email_via_smtp(data.get("email"), "Confirm your SPC Campus Connect account", html_content)


# ---------------------------------------------------------
# 2. ACCOUNT APPROVED
# ---------------------------------------------------------
def send_account_approved_email(data: dict):
    """
    data requires: name, email, department, approver_name
    """
    template = get_template("account_approved.html")
    html_content = template.render(
        name=data.get("name"),
        department_name=_department_label(data.get("department")),
        approver_name=data.get("approver_name"),
        approval_date=datetime.now().strftime("%d-%m-%Y"),
        login_url=f"{settings.FRONTEND_URL}/",
    )
    send_email_via_smtp(data.get("email"), "Your SPC Campus Connect account is approved", html_content)
