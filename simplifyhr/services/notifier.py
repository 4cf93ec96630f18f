"""
Outgoing email for offer letters (plain SMTP with STARTTLS).
"""

import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from simplifyhr.core.config import get_settings

logger = logging.getLogger(__name__)


def build_offer_email(candidate_first_name: str, job_title: str) -> str:
    title = html.escape(job_title or "")
    return (
        "<h2>Job Offer</h2>\n"
        f"<p>Dear {html.escape(candidate_first_name or '')},</p>\n"
        f"<p>We are pleased to offer you the position of {title}.</p>\n"
        "<p>Please review the attached offer letter and respond within 5 business days.</p>"
    )


def send_offer_email(to_email: str, candidate_first_name: str, job_title: str, offer_html: str = "") -> bool:
    """
    Email the offer to the candidate.

    Returns False (and logs) when SMTP is disabled or not configured;
    SMTP errors propagate to the caller.
    """
    settings = get_settings()
    if not settings.smtp_enabled:
        logger.info("SMTP disabled, offer email to %s not sent", to_email)
        return False
    if not settings.smtp_user or not to_email:
        logger.warning("SMTP credentials or recipient not configured for offer email")
        return False

    msg = MIMEMultipart()
    msg["From"] = settings.smtp_sender or settings.smtp_user
    msg["To"] = to_email
    msg["Subject"] = f"Job Offer - {job_title}"

    body = build_offer_email(candidate_first_name, job_title)
    if offer_html:
        body += "\n<hr>\n" + offer_html
    msg.attach(MIMEText(body, "html"))

    with smtplib.SMTP(settings.smtp_server, settings.smtp_port) as server:
        server.starttls()
        server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(msg)

    logger.info("Offer email sent to %s", to_email)
    return True
