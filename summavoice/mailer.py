# summavoice/mailer.py
import logging
import secrets
import smtplib
from email.message import EmailMessage

from summavoice import config

logger = logging.getLogger(__name__)


def generate_code() -> str:
    """Six-digit one-time code."""
    return f"{secrets.randbelow(900000) + 100000}"


def send_email(to: str, subject: str, html: str) -> None:
    if config.EMAIL_BACKEND != "smtp":
        logger.info("Email to %s (%s):\n%s", to, subject, html)
        return

    message = EmailMessage()
    message["From"] = config.SMTP_FROM
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html, subtype="html")

    with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30) as server:
        if config.SMTP_USE_TLS:
            server.starttls()
        if config.SMTP_USER:
            server.login(config.SMTP_USER, config.SMTP_PASS)
        server.send_message(message)
    logger.info("Email sent to %s: %s", to, subject)


def _code_block(code):
    return (
        '<div style="background-color:#f4f4f4;padding:15px;text-align:center;'
        f'font-size:24px;letter-spacing:5px;font-weight:bold;">{code}</div>'
    )


def send_verification_email(email: str, code: str) -> None:
    html = (
        '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;">'
        "<h2>Email Verification</h2>"
        "<p>Thank you for registering with SummaVoice. Please use the following code to verify your email address:</p>"
        f"{_code_block(code)}"
        "<p>This code will expire in 1 hour.</p>"
        "<p>If you did not create an account, please ignore this email.</p>"
        "</div>"
    )
    send_email(email, "Verify Your Email Address", html)


def send_password_reset_email(email: str, code: str) -> None:
    html = (
        '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;">'
        "<h2>Password Reset</h2>"
        "<p>You requested a password reset. Use the following code to set a new password:</p>"
        f"{_code_block(code)}"
        "<p>This code will expire in 30 minutes.</p>"
        "<p>If you did not request a password reset, please ignore this email.</p>"
        "</div>"
    )
    send_email(email, "Password Reset Code", html)
