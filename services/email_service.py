"""
SMTP delivery for account e-mails.

Sending is blocking, so it runs in the default thread executor. Without
SMTP_HOST configured the message is logged instead of sent.
"""
import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from config import settings

logger = logging.getLogger(__name__)


def build_reset_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"


def _send(to_email: str, subject: str, body: str) -> None:
    msg = MIMEMultipart()
    msg["Subject"] = subject
    msg["From"] = settings.FROM_EMAIL
    msg["To"] = to_email
    msg.attach(MIMEText(body, "plain", "utf-8"))

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)


async def send_email(to_email: str, subject: str, body: str) -> bool:
    if not settings.SMTP_HOST:
        logger.info(f"SMTP not configured, e-mail to {to_email} not sent: {subject}\n{body}")
        return False
    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _send, to_email, subject, body)
        logger.info(f"E-mail sent to {to_email}: {subject}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send e-mail to {to_email}: {e}", exc_info=True)
        return False


async def send_password_reset_email(to_email: str, name: str, token: str) -> bool:
    link = build_reset_link(token)
    body = (
        f"Bună, {name}!\n\n"
        f"Am primit o cerere de resetare a parolei pentru contul tău Eventoria.\n"
        f"Accesează linkul de mai jos pentru a alege o parolă nouă:\n\n"
        f"{link}\n\n"
        f"Linkul expiră în {settings.PASSWORD_RESET_EXPIRE_MINUTES} de minute. "
        f"Dacă nu ai cerut resetarea, ignoră acest mesaj."
    )
    return await send_email(to_email, "Resetarea parolei Eventoria", body)
