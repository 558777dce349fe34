import logging
import smtplib
from email.message import EmailMessage
from functools import lru_cache

from config import SMTP_HOST, SMTP_PORT, SMTP_USERNAME, SMTP_PASSWORD

logger = logging.getLogger(__name__)

INSTAGRAM_URL = "https://www.instagram.com/wegrowparenting"
YOUTUBE_URL = "https://youtube.com/@wegrowparenting"

VERIFICATION_SUBJECT = "Welcome to We Grow Family! 💚"
RESET_SUBJECT = "Reset Your Password - We Grow"

VERIFICATION_TEMPLATE = """
<p>Dear Family Member,</p>
<p>Congratulations on starting your journey into parenthood! We are here to support you at every step,
with expert guidance and a warm community. Verify your email below to start exploring.</p>
<p><a href="{link}">🔗 Verify Your Email</a></p>
<p>💡 Follow us on <a href="{instagram}">Instagram</a> and <a href="{youtube}">YouTube</a> for daily parenting tips &amp; support!</p>
<p>Happy Parenting! 🌿💚</p>
"""

RESET_TEMPLATE = """
<p>Dear We Grow Family Member,</p>
<p>Passwords slip our minds sometimes. You can reset yours by clicking the link below.
The link expires in {expires} minutes.</p>
<p><a href="{link}">🔗 Reset Your Password</a></p>
<p>If you did not ask for a reset, you can ignore this email.</p>
<p>💡 Stay connected with us on <a href="{instagram}">Instagram</a> and <a href="{youtube}">YouTube</a>!</p>
<p>Warm regards,<br/>We Grow Team 🌿💚</p>
"""


class MailError(Exception):
    pass


def verification_email(link: str) -> str:
    return VERIFICATION_TEMPLATE.format(link=link, instagram=INSTAGRAM_URL, youtube=YOUTUBE_URL)


def reset_email(link: str, expires: int) -> str:
    return RESET_TEMPLATE.format(link=link, expires=expires, instagram=INSTAGRAM_URL, youtube=YOUTUBE_URL)


class Mailer:
    def __init__(self, host: str, port: int, username: str, password: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password

    def send(self, to: str, subject: str, html_body: str):
        """Send an HTML email over STARTTLS"""
        msg = EmailMessage()
        msg["From"] = self.username
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(html_body, subtype="html")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
                smtp.starttls()
                smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"failed to send email to {to}: {e}") from e
        logger.info("Email '%s' sent to %s", subject, to)


@lru_cache()
def get_mailer() -> Mailer:
    return Mailer(SMTP_HOST, SMTP_PORT, SMTP_USERNAME, SMTP_PASSWORD)
