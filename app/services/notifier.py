"""Outgoing account emails."""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import Settings
from app.errors import NotificationFailure

logger = logging.getLogger("campus_connect")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def render_email(template: str, **context) -> str:
    """Render an email template to HTML."""
    return _env.get_template(template).render(**context)


class Notifier(ABC):
    """Base notifier. Subclasses implement ``deliver``."""

    def __init__(self, site_url: str, reset_expire_minutes: int = 60) -> None:
        self.site_url = site_url.rstrip("/")
        self.reset_expire_minutes = reset_expire_minutes

    @abstractmethod
    def deliver(self, to: str, subject: str, html: str) -> None:
        """Send one rendered message. Raises NotificationFailure."""

    def send(self, to: str, subject: str, template: str, **context) -> None:
        """Render ``template`` and deliver it. Raises NotificationFailure."""
        html = render_email(template, **context)
        self.deliver(to, subject, html)

    def reset_link(self, token: str) -> str:
        return f"{self.site_url}/reset-password.html?token={token}"

    def send_welcome(self, to: str, username: str) -> None:
        self.send(
            to,
            "Welcome to VIT Connect!",
            "welcome.html",
            username=username,
            dashboard_url=f"{self.site_url}/dashboard",
        )

    def send_google_welcome(self, to: str, username: str) -> None:
        self.send(to, "Welcome to VIT Connect!", "google_welcome.html", username=username)

    def send_password_reset(self, to: str, username: str, token: str) -> None:
        self.send(
            to,
            "Reset Your VIT Connect Password",
            "password_reset.html",
            username=username,
            reset_url=self.reset_link(token),
            expire_minutes=self.reset_expire_minutes,
        )


class SmtpNotifier(Notifier):
    """Sends HTML mail through an SMTP relay."""

    def __init__(
        self,
        site_url: str,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        reset_expire_minutes: int = 60,
    ) -> None:
        super().__init__(site_url, reset_expire_minutes)
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def deliver(self, to: str, subject: str, html: str) -> None:
        msg = MIMEText(html, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        try:
            with smtplib.SMTP(self.host, self.port, timeout=15) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(self.sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email to %s failed: %s", to, e)
            raise NotificationFailure() from e

        logger.info("Email sent to %s: %s", to, subject)


class ConsoleNotifier(Notifier):
    """Logs emails instead of sending them. Used in development."""

    def deliver(self, to: str, subject: str, html: str) -> None:
        logger.info("EMAIL to=%s subject=%r (%d bytes, console backend)", to, subject, len(html))

    def send_password_reset(self, to: str, username: str, token: str) -> None:
        super().send_password_reset(to, username, token)
        logger.info("PASSWORD RESET: %s", self.reset_link(token))


def build_notifier(settings: Settings) -> Notifier:
    """Create the notifier selected by MAIL_BACKEND."""
    if settings.MAIL_BACKEND == "smtp":
        return SmtpNotifier(
            site_url=settings.SITE_URL,
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            sender=settings.SMTP_FROM,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            reset_expire_minutes=settings.RESET_TOKEN_EXPIRE_MINUTES,
        )
    if settings.MAIL_BACKEND != "console":
        logger.warning("Unknown MAIL_BACKEND %r, falling back to console", settings.MAIL_BACKEND)
    return ConsoleNotifier(settings.SITE_URL, settings.RESET_TOKEN_EXPIRE_MINUTES)
