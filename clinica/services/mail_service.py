import asyncio
from pathlib import Path
from typing import Protocol

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from clinica.config import Settings
from clinica.utils.logger import get_logger

logger = get_logger("mail")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

VERIFY_TEMPLATE = "verify.html"
OTP_TEMPLATE = "email.html"


class Mailer(Protocol):
    async def send(self, *, to: str, subject: str, template: str, context: dict) -> None:
        ...


class FastMailMailer:
    """SMTP delivery through fastapi-mail with Jinja2 HTML templates."""

    def __init__(self, conf: ConnectionConfig):
        self.fm = FastMail(conf)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FastMailMailer":
        conf = ConnectionConfig(
            MAIL_USERNAME=settings.MAIL_USERNAME or "",
            MAIL_PASSWORD=settings.MAIL_PASSWORD or "",
            MAIL_FROM=settings.MAIL_FROM,
            MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
            MAIL_PORT=settings.MAIL_PORT,
            MAIL_SERVER=settings.MAIL_SERVER,
            MAIL_STARTTLS=settings.MAIL_STARTTLS,
            MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
            USE_CREDENTIALS=bool(settings.MAIL_USERNAME),
            TEMPLATE_FOLDER=Path(settings.MAIL_TEMPLATE_FOLDER or TEMPLATE_DIR),
        )
        return cls(conf)

    async def send(self, *, to: str, subject: str, template: str, context: dict) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[to],
            template_body=context,
            subtype=MessageType.html,
        )
        await self.fm.send_message(message, template_name=template)


class LogMailer:
    """Dev mailer: writes the message to the log instead of sending it."""

    async def send(self, *, to: str, subject: str, template: str, context: dict) -> None:
        logger.info(f"[OTP EMAIL] {to} ({template}) => {context}")


def build_mailer(settings: Settings) -> Mailer:
    if settings.MAIL_SERVER and settings.MAIL_FROM:
        return FastMailMailer.from_settings(settings)
    logger.warning("MAIL_SERVER not set; OTP emails are written to the log only")
    return LogMailer()


class MailService:
    """Best-effort OTP email delivery.

    Failures and timeouts are logged and reported as False; they never
    propagate into the calling workflow.
    """

    def __init__(self, mailer: Mailer, timeout: float = 10.0):
        self.mailer = mailer
        self.timeout = timeout

    async def send_otp(
        self,
        *,
        email: str,
        name: str,
        otp: int,
        template: str = OTP_TEMPLATE,
        subject: str = "Your verification code from Clinica",
    ) -> bool:
        try:
            await asyncio.wait_for(
                self.mailer.send(
                    to=email,
                    subject=subject,
                    template=template,
                    context={"name": name, "otp": str(otp)},
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"OTP email to {email} timed out after {self.timeout}s")
            return False
        except Exception as e:
            logger.error(f"OTP email to {email} failed: {e}", exc_info=True)
            return False
        logger.info(f"OTP email sent to {email}")
        return True
