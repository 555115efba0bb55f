import asyncio

from clinica.config import get_settings
from clinica.services.mail_service import LogMailer, MailService, build_mailer


class SlowMailer:
    async def send(self, **kwargs):
        await asyncio.sleep(1)


class BrokenMailer:
    async def send(self, **kwargs):
        raise ConnectionError("smtp down")


async def test_send_otp_renders_context(mailer):
    service = MailService(mailer)
    assert await service.send_otp(email="a@x.com", name="Alice", otp=123456) is True
    sent = mailer.sent[-1]
    assert sent["to"] == "a@x.com"
    assert sent["name"] == "Alice"
    assert sent["otp"] == "123456"
    assert sent["template"] == "email.html"


async def test_failures_are_reported_not_raised():
    assert await MailService(BrokenMailer()).send_otp(email="a@x.com", name="A", otp=1) is False
    slow = MailService(SlowMailer(), timeout=0.01)
    assert await slow.send_otp(email="a@x.com", name="A", otp=1) is False


def test_log_mailer_without_smtp_settings():
    assert isinstance(build_mailer(get_settings()), LogMailer)
