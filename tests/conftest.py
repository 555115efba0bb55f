"""
Test configuration for the Clinica auth backend.

Runs against the in-memory credential store with a recording mailer, so no
MongoDB, SMTP server or Firebase project is needed.
"""
import os
import tempfile

os.environ["STORE_BACKEND"] = "memory"
os.environ["BCRYPT_SALT_ROUNDS"] = "4"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="clinica-logs-")
os.environ.pop("FIREBASE_CREDENTIALS_FILE", None)
os.environ.pop("MAIL_SERVER", None)

import pytest
from fastapi.testclient import TestClient

from clinica.config import get_settings
from clinica.deps import get_mail_service
from clinica.main import app
from clinica.security import TokenService
from clinica.services.auth_service import AuthService
from clinica.services.mail_service import MailService
from clinica.services.otp_service import OtpService
from clinica.store import InMemoryCredentialStore


class RecordingMailer:
    def __init__(self):
        self.sent = []

    async def send(self, *, to, subject, template, context):
        self.sent.append({"to": to, "subject": subject, "template": template, **context})

    def last_otp(self, email: str) -> int:
        for message in reversed(self.sent):
            if message["to"] == email:
                return int(message["otp"])
        raise AssertionError(f"no email sent to {email}")


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def tokens():
    return TokenService.from_settings(get_settings())


@pytest.fixture
def otp(store):
    return OtpService(store, ttl_seconds=180)


@pytest.fixture
def auth(store, tokens, otp, mailer):
    return AuthService(store, tokens, otp, MailService(mailer, timeout=1.0))


@pytest.fixture
async def verified_user(auth, mailer):
    """A registered and verified patient: ("a@x.com", "pw1234")."""
    result = await auth.register(name="Alice Smith", email="a@x.com", password="pw1234")
    await auth.verify_account(result.token, mailer.last_otp("a@x.com"))
    return "a@x.com", "pw1234"


@pytest.fixture
def client(store, mailer):
    """
    Test client wired to the per-test store and recording mailer.
    """
    app.dependency_overrides[get_mail_service] = lambda: MailService(mailer, timeout=1.0)
    with TestClient(app) as c:
        app.state.store = store
        yield c
    app.dependency_overrides = {}
