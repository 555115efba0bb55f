from datetime import datetime, timedelta, timezone

import pytest

from clinica.errors import UnauthorizedError
from clinica.services.otp_service import OtpService, generate_otp_code
from clinica.store import PatientDraft, UserDraft


def test_codes_are_six_digits():
    for _ in range(2000):
        code = generate_otp_code()
        assert 100000 <= code <= 999999


async def _make_user(store):
    user, _ = await store.create_user_and_profile(
        UserDraft(name="Bob", email="b@x.com", password="hash", slug="bob-1"),
        PatientDraft(name="Bob", email="b@x.com"),
    )
    return user


async def test_challenge_expires_three_minutes_after_issue(store):
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    otp = OtpService(store, clock=lambda: now)
    user = await _make_user(store)
    challenge = await otp.issue_challenge(user)
    assert challenge.expiry == now + timedelta(minutes=3)
    assert challenge.isVerified is False
    stored = await store.find_by_email("b@x.com", include_secret_fields=True)
    assert stored.validation == challenge


async def test_new_challenge_supersedes_previous(store, otp, monkeypatch):
    codes = iter([444444, 555555])
    monkeypatch.setattr("clinica.services.otp_service.generate_otp_code", lambda: next(codes))
    user = await _make_user(store)
    first = await otp.issue_challenge(user)
    second = await otp.issue_challenge(user)
    assert (first.otp, second.otp) == (444444, 555555)
    stored = await store.find_by_email("b@x.com", include_secret_fields=True)
    with pytest.raises(UnauthorizedError):
        otp.check(stored, first.otp)
    otp.check(stored, second.otp)


async def test_validate_consumes_code(store, otp):
    user = await _make_user(store)
    challenge = await otp.issue_challenge(user)
    stored = await store.find_by_email("b@x.com", include_secret_fields=True)
    await otp.validate(stored, challenge.otp)
    after = await store.find_by_email("b@x.com", include_secret_fields=True)
    assert after.validation.isVerified is True
    assert after.validation.otp == 0
    assert after.validation.expiry is None


async def test_expired_code_still_validates_by_default(store):
    """Expiry is recorded but not compared unless enforcement is switched on."""
    issued = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    clock = {"now": issued}
    otp = OtpService(store, clock=lambda: clock["now"])
    user = await _make_user(store)
    challenge = await otp.issue_challenge(user)
    clock["now"] = issued + timedelta(hours=1)
    stored = await store.find_by_email("b@x.com", include_secret_fields=True)
    await otp.validate(stored, challenge.otp)


async def test_expired_code_rejected_when_enforced(store):
    issued = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    clock = {"now": issued}
    otp = OtpService(store, enforce_expiry=True, clock=lambda: clock["now"])
    user = await _make_user(store)
    challenge = await otp.issue_challenge(user)
    clock["now"] = issued + timedelta(minutes=4)
    stored = await store.find_by_email("b@x.com", include_secret_fields=True)
    with pytest.raises(UnauthorizedError, match="expired"):
        otp.check(stored, challenge.otp)
