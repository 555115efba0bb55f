import pytest

from clinica.errors import BadRequestError
from clinica.models.user import Validation
from clinica.store import InMemoryCredentialStore, PatientDraft, UserDraft


def _drafts(email="c@x.com"):
    return (
        UserDraft(
            name="Carol",
            email=email,
            password="hashed",
            slug="carol-1",
            validation=Validation(otp=123456),
        ),
        PatientDraft(name="Carol", email=email, city="Dhaka"),
    )


async def test_create_links_patient_to_user(store):
    user, patient = await store.create_user_and_profile(*_drafts())
    assert patient.user == user.id
    assert patient.slug == user.slug
    assert store.count_users() == 1
    assert store.count_patients() == 1
    assert await store.find_patient_by_user(user.id) == patient


async def test_reads_hide_secret_fields_by_default(store):
    await store.create_user_and_profile(*_drafts())
    plain = await store.find_by_email("c@x.com")
    assert plain.password is None
    assert plain.validation.otp is None
    full = await store.find_by_email("c@x.com", include_secret_fields=True)
    assert full.password == "hashed"
    assert full.validation.otp == 123456


async def test_duplicate_email_rejected(store):
    await store.create_user_and_profile(*_drafts())
    with pytest.raises(BadRequestError):
        await store.create_user_and_profile(*_drafts())
    assert store.count_users() == 1
    assert store.count_patients() == 1


async def test_patient_failure_leaves_no_user():
    class FailingPatientStore(InMemoryCredentialStore):
        def _insert_patient(self, patients, user, draft):
            raise RuntimeError("patient insert failed")

    store = FailingPatientStore()
    with pytest.raises(RuntimeError):
        await store.create_user_and_profile(*_drafts())
    assert store.count_users() == 0
    assert store.count_patients() == 0
    assert await store.find_by_email("c@x.com") is None


async def test_returned_records_are_copies(store):
    await store.create_user_and_profile(*_drafts())
    record = await store.find_by_email("c@x.com", include_secret_fields=True)
    record.validation.isVerified = True
    again = await store.find_by_email("c@x.com", include_secret_fields=True)
    assert again.validation.isVerified is False


async def test_reset_password_writes_hash_and_validation(store):
    await store.create_user_and_profile(*_drafts())
    await store.reset_password("c@x.com", "new-hash", Validation(isVerified=True, otp=0))
    full = await store.find_by_email("c@x.com", include_secret_fields=True)
    assert full.password == "new-hash"
    assert full.validation == Validation(isVerified=True, otp=0, expiry=None)
