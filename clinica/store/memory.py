import asyncio
from datetime import datetime, timezone
from os import urandom

from clinica.errors import BadRequestError
from clinica.models.user import Validation
from clinica.store.base import CredentialStore
from clinica.store.records import (
    NotificationRecord,
    PatientDraft,
    PatientRecord,
    UserDraft,
    UserRecord,
)


def _new_id() -> str:
    # Same shape as a Mongo ObjectId
    return urandom(12).hex()


class InMemoryCredentialStore(CredentialStore):
    """Dict-backed store for tests and `STORE_BACKEND=memory`.

    Registration stages both inserts on copies of the tables and swaps them
    in only when every step succeeded.
    """

    def __init__(self):
        self._users: dict[str, UserRecord] = {}
        self._patients: dict[str, PatientRecord] = {}
        self.notifications: list[NotificationRecord] = []
        self._lock = asyncio.Lock()

    async def create_user_and_profile(
        self, user: UserDraft, profile: PatientDraft
    ) -> tuple[UserRecord, PatientRecord]:
        async with self._lock:
            users = dict(self._users)
            patients = dict(self._patients)
            user_rec = self._insert_user(users, user)
            patient_rec = self._insert_patient(patients, user_rec, profile)
            self._users, self._patients = users, patients
        return user_rec.without_secrets(), patient_rec.model_copy()

    def _insert_user(self, users: dict[str, UserRecord], draft: UserDraft) -> UserRecord:
        if draft.email in users:
            raise BadRequestError("Email already exists")
        record = UserRecord(
            id=_new_id(),
            created_at=datetime.now(timezone.utc),
            **draft.model_dump(),
        )
        users[record.email] = record
        return record

    def _insert_patient(
        self, patients: dict[str, PatientRecord], user: UserRecord, draft: PatientDraft
    ) -> PatientRecord:
        record = PatientRecord(
            id=_new_id(),
            user=user.id,
            slug=user.slug,
            created_at=datetime.now(timezone.utc),
            **draft.model_dump(),
        )
        patients[user.id] = record
        return record

    async def find_by_email(
        self, email: str, include_secret_fields: bool = False
    ) -> UserRecord | None:
        record = self._users.get(email)
        if record is None:
            return None
        if include_secret_fields:
            return record.model_copy(deep=True)
        return record.without_secrets()

    async def find_patient_by_user(self, user_id: str) -> PatientRecord | None:
        record = self._patients.get(user_id)
        return record.model_copy() if record else None

    def _replace(self, email: str, **changes) -> UserRecord | None:
        record = self._users.get(email)
        if record is None:
            return None
        updated = record.model_copy(update=changes)
        self._users[email] = updated
        return updated

    async def update_validation(self, email: str, validation: Validation) -> None:
        self._replace(email, validation=validation.model_copy())

    async def update_password(self, email: str, password_hash: str) -> None:
        self._replace(email, password=password_hash)

    async def reset_password(
        self, email: str, password_hash: str, validation: Validation
    ) -> None:
        self._replace(email, password=password_hash, validation=validation.model_copy())

    async def update_fcm_token(self, email: str, token: str) -> UserRecord | None:
        updated = self._replace(email, fcmToken=token)
        return updated.without_secrets() if updated else None

    async def add_notification(self, record: NotificationRecord) -> NotificationRecord:
        stored = record.model_copy(update={"id": _new_id()})
        self.notifications.append(stored)
        return stored

    async def ping(self) -> bool:
        return True

    # Test helpers
    def put_user(self, record: UserRecord) -> None:
        self._users[record.email] = record

    def count_users(self) -> int:
        return len(self._users)

    def count_patients(self) -> int:
        return len(self._patients)
