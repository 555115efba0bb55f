from datetime import datetime, timezone

from beanie import PydanticObjectId as OID
from beanie.operators import Set
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError

from clinica.errors import BadRequestError
from clinica.models import Notification, Patient, User
from clinica.models.user import Validation
from clinica.store.base import CredentialStore
from clinica.store.records import (
    NotificationRecord,
    PatientDraft,
    PatientRecord,
    UserDraft,
    UserRecord,
)
from clinica.utils.logger import get_logger

logger = get_logger("store.mongo")


def _user_record(doc: User, include_secret_fields: bool = False) -> UserRecord:
    record = UserRecord(id=str(doc.id), **doc.model_dump(exclude={"id", "revision_id", "updated_at"}))
    return record if include_secret_fields else record.without_secrets()


def _patient_record(doc: Patient) -> PatientRecord:
    data = doc.model_dump(exclude={"id", "revision_id", "user"})
    return PatientRecord(id=str(doc.id), user=str(doc.user), **data)


class MongoCredentialStore(CredentialStore):
    """Beanie-backed store. Requires a replica set for transactions."""

    def __init__(self, client: AsyncIOMotorClient):
        self._client = client

    async def create_user_and_profile(
        self, user: UserDraft, profile: PatientDraft
    ) -> tuple[UserRecord, PatientRecord]:
        try:
            async with await self._client.start_session() as session:
                # Leaving the block with an exception aborts the transaction
                async with session.start_transaction():
                    user_doc = User(**user.model_dump())
                    await user_doc.insert(session=session)
                    patient_doc = Patient(
                        **profile.model_dump(), user=user_doc.id, slug=user_doc.slug
                    )
                    await patient_doc.insert(session=session)
        except DuplicateKeyError as e:
            logger.info(f"Duplicate key on registration for {user.email}: {e}")
            raise BadRequestError("Email already exists") from e
        return _user_record(user_doc), _patient_record(patient_doc)

    async def find_by_email(
        self, email: str, include_secret_fields: bool = False
    ) -> UserRecord | None:
        doc = await User.find_one(User.email == email)
        if not doc:
            return None
        return _user_record(doc, include_secret_fields)

    async def find_patient_by_user(self, user_id: str) -> PatientRecord | None:
        doc = await Patient.find_one(Patient.user == OID(user_id))
        return _patient_record(doc) if doc else None

    async def _set(self, email: str, fields: dict) -> None:
        fields["updated_at"] = datetime.now(timezone.utc)
        await User.find_one(User.email == email).update(Set(fields))

    async def update_validation(self, email: str, validation: Validation) -> None:
        await self._set(email, {"validation": validation.model_dump()})

    async def update_password(self, email: str, password_hash: str) -> None:
        await self._set(email, {"password": password_hash})

    async def reset_password(
        self, email: str, password_hash: str, validation: Validation
    ) -> None:
        await self._set(
            email, {"password": password_hash, "validation": validation.model_dump()}
        )

    async def update_fcm_token(self, email: str, token: str) -> UserRecord | None:
        await self._set(email, {"fcmToken": token})
        return await self.find_by_email(email)

    async def add_notification(self, record: NotificationRecord) -> NotificationRecord:
        doc = Notification(
            fcmToken=record.fcmToken,
            user=OID(record.user) if record.user else None,
            type=record.type,
            title=record.title,
            message=record.message,
            isRead=record.isRead,
            link=record.link,
            date=record.date,
        )
        await doc.insert()
        return record.model_copy(update={"id": str(doc.id)})

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:
            return False
