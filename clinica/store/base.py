from abc import ABC, abstractmethod

from clinica.models.user import Validation
from clinica.store.records import (
    NotificationRecord,
    PatientDraft,
    PatientRecord,
    UserDraft,
    UserRecord,
)


class CredentialStore(ABC):
    """Persistence for users, patient profiles and the notification log.

    Implementations must keep exactly one user per email and must create a
    user and its patient profile atomically.
    """

    @abstractmethod
    async def create_user_and_profile(
        self, user: UserDraft, profile: PatientDraft
    ) -> tuple[UserRecord, PatientRecord]:
        """Insert both records or neither. Duplicate email -> BadRequestError."""

    @abstractmethod
    async def find_by_email(
        self, email: str, include_secret_fields: bool = False
    ) -> UserRecord | None:
        """Point lookup; password and OTP are omitted unless requested."""

    @abstractmethod
    async def find_patient_by_user(self, user_id: str) -> PatientRecord | None:
        ...

    @abstractmethod
    async def update_validation(self, email: str, validation: Validation) -> None:
        ...

    @abstractmethod
    async def update_password(self, email: str, password_hash: str) -> None:
        ...

    @abstractmethod
    async def reset_password(
        self, email: str, password_hash: str, validation: Validation
    ) -> None:
        """Write the new hash and the validation block in a single update."""

    @abstractmethod
    async def update_fcm_token(self, email: str, token: str) -> UserRecord | None:
        ...

    @abstractmethod
    async def add_notification(self, record: NotificationRecord) -> NotificationRecord:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...
