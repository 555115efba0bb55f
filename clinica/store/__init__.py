from .base import CredentialStore
from .memory import InMemoryCredentialStore
from .records import NotificationRecord, PatientDraft, PatientRecord, UserDraft, UserRecord
