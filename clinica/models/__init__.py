# Re-export Beanie documents
from .user import User, Validation
from .patient import Patient
from .notification import Notification
