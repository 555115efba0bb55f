from enum import Enum


class Role(str, Enum):
    """System roles for RBAC."""
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


class NotificationType(str, Enum):
    CONNECTION = "connection"
    GLUCOSE = "glucose"
    BLOOD_PRESSURE = "bloodPressure"
    WEIGHT = "weight"
    MESSAGE = "message"


REFRESH_COOKIE_NAME = "refreshToken"
REFRESH_COOKIE_MAX_AGE = 60 * 60 * 24 * 365  # 1 year, seconds

OTP_MIN = 100000
OTP_MAX = 999999

# FCM multicast limit per request
MAX_MULTICAST_TOKENS = 500
