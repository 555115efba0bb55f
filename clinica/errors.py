"""Categorized application errors.

Every error carries an HTTP status class and a human message. They subclass
``HTTPException`` so the app-level handler formats them like any other HTTP
error; services raise them and never recover locally.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, headers: dict | None = None):
        super().__init__(status_code=self.status_code_default, detail=message, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


class NotFoundError(AppError):
    status_code_default = status.HTTP_404_NOT_FOUND


class BadRequestError(AppError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    status_code_default = status.HTTP_401_UNAUTHORIZED


class InvalidTokenError(UnauthorizedError):
    """Bad signature, expired or malformed token."""


class ForbiddenError(AppError):
    status_code_default = status.HTTP_403_FORBIDDEN


class DeliveryFailedError(AppError):
    status_code_default = status.HTTP_501_NOT_IMPLEMENTED
