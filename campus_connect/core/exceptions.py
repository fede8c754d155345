# campus_connect/core/exceptions.py

from fastapi import status


class CampusError(Exception):
    """
    Base class for every error surfaced to the caller.
    The message is user-visible; status_code is used by the API layer.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return type(self).__name__


class ValidationError(CampusError):
    status_code = status.HTTP_400_BAD_REQUEST


class EmailConventionError(CampusError):
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateRoleError(CampusError):
    status_code = status.HTTP_409_CONFLICT


class ScopeError(CampusError):
    status_code = status.HTTP_403_FORBIDDEN


class ApprovalPendingError(CampusError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(CampusError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthError(CampusError):
    status_code = status.HTTP_401_UNAUTHORIZED


class StorageError(CampusError):
    status_code = status.HTTP_502_BAD_GATEWAY
