"""Error taxonomy for document sync

Open review comments are not an error; they are the ``OPEN_COMMENTS``
outcome of a push.
"""

from typing import Optional


class DocSyncError(Exception):
    """Base class for all sync failures"""

    #: Short text shown to the user by the notification sink
    user_message = "Document sync failed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class ConfigurationError(DocSyncError):
    """Missing or malformed credentials, token blob or settings file"""

    user_message = "Google Docs sync is not configured correctly. Check your settings."


class AuthInProgressError(DocSyncError):
    """Another authorization flow is already pending"""

    user_message = "Already authenticating, complete authorization."


class AuthFailedError(DocSyncError):
    """The authorization round-trip was denied, timed out or errored"""

    user_message = "Authentication failed. Try again."


class RemoteStoreError(DocSyncError):
    """Failure reported by the remote document store"""

    user_message = "Google Docs request failed."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
