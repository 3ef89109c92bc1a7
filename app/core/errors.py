"""
Error taxonomy for the record store gateway and its HTTP client.

Store errors are raised server-side and end up in a failure envelope.
Gateway errors are raised client-side and carry a user-facing message plus a
remediation hint for the UI (open settings, retry, or nothing).
"""

REMEDIATION_OPEN_SETTINGS = "open_settings"
REMEDIATION_RETRY = "retry"


class WeightTrackerError(Exception):
    pass


# ---------- store side ----------

class StoreError(WeightTrackerError):
    pass


class DuplicateUserError(StoreError):
    def __init__(self, user_name: str):
        super().__init__("User already exists")
        self.user_name = user_name


class UserNotFoundError(StoreError):
    def __init__(self, user_name: str):
        super().__init__("User not found")
        self.user_name = user_name


class EntryNotFoundError(StoreError):
    def __init__(self, user_name: str, date: str):
        super().__init__("Entry not found")
        self.user_name = user_name
        self.date = date


class StoreBusyError(StoreError):
    def __init__(self, timeout: float):
        super().__init__(f"Store is busy (lock not acquired within {timeout:g}s), try again")
        self.timeout = timeout


class InvalidActionError(StoreError):
    pass


# ---------- client side ----------

class GatewayError(WeightTrackerError):
    remediation: str | None = None

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class ConfigurationError(GatewayError):
    remediation = REMEDIATION_OPEN_SETTINGS


class AuthError(GatewayError):
    remediation = REMEDIATION_OPEN_SETTINGS


class TransportError(GatewayError):
    remediation = REMEDIATION_RETRY


class LogicalError(GatewayError):
    """The backend answered with success=false (duplicate user, missing entry, ...)."""
