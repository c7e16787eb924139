"""Error taxonomy shared by the ActivityPub components.

Every error that may reach an HTTP caller derives from ``ActivityPubError``
and carries the status code it maps to. ``RemoteDeliveryError`` never reaches
a caller: the inbox absorbs it and logs it.
"""

class ActivityPubError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ClientInputError(ActivityPubError):
    """Malformed resource query or request body."""
    status_code = 400

class NotFoundError(ActivityPubError):
    """Unknown account or post."""
    status_code = 404

class ConfigurationError(ActivityPubError):
    """Local key material is missing; the account was never provisioned."""
    status_code = 500

class KeyAlreadyExistsError(ActivityPubError):
    """A key row already exists for the owner."""
    status_code = 409

class RemoteDeliveryError(Exception):
    """Network failure or non-2xx answer from a remote server."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
