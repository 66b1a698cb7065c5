"""Exception hierarchy for the duplicate guard.

Fingerprinting and digesting never raise per request; only the claim
backend can fail at request time. Configuration problems are raised when a
guard is registered or the service starts.
"""


class DedupGuardError(Exception):
    """Base class for all guard errors."""


class GuardConfigurationError(DedupGuardError, ValueError):
    """Malformed guard configuration (bad TTL, unknown hash algorithm, ...)."""


class PayloadConversionError(DedupGuardError):
    """Request body could not be turned into a field mapping."""


class DuplicateRequestError(DedupGuardError):
    """A live claim already exists for this request's token."""

    def __init__(self, code: str, message: str, token: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.token = token


class ClaimBackendError(DedupGuardError):
    """Claim store failed; distinct from a duplicate."""


class ClaimBackendUnavailable(ClaimBackendError):
    """Claim store could not be reached or rejected the command."""


class ClaimBackendTimeout(ClaimBackendError):
    """Claim store did not answer within the configured timeout."""


class ResourceNotFoundError(DedupGuardError):
    """Requested resource does not exist."""

    def __init__(self, resource_name: str, field_name: str, field_value: object) -> None:
        super().__init__(f"{resource_name} not found with {field_name}: {field_value}")
        self.resource_name = resource_name
        self.field_name = field_name
        self.field_value = field_value
