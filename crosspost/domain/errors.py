"""Error taxonomy shared by the connection and publishing flows.

Request-level errors are raised before any provider I/O and are mapped to
HTTP responses by the presentation layer. ``ProviderPublishError`` is the only
target-level error; the dispatcher folds it into a single ``PublishResult``.
"""


class CrosspostError(Exception):
    """Base error carrying a machine-readable code and an HTTP status."""

    status_code: int = 500
    default_code: str = "internal_error"

    def __init__(self, code: str | None = None, message: str | None = None) -> None:
        self.code = code or self.default_code
        self.message = message or self.code
        super().__init__(self.message)


class RequestValidationError(CrosspostError):
    """Malformed or unsafe input. Never retried."""

    status_code = 400
    default_code = "invalid_request"


class AuthenticationError(CrosspostError):
    """Missing or invalid caller credential, or rejected direct login."""

    status_code = 401
    default_code = "unauthenticated"


class AuthorizationError(CrosspostError):
    """Caller lacks a workspace role allowed to perform the action."""

    status_code = 403
    default_code = "forbidden"


class NotFoundError(CrosspostError):
    status_code = 404
    default_code = "not_found"


class ConfigurationError(CrosspostError):
    """Provider is not configured in this environment ("needs setup")."""

    status_code = 400
    default_code = "provider_not_configured"


class OAuthError(CrosspostError):
    """State verification or token exchange failure during a connection.

    ``code`` holds the provider's raw reason (e.g. ``invalid_grant``) so it can
    be forwarded to the caller for diagnostics.
    """

    status_code = 400
    default_code = "oauth_error"


class ProviderPublishError(CrosspostError):
    """A provider rejected or failed a publish call for one target."""

    status_code = 502
    default_code = "provider_error"


class PersistenceError(CrosspostError):
    """A store write failed; the surrounding unit of work was rolled back."""

    status_code = 500
    default_code = "database_error"
