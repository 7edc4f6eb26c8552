"""Exception types raised by the CockroachDB Operator."""

from __future__ import annotations


class OperatorError(Exception):
    """Base class for all operator errors."""


class NotAClusterError(OperatorError):
    """Raised when a managed resource is not a Cluster custom resource."""

    def __init__(self, message: str = "managed resource is not a Cluster custom resource"):
        super().__init__(message)


class ConnectError(OperatorError):
    """Raised when a connector cannot produce an external client.

    Attributes:
        step: Which connect step failed
    """

    step = "connect"

    def __init__(self, message: str):
        super().__init__(f"{self.description}: {message}")

    @property
    def description(self) -> str:
        return "cannot connect"


class UsageTrackingError(ConnectError):
    """Raised when provider config usage cannot be recorded."""

    step = "track"

    @property
    def description(self) -> str:
        return "cannot track ProviderConfig usage"


class ProviderConfigError(ConnectError):
    """Raised when the provider config cannot be fetched."""

    step = "get-provider-config"

    @property
    def description(self) -> str:
        return "cannot get ProviderConfig"


class CredentialsError(ConnectError):
    """Raised when credentials cannot be extracted from their source."""

    step = "get-credentials"

    @property
    def description(self) -> str:
        return "cannot get credentials"


class ClientConstructionError(ConnectError):
    """Raised when the backend client cannot be built."""

    step = "new-client"

    @property
    def description(self) -> str:
        return "cannot create new Service"


class SecretLookupError(OperatorError):
    """Raised when a referenced secret cannot be read."""


class SecretKeyNotFoundError(SecretLookupError):
    """Raised when a secret exists but lacks the referenced key."""

    def __init__(self, key: str, secret_name: str):
        self.key = key
        self.secret_name = secret_name
        super().__init__(f'secret key "{key}" not found in secret "{secret_name}"')


class PasswordGenerationError(OperatorError):
    """Raised when a random password cannot be generated."""


class CloudAPIError(OperatorError):
    """Error response from the CockroachDB Cloud API.

    Attributes:
        status_code: HTTP status code of the response
        code: API error code from the response body
        message: API error message from the response body
    """

    def __init__(self, status_code: int, message: str, code: int = 0):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"cloud API returned {status_code}: {message}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409


class CloudTransportError(OperatorError):
    """Raised when a request to the CockroachDB Cloud API cannot be made."""


class CACertError(OperatorError):
    """Raised when the cluster CA certificate cannot be retrieved."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
