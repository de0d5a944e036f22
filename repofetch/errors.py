"""Error types raised while building TLS configuration or fetching artifacts."""

from enum import Enum


class GetterErrorClass(str, Enum):
    """Classification of getter errors.

    - CONFIG: Invalid options or TLS material (never retryable)
    - CONNECTION: DNS failure, refused connection, redirect loop
    - TIMEOUT: Request deadline elapsed
    - TLS_HANDSHAKE: TLS negotiation failed for a reason other than trust
    - TLS_VERIFICATION: Server certificate untrusted or hostname mismatch
    - READ: Response body could not be read to completion
    """

    CONFIG = "CONFIG"
    CONNECTION = "CONNECTION"
    TIMEOUT = "TIMEOUT"
    TLS_HANDSHAKE = "TLS_HANDSHAKE"
    TLS_VERIFICATION = "TLS_VERIFICATION"
    READ = "READ"


class GetterError(Exception):
    """Base exception for getter errors.

    The underlying cause is attached with ``raise ... from`` so callers can
    inspect ``__cause__`` when the error class alone is not enough.
    """

    error_class: GetterErrorClass = GetterErrorClass.CONNECTION

    def __init__(self, message: str, url: str | None = None) -> None:
        """Initialize the getter error.

        Args:
            message: Human-readable error message.
            url: URL being fetched when the error occurred, if any.
        """
        super().__init__(message)
        self.message = message
        self.url = url

    def to_dict(self) -> dict[str, str | None]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "url": self.url,
            "cause": repr(self.__cause__) if self.__cause__ else None,
        }


class ConfigError(GetterError):
    """Malformed or incomplete configuration.

    Raised for missing halves of a cert/key pair, mismatched pairs,
    unreadable or empty CA bundles, and structurally invalid options.
    """

    error_class = GetterErrorClass.CONFIG


class GetterConnectionError(GetterError):
    """Could not obtain a response from the remote host."""

    error_class = GetterErrorClass.CONNECTION


class GetterTimeoutError(GetterConnectionError):
    """The request deadline elapsed before the body was fully read."""

    error_class = GetterErrorClass.TIMEOUT


class TLSHandshakeError(GetterConnectionError):
    """TLS negotiation failed for a reason other than certificate trust."""

    error_class = GetterErrorClass.TLS_HANDSHAKE


class TLSVerificationError(GetterError):
    """Server certificate chain untrusted or hostname mismatch."""

    error_class = GetterErrorClass.TLS_VERIFICATION


class ReadError(GetterError):
    """The response body could not be read to completion."""

    error_class = GetterErrorClass.READ
