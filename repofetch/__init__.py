"""repofetch: fetch repository artifacts over HTTP(S) with mutual TLS."""

from repofetch.errors import (
    ConfigError,
    GetterConnectionError,
    GetterError,
    GetterErrorClass,
    GetterTimeoutError,
    ReadError,
    TLSHandshakeError,
    TLSVerificationError,
)
from repofetch.getter import Getter, HTTPGetter, new_http_getter
from repofetch.tlsutil import TlsConfig, TlsOptions, build_client_tls, client_config
from repofetch.version import VERSION


__version__ = VERSION

__all__ = [
    "__version__",
    # Getter
    "Getter",
    "HTTPGetter",
    "new_http_getter",
    # TLS
    "TlsConfig",
    "TlsOptions",
    "build_client_tls",
    "client_config",
    # Errors
    "ConfigError",
    "GetterConnectionError",
    "GetterError",
    "GetterErrorClass",
    "GetterTimeoutError",
    "ReadError",
    "TLSHandshakeError",
    "TLSVerificationError",
]
