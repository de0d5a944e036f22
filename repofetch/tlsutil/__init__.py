"""TLS client configuration builder.

Turns references to a client certificate, private key and CA bundle
(file paths or in-memory PEM bytes) into an immutable TlsConfig that
HTTP transports can materialize into an ssl.SSLContext.
"""

from repofetch.tlsutil.builder import (
    build_client_tls,
    build_client_tls_from_bytes,
    client_config,
)
from repofetch.tlsutil.models import (
    ClientCertificate,
    TlsConfig,
    TlsMaterial,
    TlsOptions,
)


__all__ = [
    # Builder
    "build_client_tls",
    "build_client_tls_from_bytes",
    "client_config",
    # Models
    "ClientCertificate",
    "TlsConfig",
    "TlsMaterial",
    "TlsOptions",
]
