"""Build TLS client configurations from certificate, key and CA material."""

from pathlib import Path

import structlog
from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from repofetch.errors import ConfigError
from repofetch.tlsutil.models import (
    ClientCertificate,
    TlsConfig,
    TlsMaterial,
    TlsOptions,
)


logger = structlog.get_logger()


def client_config(options: TlsOptions) -> TlsConfig:
    """Build a TLS client configuration from options.

    No network I/O is performed; material is only read and validated.

    Args:
        options: References to the certificate, key and CA material.

    Returns:
        Immutable TLS configuration. With no material at all this is the
        default configuration: no client certificate, platform trust store,
        verification enabled.

    Raises:
        ConfigError: If only one of cert/key is given, the pair does not
            parse or match, the CA bundle is unreadable or empty, or OpenSSL
            refuses to load the material.
    """
    has_cert = _is_present(options.cert)
    has_key = _is_present(options.key)
    if has_cert != has_key:
        msg = "must provide both cert and key"
        raise ConfigError(msg)

    certificates: tuple[ClientCertificate, ...] = ()
    if has_cert and has_key:
        certificates = (_load_key_pair(options.cert, options.key),)

    root_cas: tuple[x509.Certificate, ...] | None = None
    if _is_present(options.ca):
        root_cas = _load_ca_bundle(options.ca)

    config = TlsConfig(
        certificates=certificates,
        root_cas=root_cas,
        insecure_skip_verify=options.insecure_skip_verify,
        server_name=options.server_name or None,
    )
    # Parsed material can still be refused by OpenSSL's security level
    config.ssl_context()
    logger.debug(
        "tls_config_built",
        component="tlsutil",
        client_certificates=len(config.certificates),
        root_cas=None if root_cas is None else len(root_cas),
        insecure_skip_verify=config.insecure_skip_verify,
    )
    return config


def build_client_tls(
    cert: TlsMaterial,
    key: TlsMaterial,
    ca: TlsMaterial,
    *,
    insecure_skip_verify: bool = False,
    server_name: str | None = None,
) -> TlsConfig:
    """Build a TLS client configuration from file references.

    Args:
        cert: Client certificate file (or PEM bytes), or None/"" for none.
        key: Client key file (or PEM bytes), or None/"" for none.
        ca: CA bundle file (or PEM bytes), or None/"" for the system roots.
        insecure_skip_verify: Skip server certificate verification.
        server_name: Fixed server name for SNI and hostname checks.

    Returns:
        Immutable TLS configuration.

    Raises:
        ConfigError: On incomplete, unreadable or invalid material.
    """
    return client_config(
        TlsOptions(
            cert=cert,
            key=key,
            ca=ca,
            insecure_skip_verify=insecure_skip_verify,
            server_name=server_name,
        )
    )


def build_client_tls_from_bytes(
    cert_pem: bytes | None,
    key_pem: bytes | None,
    ca_pem: bytes | None,
    *,
    insecure_skip_verify: bool = False,
    server_name: str | None = None,
) -> TlsConfig:
    """Build a TLS client configuration from in-memory PEM material.

    Same validation rules as :func:`build_client_tls`.

    Raises:
        ConfigError: On incomplete or invalid material, or non-bytes input.
    """
    for label, value in (("cert", cert_pem), ("key", key_pem), ("ca", ca_pem)):
        if value is not None and not isinstance(value, bytes):
            msg = f"{label} material must be bytes, got {type(value).__name__}"
            raise ConfigError(msg)
    return build_client_tls(
        cert_pem,
        key_pem,
        ca_pem,
        insecure_skip_verify=insecure_skip_verify,
        server_name=server_name,
    )


def _is_present(ref: TlsMaterial) -> bool:
    return ref is not None and ref not in ("", b"")


def _describe(ref: TlsMaterial) -> str:
    if isinstance(ref, bytes):
        return "<in-memory>"
    return str(ref)


def _read_material(ref: TlsMaterial, what: str) -> bytes:
    """Return the PEM bytes behind a material reference.

    Raises:
        ConfigError: If the referenced file cannot be read.
    """
    if isinstance(ref, bytes):
        return ref
    path = Path(str(ref))
    try:
        return path.read_bytes()
    except OSError as e:
        msg = f"can't read {what} file {path}: {e}"
        raise ConfigError(msg) from e


def _public_key_der(public_key: PublicKeyTypes) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _load_key_pair(cert: TlsMaterial, key: TlsMaterial) -> ClientCertificate:
    """Load a certificate chain and its private key, checking they match.

    Raises:
        ConfigError: If either side does not parse or the key does not
            belong to the leaf certificate.
    """
    cert_data = _read_material(cert, "certificate")
    key_data = _read_material(key, "key")

    try:
        chain = tuple(x509.load_pem_x509_certificates(cert_data))
    except ValueError as e:
        msg = f"can't load client certificate {_describe(cert)}: {e}"
        raise ConfigError(msg) from e

    try:
        private_key = serialization.load_pem_private_key(key_data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        msg = f"can't load client key {_describe(key)}: {e}"
        raise ConfigError(msg) from e

    if _public_key_der(chain[0].public_key()) != _public_key_der(
        private_key.public_key()
    ):
        msg = (
            f"private key {_describe(key)} does not match public key "
            f"in certificate {_describe(cert)}"
        )
        raise ConfigError(msg)

    return ClientCertificate(chain=chain, private_key=private_key)


def _load_ca_bundle(ca: TlsMaterial) -> tuple[x509.Certificate, ...]:
    """Parse every PEM certificate in a CA bundle.

    Raises:
        ConfigError: If the bundle is unreadable or has no valid certificate.
    """
    data = _read_material(ca, "CA")
    try:
        certs = tuple(x509.load_pem_x509_certificates(data))
    except ValueError as e:
        msg = f"failed to append certificates from file: {_describe(ca)}: {e}"
        raise ConfigError(msg) from e
    return certs
