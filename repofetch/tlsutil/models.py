"""Data models for TLS client configuration."""

import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from pydantic import BaseModel, ConfigDict, Field

from repofetch.errors import ConfigError


# A reference to PEM material: a file path, or the PEM bytes themselves.
# Empty strings and empty bytes are treated as absent.
TlsMaterial = str | Path | bytes | None


class TlsOptions(BaseModel):
    """References to the material a TLS client configuration is built from.

    ``cert`` and ``key`` must be supplied together; the builder rejects
    one without the other.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ca: TlsMaterial = Field(default=None, description="CA bundle path or PEM bytes")
    cert: TlsMaterial = Field(
        default=None, description="Client certificate path or PEM bytes"
    )
    key: TlsMaterial = Field(default=None, description="Client key path or PEM bytes")
    insecure_skip_verify: bool = Field(
        default=False, description="Accept any server certificate and hostname"
    )
    server_name: str | None = Field(
        default=None, description="Fixed server name; None derives it per request"
    )


@dataclass(frozen=True)
class ClientCertificate:
    """A client certificate chain and the private key matching its leaf."""

    chain: tuple[x509.Certificate, ...]
    private_key: PrivateKeyTypes

    @property
    def leaf(self) -> x509.Certificate:
        """The end-entity certificate presented to the server."""
        return self.chain[0]

    def chain_pem(self) -> bytes:
        """Serialize the chain as concatenated PEM blocks."""
        return b"".join(
            cert.public_bytes(serialization.Encoding.PEM) for cert in self.chain
        )

    def key_pem(self) -> bytes:
        """Serialize the private key as unencrypted PKCS#8 PEM."""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )


@dataclass(frozen=True)
class TlsConfig:
    """Immutable TLS client configuration.

    Attributes:
        certificates: Zero or one client certificate presented for mutual TLS.
        root_cas: Trusted roots, or None to use the platform trust store.
        insecure_skip_verify: Disable chain and hostname verification.
        server_name: Fixed server name for SNI and hostname checks, if any.
    """

    certificates: tuple[ClientCertificate, ...] = ()
    root_cas: tuple[x509.Certificate, ...] | None = None
    insecure_skip_verify: bool = False
    server_name: str | None = None

    def ssl_context(self) -> ssl.SSLContext:
        """Build a fresh SSL context from this configuration.

        A configured CA pool replaces the platform trust store entirely;
        it is never merged with it.

        Returns:
            Client-side SSL context ready to hand to an HTTP transport.

        Raises:
            ConfigError: If OpenSSL refuses the CA pool or client certificate,
                e.g. a key below the security level's minimum size.
        """
        if self.root_cas is None:
            context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        else:
            cadata = "".join(
                cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
                for cert in self.root_cas
            )
            try:
                context = ssl.create_default_context(
                    ssl.Purpose.SERVER_AUTH, cadata=cadata
                )
            except ssl.SSLError as e:
                msg = f"failed to append certificates to the CA pool: {e}"
                raise ConfigError(msg) from e

        if self.insecure_skip_verify:
            # check_hostname has to be cleared before verify_mode can drop to CERT_NONE
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        for certificate in self.certificates:
            _load_client_certificate(context, certificate)

        return context


def _load_client_certificate(
    context: ssl.SSLContext, certificate: ClientCertificate
) -> None:
    """Load a client certificate into an SSL context.

    ``load_cert_chain`` only reads from the filesystem, so the material is
    staged in a private temporary directory that is removed right after.
    """
    try:
        with tempfile.TemporaryDirectory(prefix="repofetch-tls-") as tmpdir:
            cert_path = Path(tmpdir) / "client.crt"
            key_path = Path(tmpdir) / "client.key"
            cert_path.write_bytes(certificate.chain_pem())
            key_path.write_bytes(certificate.key_pem())
            context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except OSError as e:
        subject = certificate.leaf.subject.rfc4514_string()
        msg = f"can't load client certificate {subject} into TLS context: {e}"
        raise ConfigError(msg) from e
