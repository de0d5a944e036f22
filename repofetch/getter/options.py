"""Getter options and the functional option setters that build them.

Options are plain callables that edit a mutable :class:`OptionsDraft`.
They are applied in order, so a later option for the same field wins,
and the draft is then validated into an immutable :class:`GetterOptions`.
"""

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repofetch.errors import ConfigError
from repofetch.getter.constants import DEFAULT_TIMEOUT_SECONDS
from repofetch.tlsutil import TlsMaterial, TlsOptions


class GetterOptions(BaseModel):
    """Resolved, read-only options for an HTTP getter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = ""
    username: str = ""
    password: str = ""
    user_agent: str = Field(default="", description="Empty means the default agent")
    cert: TlsMaterial = None
    key: TlsMaterial = None
    ca: TlsMaterial = None
    insecure_skip_verify_tls: bool = False
    timeout_seconds: Annotated[float, Field(gt=0.0)] = DEFAULT_TIMEOUT_SECONDS
    pass_credentials_all: bool = Field(
        default=False,
        description="Send basic-auth credentials to redirect targets on other hosts",
    )
    accept_header: str = ""
    tls_server_name: str = Field(
        default="", description="Fixed TLS server name; empty derives it per request"
    )

    @property
    def has_basic_auth(self) -> bool:
        """Whether both halves of the basic-auth pair are set."""
        return bool(self.username) and bool(self.password)

    @property
    def has_tls_material(self) -> bool:
        """Whether any TLS setting departs from the transport defaults."""
        if self.insecure_skip_verify_tls or self.tls_server_name:
            return True
        return any(
            ref not in (None, "", b"") for ref in (self.cert, self.key, self.ca)
        )

    def tls_options(self) -> TlsOptions:
        """Project the TLS-related fields onto builder options."""
        return TlsOptions(
            cert=self.cert,
            key=self.key,
            ca=self.ca,
            insecure_skip_verify=self.insecure_skip_verify_tls,
            server_name=self.tls_server_name or None,
        )


@dataclass
class OptionsDraft:
    """Mutable draft edited by option functions before validation."""

    url: str = ""
    username: str = ""
    password: str = ""
    user_agent: str = ""
    cert: TlsMaterial = None
    key: TlsMaterial = None
    ca: TlsMaterial = None
    insecure_skip_verify_tls: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    pass_credentials_all: bool = False
    accept_header: str = ""
    tls_server_name: str = ""

    @classmethod
    def from_options(cls, options: GetterOptions) -> "OptionsDraft":
        """Start a draft from already-resolved options."""
        return cls(**options.model_dump())

    def finalize(self) -> GetterOptions:
        """Validate the draft into immutable options.

        Raises:
            ConfigError: If a field holds a structurally invalid value.
        """
        try:
            return GetterOptions.model_validate(asdict(self))
        except ValidationError as e:
            msg = f"invalid getter options: {e}"
            raise ConfigError(msg) from e


Option = Callable[[OptionsDraft], None]


def apply_options(
    options: Iterable[Option],
    base: GetterOptions | None = None,
) -> GetterOptions:
    """Apply options in order on top of base (or default) options.

    Args:
        options: Option functions; later ones override earlier ones.
        base: Starting options. Never mutated.

    Returns:
        Newly validated options.

    Raises:
        ConfigError: If the result is structurally invalid.
    """
    draft = OptionsDraft() if base is None else OptionsDraft.from_options(base)
    for option in options:
        option(draft)
    return draft.finalize()


def resolve_options(base: GetterOptions, overlay: Iterable[Option]) -> GetterOptions:
    """Compute effective options for a single call.

    Args:
        base: The getter's stored options.
        overlay: Per-call options that win over the base, field by field.

    Returns:
        Effective options; ``base`` itself when there is no overlay.
    """
    overlay = tuple(overlay)
    if not overlay:
        return base
    return apply_options(overlay, base=base)


def with_url(url: str) -> Option:
    """Set the target URL."""

    def _apply(draft: OptionsDraft) -> None:
        draft.url = url

    return _apply


def with_basic_auth(username: str, password: str) -> Option:
    """Set basic-auth credentials; both must be non-empty to be sent."""

    def _apply(draft: OptionsDraft) -> None:
        draft.username = username
        draft.password = password

    return _apply


def with_user_agent(user_agent: str) -> Option:
    """Set the User-Agent header value."""

    def _apply(draft: OptionsDraft) -> None:
        draft.user_agent = user_agent

    return _apply


def with_tls_client_config(
    cert: TlsMaterial,
    key: TlsMaterial,
    ca: TlsMaterial,
) -> Option:
    """Set client certificate, key and CA bundle.

    Each may be a file path, PEM bytes, or empty to leave it unset.
    """

    def _apply(draft: OptionsDraft) -> None:
        draft.cert = cert
        draft.key = key
        draft.ca = ca

    return _apply


def with_insecure_skip_verify_tls(insecure: bool) -> Option:
    """Skip server certificate and hostname verification."""

    def _apply(draft: OptionsDraft) -> None:
        draft.insecure_skip_verify_tls = insecure

    return _apply


def with_timeout(timeout: float | timedelta) -> Option:
    """Bound the whole request, redirects and body read included."""

    def _apply(draft: OptionsDraft) -> None:
        if isinstance(timeout, timedelta):
            draft.timeout_seconds = timeout.total_seconds()
        else:
            draft.timeout_seconds = timeout

    return _apply


def with_pass_credentials_all(enabled: bool) -> Option:
    """Keep sending basic-auth credentials after cross-host redirects."""

    def _apply(draft: OptionsDraft) -> None:
        draft.pass_credentials_all = enabled

    return _apply


def with_accept_header(header: str) -> Option:
    """Set the Accept header sent with the request."""

    def _apply(draft: OptionsDraft) -> None:
        draft.accept_header = header

    return _apply


def with_tls_server_name(server_name: str) -> Option:
    """Pin the TLS server name used for SNI and hostname checks.

    Left empty, the name is derived from each request's own host,
    redirect targets included.
    """

    def _apply(draft: OptionsDraft) -> None:
        draft.tls_server_name = server_name

    return _apply
