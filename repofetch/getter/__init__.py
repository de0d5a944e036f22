"""HTTP getter for repository artifacts.

This module fetches artifacts over HTTP(S) with:
- Functional options applied to an immutable option snapshot
- Per-call option overlays that never mutate the getter
- Mutual TLS, custom CA pools and insecure mode via repofetch.tlsutil
- Redirects followed on one client so trust holds at every hop
- A single deadline bounding redirects and body read
"""

from repofetch.getter.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_REDIRECTS,
)
from repofetch.getter.http import HTTPGetter, new_http_getter
from repofetch.getter.metrics import GetterMetrics
from repofetch.getter.models import FetchResult
from repofetch.getter.options import (
    GetterOptions,
    Option,
    OptionsDraft,
    apply_options,
    resolve_options,
    with_accept_header,
    with_basic_auth,
    with_insecure_skip_verify_tls,
    with_pass_credentials_all,
    with_timeout,
    with_tls_client_config,
    with_tls_server_name,
    with_url,
    with_user_agent,
)
from repofetch.getter.protocols import Getter
from repofetch.getter.redact import redact_headers, redact_url_credentials


__all__ = [
    # Getter
    "Getter",
    "HTTPGetter",
    "new_http_getter",
    # Options
    "GetterOptions",
    "Option",
    "OptionsDraft",
    "apply_options",
    "resolve_options",
    "with_accept_header",
    "with_basic_auth",
    "with_insecure_skip_verify_tls",
    "with_pass_credentials_all",
    "with_timeout",
    "with_tls_client_config",
    "with_tls_server_name",
    "with_url",
    "with_user_agent",
    # Models
    "FetchResult",
    # Constants
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_TIMEOUT_SECONDS",
    "MAX_REDIRECTS",
    # Metrics
    "GetterMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
