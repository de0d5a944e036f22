"""HTTP(S) getter with mutual TLS and redirect-aware trust."""

import socket
import ssl
import threading
import time
from collections.abc import Iterator
from io import BytesIO

import httpx
import structlog

from repofetch.errors import (
    ConfigError,
    GetterConnectionError,
    GetterError,
    GetterTimeoutError,
    ReadError,
    TLSHandshakeError,
    TLSVerificationError,
)
from repofetch.getter.constants import (
    ACCEPT_ENCODING_IDENTITY,
    DEFAULT_CHUNK_SIZE,
    MAX_REDIRECTS,
)
from repofetch.getter.metrics import GetterMetrics
from repofetch.getter.models import FetchResult
from repofetch.getter.options import (
    GetterOptions,
    Option,
    apply_options,
    resolve_options,
)
from repofetch.getter.redact import redact_headers, redact_url_credentials
from repofetch.tlsutil import TlsConfig, client_config
from repofetch.version import default_user_agent as version_user_agent


logger = structlog.get_logger()


class HTTPGetter:
    """Fetches artifacts over HTTP and HTTPS.

    The getter only holds its resolved options. Every retrieval builds its
    own TLS configuration and HTTP client from the effective options, so a
    single getter can serve concurrent callers.

    Redirects are followed hop by hop on the same client, which keeps the
    configured client certificate and CA pool in force for every target
    while SNI and hostname checks follow each target's own host.
    """

    def __init__(
        self,
        options: GetterOptions | None = None,
        default_user_agent: str | None = None,
    ) -> None:
        """Initialize the getter.

        Args:
            options: Resolved options; defaults when omitted.
            default_user_agent: User agent sent when the options carry
                none, normally supplied by process-wide configuration.
        """
        self._opts = options if options is not None else GetterOptions()
        self._default_user_agent = default_user_agent or version_user_agent()
        self._metrics = GetterMetrics.get_instance()
        self._log = logger.bind(component="getter")

    @property
    def options(self) -> GetterOptions:
        """The stored base options."""
        return self._opts

    @property
    def default_user_agent(self) -> str:
        """User agent used when no option sets one."""
        return self._default_user_agent

    def get(self, url: str, *options: Option) -> bytes:
        """Retrieve the body at ``url``.

        Args:
            url: URL to fetch; falls back to the url option when empty.
            *options: Per-call options layered over the stored ones.

        Returns:
            The response body exactly as served, whatever the status code.

        Raises:
            ConfigError: Invalid options, TLS material or URL.
            GetterConnectionError: Connection, timeout or handshake failure.
            TLSVerificationError: Server certificate could not be verified.
            ReadError: Body could not be read to completion.
        """
        return self.fetch(url, *options).body

    def fetch(self, url: str = "", *options: Option) -> FetchResult:
        """Retrieve ``url`` and return the final response with its metadata.

        Takes the same arguments and raises the same errors as :meth:`get`.
        """
        start_time_ns = time.perf_counter_ns()
        try:
            opts = resolve_options(self._opts, options)
            target = url or opts.url
            if not target:
                msg = "no URL to fetch"
                raise ConfigError(msg)  # noqa: TRY301
            result = self._fetch(target, opts)
        except GetterError as e:
            self._metrics.record_failure(e.error_class)
            raise

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)
        self._metrics.record_request(result.status_code, result.body_size)
        self._log.info(
            "fetch_complete",
            url=redact_url_credentials(target),
            final_url=redact_url_credentials(result.final_url),
            status_code=result.status_code,
            bytes=result.body_size,
            redirects=result.redirects,
            duration_ms=round(duration_ms, 2),
        )
        return result

    def _fetch(self, url: str, opts: GetterOptions) -> FetchResult:
        tls_config = self._tls_config(opts)
        deadline = time.monotonic() + opts.timeout_seconds

        with self._http_client(opts, tls_config) as client:
            request = self._build_request(client, url, opts, tls_config)
            self._log.debug(
                "fetch_start",
                url=redact_url_credentials(url),
                headers=redact_headers(dict(request.headers)),
                tls=tls_config is not None,
                timeout_seconds=opts.timeout_seconds,
            )
            response, redirects = self._send(client, request, opts, deadline)
            body = _read_body(response, deadline)

        return FetchResult(
            status_code=response.status_code,
            final_url=str(response.url),
            headers=dict(response.headers),
            body=body,
            redirects=redirects,
        )

    def _tls_config(self, opts: GetterOptions) -> TlsConfig | None:
        """Resolve the TLS configuration for a call.

        Returns:
            None when no TLS setting is configured, so the transport keeps
            its default verification.

        Raises:
            ConfigError: If the TLS material is invalid.
        """
        if not opts.has_tls_material:
            return None
        return client_config(opts.tls_options())

    def _http_client(
        self,
        opts: GetterOptions,
        tls_config: TlsConfig | None,
    ) -> httpx.Client:
        verify: ssl.SSLContext | bool = True
        if tls_config is not None:
            verify = tls_config.ssl_context()
        return httpx.Client(
            verify=verify,
            timeout=opts.timeout_seconds,
            follow_redirects=False,
            trust_env=True,
        )

    def _build_request(
        self,
        client: httpx.Client,
        url: str,
        opts: GetterOptions,
        tls_config: TlsConfig | None,
    ) -> httpx.Request:
        headers = {
            "User-Agent": opts.user_agent or self._default_user_agent,
            "Accept-Encoding": ACCEPT_ENCODING_IDENTITY,
        }
        if opts.accept_header:
            headers["Accept"] = opts.accept_header

        try:
            request = client.build_request("GET", url, headers=headers)
        except httpx.InvalidURL as e:
            msg = f"invalid URL {redact_url_credentials(url)}: {e}"
            raise ConfigError(msg, url=redact_url_credentials(url)) from e

        if tls_config is not None and tls_config.server_name:
            request.extensions = {
                **request.extensions,
                "sni_hostname": tls_config.server_name,
            }
        return request

    def _send(
        self,
        client: httpx.Client,
        request: httpx.Request,
        opts: GetterOptions,
        deadline: float,
    ) -> tuple[httpx.Response, int]:
        """Send the request, following redirects on the same client.

        httpx drops the Authorization header when a redirect leaves the
        origin, so credentials are re-applied on later hops only when
        ``pass_credentials_all`` is set.

        Returns:
            The final, still-streaming response and the number of hops.
        """
        auth = None
        if opts.has_basic_auth:
            auth = httpx.BasicAuth(opts.username, opts.password)

        for hop in range(MAX_REDIRECTS + 1):
            _apply_deadline(request, deadline)
            hop_auth = auth if hop == 0 or opts.pass_credentials_all else None
            response = _send_hop(client, request, hop_auth)

            next_request = response.next_request
            if next_request is None:
                return response, hop

            response.close()
            self._metrics.record_redirect()
            self._log.debug(
                "redirect_followed",
                hop=hop + 1,
                status_code=response.status_code,
                location=redact_url_credentials(str(next_request.url)),
            )
            request = next_request

        url = redact_url_credentials(str(request.url))
        msg = f"stopped after {MAX_REDIRECTS} redirects fetching {url}"
        raise GetterConnectionError(msg, url=url)


def new_http_getter(
    *options: Option,
    default_user_agent: str | None = None,
) -> HTTPGetter:
    """Create an HTTP getter from option functions.

    No I/O happens here; TLS material is only read at request time.

    Args:
        *options: Option functions applied in order to the defaults.
        default_user_agent: User agent sent when no option sets one.

    Returns:
        Configured getter.

    Raises:
        ConfigError: If an option value is structurally invalid.
    """
    return HTTPGetter(apply_options(options), default_user_agent=default_user_agent)


def _apply_deadline(request: httpx.Request, deadline: float) -> None:
    """Give the next hop only the time left before the call's deadline.

    Raises:
        GetterTimeoutError: If the deadline has already passed.
    """
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        url = redact_url_credentials(str(request.url))
        msg = f"timed out before fetching {url}"
        raise GetterTimeoutError(msg, url=url)
    request.extensions = {
        **request.extensions,
        "timeout": httpx.Timeout(remaining).as_dict(),
    }


def _send_hop(
    client: httpx.Client,
    request: httpx.Request,
    auth: httpx.Auth | None,
) -> httpx.Response:
    """Send a single request without following redirects.

    Raises:
        ConfigError: If the URL scheme is not supported.
        GetterError: Classified transport failure.
    """
    url = redact_url_credentials(str(request.url))
    try:
        return client.send(request, auth=auth, stream=True)
    except httpx.UnsupportedProtocol as e:
        msg = f"unsupported URL {url}: {e}"
        raise ConfigError(msg, url=url) from e
    except httpx.TimeoutException as e:
        msg = f"timed out fetching {url}: {e}"
        raise GetterTimeoutError(msg, url=url) from e
    except httpx.TransportError as e:
        raise _classify_transport_error(e, url) from e


class _BodyDeadline:
    """Cuts off a body read that is still running when the deadline passes.

    The transport's read timeout is fixed per socket read, so a server
    that trickles bytes or stalls mid-body could hold the call past the
    deadline. A timer shuts the connection's socket down instead, which
    wakes the blocked read.
    """

    def __init__(self, response: httpx.Response, deadline: float) -> None:
        self._response = response
        self.expired = threading.Event()
        self._timer = threading.Timer(
            max(deadline - time.monotonic(), 0.0), self._expire
        )
        self._timer.daemon = True

    def __enter__(self) -> "_BodyDeadline":
        self._timer.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._timer.cancel()

    def _expire(self) -> None:
        self.expired.set()
        stream = self._response.extensions.get("network_stream")
        sock = stream.get_extra_info("socket") if stream is not None else None
        if sock is None:
            return
        try:
            # The plain socket call leaves an SSLSocket readable, so the
            # blocked read sees EOF instead of an unwrapped socket
            socket.socket.shutdown(sock, socket.SHUT_RDWR)
        except OSError:
            # Already closed by the reader
            return


def _read_body(response: httpx.Response, deadline: float) -> bytes:
    """Buffer the raw response body, still bounded by the deadline.

    The body is read undecoded; artifacts served with a stray
    Content-Encoding header come back byte for byte.

    Raises:
        GetterTimeoutError: If the deadline passes mid-body.
        ReadError: If the stream breaks before the body is complete.
    """
    url = redact_url_credentials(str(response.url))
    msg = f"timed out reading body from {url}"
    buffer = BytesIO()
    try:
        with _BodyDeadline(response, deadline) as body_deadline:
            try:
                for chunk in response.iter_raw(chunk_size=DEFAULT_CHUNK_SIZE):
                    buffer.write(chunk)
                    if time.monotonic() > deadline:
                        raise GetterTimeoutError(msg, url=url)
            except (httpx.TransportError, httpx.StreamError) as e:
                if body_deadline.expired.is_set() or isinstance(
                    e, httpx.TimeoutException
                ):
                    raise GetterTimeoutError(f"{msg}: {e}", url=url) from e
                error = f"failed to read body from {url}: {e}"
                raise ReadError(error, url=url) from e
            if body_deadline.expired.is_set():
                raise GetterTimeoutError(msg, url=url)
    finally:
        response.close()
    return buffer.getvalue()


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _classify_transport_error(exc: httpx.TransportError, url: str) -> GetterError:
    """Map a transport failure onto the getter's error kinds.

    httpx wraps the ssl module's exceptions, so the cause chain is
    inspected for the original SSL error.
    """
    for cause in _exception_chain(exc):
        if isinstance(cause, ssl.SSLCertVerificationError):
            reason = getattr(cause, "verify_message", None) or str(cause)
            msg = f"failed to verify server certificate for {url}: {reason}"
            return TLSVerificationError(msg, url=url)
        if isinstance(cause, ssl.SSLError):
            msg = f"TLS handshake failed for {url}: {cause}"
            return TLSHandshakeError(msg, url=url)
    msg = f"failed to fetch {url}: {exc}"
    return GetterConnectionError(msg, url=url)
