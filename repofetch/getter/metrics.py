"""Metrics collection for the HTTP getter."""

from dataclasses import dataclass, field
from threading import Lock

from repofetch.errors import GetterErrorClass


# Module-level singleton state
_metrics_instance: "GetterMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class GetterMetrics:
    """Thread-safe metrics for getter retrievals.

    Tracks request counts by status, bytes received, redirects followed
    and failures by error class. Use get_instance() for singleton access.
    """

    # Instance-level lock for thread-safe operations
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_redirects_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0

    @classmethod
    def get_instance(cls) -> "GetterMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared GetterMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                # Double-checked locking
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed retrieval.

        Args:
            status_code: Final HTTP status code.
            bytes_received: Number of body bytes received.
        """
        with self._lock:
            self.http_requests_total[status_code] = (
                self.http_requests_total.get(status_code, 0) + 1
            )
            self.http_bytes_total += bytes_received
            self.http_request_count += 1

    def record_redirect(self) -> None:
        """Record a followed redirect hop."""
        with self._lock:
            self.http_redirects_total += 1

    def record_failure(self, error_class: GetterErrorClass) -> None:
        """Record a failed retrieval."""
        key = error_class.value
        with self._lock:
            self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record retrieval duration in milliseconds."""
        with self._lock:
            self.http_duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "http_requests_total": dict(self.http_requests_total),
                "http_redirects_total": self.http_redirects_total,
                "http_failures_total": dict(self.http_failures_total),
                "http_bytes_total": self.http_bytes_total,
                "http_duration_ms_total": self.http_duration_ms_total,
                "http_request_count": self.http_request_count,
            }
