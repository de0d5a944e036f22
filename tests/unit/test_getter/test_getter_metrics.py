"""Unit tests for getter metrics."""

import threading
from concurrent.futures import ThreadPoolExecutor

from repofetch.errors import GetterErrorClass
from repofetch.getter import GetterMetrics


class TestGetterMetrics:
    """Tests for GetterMetrics."""

    def test_singleton(self) -> None:
        """Test get_instance returns the same object until reset."""
        first = GetterMetrics.get_instance()

        assert GetterMetrics.get_instance() is first

        GetterMetrics.reset()
        assert GetterMetrics.get_instance() is not first

    def test_record_request(self) -> None:
        """Test requests are counted by status with bytes summed."""
        metrics = GetterMetrics.get_instance()

        metrics.record_request(200, 100)
        metrics.record_request(200, 50)
        metrics.record_request(404, 9)

        assert metrics.http_requests_total == {200: 2, 404: 1}
        assert metrics.http_bytes_total == 159
        assert metrics.http_request_count == 3

    def test_record_failure_and_redirect(self) -> None:
        """Test failures are keyed by error class."""
        metrics = GetterMetrics.get_instance()

        metrics.record_failure(GetterErrorClass.TLS_VERIFICATION)
        metrics.record_failure(GetterErrorClass.TLS_VERIFICATION)
        metrics.record_redirect()

        assert metrics.http_failures_total == {"TLS_VERIFICATION": 2}
        assert metrics.http_redirects_total == 1

    def test_to_dict(self) -> None:
        """Test the dictionary export."""
        metrics = GetterMetrics.get_instance()
        metrics.record_duration(12.5)

        data = metrics.to_dict()

        assert data["http_duration_ms_total"] == 12.5
        assert data["http_request_count"] == 0

    def test_concurrent_recording(self) -> None:
        """Test no update is lost when threads record at the same time."""
        threads_count = 8
        per_thread = 2000

        def record() -> None:
            metrics = GetterMetrics.get_instance()
            for _ in range(per_thread):
                metrics.record_request(200, 1)
                metrics.record_failure(GetterErrorClass.TIMEOUT)
                metrics.record_redirect()

        threads = [threading.Thread(target=record) for _ in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        total = threads_count * per_thread
        metrics = GetterMetrics.get_instance()
        assert metrics.http_requests_total == {200: total}
        assert metrics.http_request_count == total
        assert metrics.http_bytes_total == total
        assert metrics.http_failures_total == {"TIMEOUT": total}
        assert metrics.http_redirects_total == total

    def test_concurrent_get_instance(self) -> None:
        """Test racing first calls all receive the same instance."""
        with ThreadPoolExecutor(max_workers=8) as pool:
            instances = list(
                pool.map(lambda _: GetterMetrics.get_instance(), range(64))
            )

        assert all(instance is instances[0] for instance in instances)
