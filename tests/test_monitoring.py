# ABOUTME: Tests for Prometheus metrics collection and the /metrics endpoint
# ABOUTME: Verifies singleton behavior, gateway-specific metrics, and exposition output

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from music_gateway.main import app
from music_gateway.monitoring.metrics import PrometheusMetrics

client = TestClient(app)


class TestPrometheusMetrics:

    def test_singleton(self):
        assert PrometheusMetrics() is PrometheusMetrics()

    def test_record_upstream_attempt(self):
        metrics = PrometheusMetrics()
        labels = {"model": "lyria-test", "outcome": "retryable_error"}
        before = REGISTRY.get_sample_value("music_gateway_upstream_attempts_total", labels) or 0

        metrics.record_upstream_attempt("lyria-test", "retryable_error")

        assert REGISTRY.get_sample_value("music_gateway_upstream_attempts_total", labels) == before + 1

    def test_busy_rejection_counter(self):
        metrics = PrometheusMetrics()
        before = REGISTRY.get_sample_value("music_gateway_busy_rejections_total") or 0

        metrics.record_busy_rejection()

        assert REGISTRY.get_sample_value("music_gateway_busy_rejections_total") == before + 1

    def test_generation_in_progress_gauge(self):
        metrics = PrometheusMetrics()

        metrics.set_generation_in_progress(True)
        assert REGISTRY.get_sample_value("music_gateway_generation_in_progress") == 1
        metrics.set_generation_in_progress(False)
        assert REGISTRY.get_sample_value("music_gateway_generation_in_progress") == 0


class TestMetricsEndpoint:

    def test_metrics_exposition(self):
        client.get("/")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert "music_gateway_requests_total" in body
        assert 'route="GET /"' in body

    def test_requests_are_counted(self):
        labels = {"route": "GET /", "status": "200"}
        before = REGISTRY.get_sample_value("music_gateway_requests_total", labels) or 0

        client.get("/")

        assert REGISTRY.get_sample_value("music_gateway_requests_total", labels) == before + 1

    def test_metrics_endpoint_is_not_counted(self):
        labels = {"route": "GET /metrics", "status": "200"}
        client.get("/metrics")
        assert REGISTRY.get_sample_value("music_gateway_requests_total", labels) is None
