# ABOUTME: Prometheus metrics collection for the music generation gateway
# ABOUTME: Defines counters, histograms, and gauges for HTTP traffic and upstream generation attempts
import logging
from typing import Optional
from threading import Lock

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    REGISTRY
)

logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """
    Singleton class for managing Prometheus metrics for the gateway.

    Collectors register once in the default registry; later instantiations
    return the same object.
    """

    _instance: Optional['PrometheusMetrics'] = None
    _lock = Lock()

    def __new__(cls) -> 'PrometheusMetrics':
        """Ensure singleton pattern"""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        # Prevent re-initialization
        if hasattr(self, '_initialized'):
            return

        self.requests_total = Counter(
            'music_gateway_requests_total',
            'Total number of HTTP requests processed by the gateway',
            ['route', 'status'],
            registry=REGISTRY
        )

        self.request_duration_seconds = Histogram(
            'music_gateway_request_duration_seconds',
            'HTTP request duration in seconds',
            ['route', 'status'],
            buckets=(0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0, 100.0, float('inf')),
            registry=REGISTRY
        )

        self.upstream_attempts_total = Counter(
            'music_gateway_upstream_attempts_total',
            'Upstream model calls by outcome',
            ['model', 'outcome'],
            registry=REGISTRY
        )

        self.busy_rejections_total = Counter(
            'music_gateway_busy_rejections_total',
            'Requests rejected because a generation was already in flight',
            registry=REGISTRY
        )

        self.generation_duration_seconds = Histogram(
            'music_gateway_generation_duration_seconds',
            'Wall time of a generation including pacing and backoff waits',
            ['model'],
            buckets=(1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0, float('inf')),
            registry=REGISTRY
        )

        self.generation_in_progress = Gauge(
            'music_gateway_generation_in_progress',
            'Whether a generation currently holds the busy gate',
            registry=REGISTRY
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized successfully")

    def record_request(self, method: str, path: str, status_code: int, duration: float) -> None:
        """Record a completed HTTP request"""
        try:
            route = f"{method} {path}"
            status = str(status_code)
            self.requests_total.labels(route=route, status=status).inc()
            self.request_duration_seconds.labels(route=route, status=status).observe(duration)
        except Exception as e:
            logger.error(f"Error recording request metric: {e}")

    def record_upstream_attempt(self, model: str, outcome: str) -> None:
        """Record one upstream call; outcome is success, retryable_error, error or no_audio"""
        try:
            self.upstream_attempts_total.labels(model=model, outcome=outcome).inc()
        except Exception as e:
            logger.error(f"Error recording upstream attempt: {e}")

    def record_busy_rejection(self) -> None:
        try:
            self.busy_rejections_total.inc()
        except Exception as e:
            logger.error(f"Error recording busy rejection: {e}")

    def record_generation_duration(self, model: str, duration: float) -> None:
        try:
            self.generation_duration_seconds.labels(model=model).observe(duration)
        except Exception as e:
            logger.error(f"Error recording generation duration: {e}")

    def set_generation_in_progress(self, active: bool) -> None:
        try:
            self.generation_in_progress.set(1 if active else 0)
        except Exception as e:
            logger.error(f"Error setting generation gauge: {e}")
