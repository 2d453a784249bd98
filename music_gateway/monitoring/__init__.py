# ABOUTME: Monitoring package initialization
# ABOUTME: Exports Prometheus metrics and the request monitoring middleware
from .metrics import PrometheusMetrics
from .middleware import MonitoringMiddleware, add_monitoring_middleware

__all__ = ["PrometheusMetrics", "MonitoringMiddleware", "add_monitoring_middleware"]
