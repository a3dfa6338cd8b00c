"""
Prometheus metrics exporter
"""
import os
import logging
from prometheus_client import Counter, Histogram, start_http_server
from functools import wraps
import time

logger = logging.getLogger(__name__)

# Counters
decisions = Counter('moderation_decisions_total', 'Total moderation decisions', ['status', 'submission_type'])
decision_reasons = Counter('moderation_decision_reasons_total', 'Reason codes attached to decisions', ['reason'])
system_errors = Counter('moderation_system_errors_total', 'Analysis failures routed to human review')
reputation_fallbacks = Counter('moderation_reputation_fallbacks_total', 'Reputation lookups replaced by the neutral record')
audit_failures = Counter('moderation_audit_failures_total', 'Audit writes that failed')

# Histograms
processing_latency = Histogram('moderation_processing_duration_seconds', 'Processing duration', ['stage'])
spam_probability = Histogram(
    'moderation_spam_probability',
    'Overall spam probability per submission',
    buckets=(0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)
)


class MetricsExporter:
    """Prometheus metrics exporter"""

    def __init__(self, port: int = 8000):
        self.port = port
        self.server_started = False

    def start(self):
        """Start Prometheus HTTP server"""
        if not self.server_started:
            start_http_server(self.port)
            self.server_started = True
            logger.info(f"Prometheus metrics server started on port {self.port}")

    @staticmethod
    def track_processing(stage: str):
        """Decorator to track processing time of a coroutine"""
        def decorator(func):
            @wraps(func)
            async def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                    processing_latency.labels(stage=stage).observe(time.perf_counter() - start_time)
                    return result
                except Exception:
                    processing_latency.labels(stage=f"{stage}_error").observe(time.perf_counter() - start_time)
                    raise
            return wrapper
        return decorator

    @staticmethod
    def record_decision(status: str, submission_type: str, reasons):
        """Record a moderation decision and its reason codes"""
        decisions.labels(status=status, submission_type=submission_type).inc()
        for reason in reasons:
            decision_reasons.labels(reason=reason).inc()

    @staticmethod
    def record_spam_probability(value: float):
        spam_probability.observe(value)

    @staticmethod
    def record_system_error():
        system_errors.inc()

    @staticmethod
    def record_reputation_fallback():
        reputation_fallbacks.inc()

    @staticmethod
    def record_audit_failure():
        audit_failures.inc()


# Shared exporter; the HTTP server only starts when start() is called
metrics = MetricsExporter(port=int(os.getenv('METRICS_PORT', '8000')))
