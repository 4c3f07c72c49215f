"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# RSVP metrics
rsvp_attempts = Counter(
    'rsvp_attempts_total',
    'Total RSVP attempts',
    ['status', 'result']  # result: accepted, capacity_exceeded, rejected
)

# Ticket metrics
tickets_issued = Counter(
    'tickets_issued_total',
    'Tickets minted by the issuer'
)

checkin_attempts = Counter(
    'checkin_attempts_total',
    'Door-side ticket validation attempts',
    ['result']  # success, already_used, revoked, invalid, invalid_state
)

# Lifecycle metrics
lifecycle_transitions = Counter(
    'event_lifecycle_transitions_total',
    'Event status transitions',
    ['from_status', 'to_status']
)

operation_latency = Histogram(
    'engine_operation_latency_seconds',
    'Engine operation latency including lock wait',
    ['operation'],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1]
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_rsvp_attempt(status: str, result: str):
    """Record RSVP attempt. Result: accepted, capacity_exceeded, rejected"""
    rsvp_attempts.labels(status=status, result=result).inc()

def record_ticket_issued():
    tickets_issued.inc()

def record_checkin(result: str):
    """Record check-in outcome."""
    checkin_attempts.labels(result=result).inc()

def record_transition(from_status: str, to_status: str):
    lifecycle_transitions.labels(from_status=from_status, to_status=to_status).inc()
