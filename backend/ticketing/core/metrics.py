"""
Prometheus metrics for the reservation engine.
Exposed at /metrics.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

reservation_attempts = Counter(
    'reservation_attempts_total',
    'Reserve calls by outcome',
    ['outcome']  # success, insufficient_seats, duplicate, invalid_quantity, not_found, forbidden, error
)

reservation_latency = Histogram(
    'reservation_latency_seconds',
    'Reserve call latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

cancellation_attempts = Counter(
    'cancellation_attempts_total',
    'Cancel calls by outcome',
    ['outcome']  # success, already_cancelled, not_found, forbidden, error
)

seats_released = Counter(
    'seats_released_total',
    'Seats returned to inventory by cancellations'
)

store_errors = Counter(
    'store_errors_total',
    'Transient storage failures surfaced as StoreUnavailable',
    ['operation']
)

cache_operations = Counter(
    'cache_operations_total',
    'Event listing cache operations',
    ['operation', 'result']  # get/set/invalidate, hit/miss/error
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation(outcome: str):
    reservation_attempts.labels(outcome=outcome).inc()


def record_cancellation(outcome: str, seats: int = 0):
    cancellation_attempts.labels(outcome=outcome).inc()
    if seats:
        seats_released.inc(seats)


def record_store_error(operation: str):
    store_errors.labels(operation=operation).inc()


def record_cache_operation(operation: str, result: str):
    cache_operations.labels(operation=operation, result=result).inc()
