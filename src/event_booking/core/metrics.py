"""
Prometheus metrics for monitoring
"""
from prometheus_client import Counter, Histogram

# ==================== HTTP Metrics ====================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

# ==================== Booking Metrics ====================

bookings_created_total = Counter(
    "bookings_created_total",
    "Total bookings created",
)

bookings_confirmed_total = Counter(
    "bookings_confirmed_total",
    "Total bookings confirmed",
)

bookings_cancelled_total = Counter(
    "bookings_cancelled_total",
    "Total bookings cancelled",
)

booking_failures_total = Counter(
    "booking_failures_total",
    "Booking operations rejected, by operation and error code",
    ["operation", "code"],
)

seats_reserved_total = Counter(
    "seats_reserved_total",
    "Seats moved from available to reserved",
)

seats_released_total = Counter(
    "seats_released_total",
    "Seats restored to availability by cancellation",
)

booking_transaction_duration_seconds = Histogram(
    "booking_transaction_duration_seconds",
    "Time spent inside a booking unit of work",
    ["operation"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
)
