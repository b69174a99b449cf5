# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "membership_requests_total",
    "Total HTTP requests to the membership service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "membership_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "membership_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
LOGINS_TOTAL = Counter(
    "membership_logins_total",
    "Login attempts by outcome",
    ["outcome"],
)
MEMBERS_LOADED = Gauge(
    "membership_members_loaded",
    "Members currently in the directory",
)
EVENTS_CREATED = Counter(
    "membership_events_created_total",
    "Total events created",
)
ACTIVE_EVENTS = Gauge(
    "membership_events",
    "Number of events in the registry",
)
REGISTRATIONS_TOTAL = Counter(
    "membership_registrations_total",
    "Registration attempts by outcome",
    ["outcome"],
)
