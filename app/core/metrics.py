"""Prometheus metrics for esia-mock.

Every metric the service exposes is defined here; the modules that own
the behavior import the one they need and increment it where it happens.

HTTP metrics are filled in by MetricsMiddleware for every route.  The
esia_* counters follow the login flow itself: how many codes were handed
out, how redemptions ended, whether bearer tokens were recognized, and how
often /userinfo hit an already generated identity.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Login flow metrics
# ---------------------------------------------------------------------------

CODES_ISSUED = Counter(
    "esia_codes_issued_total",
    "Authorization codes issued by the authorize form",
)

CODE_REDEMPTIONS = Counter(
    "esia_code_redemptions_total",
    "Token exchange attempts by outcome",
    ["result"],  # "success", "invalid_grant", "invalid_client"
)

TOKEN_LOOKUPS = Counter(
    "esia_token_lookups_total",
    "Bearer token lookups by result",
    ["result"],  # "valid" or "invalid"
)

IDENTITY_LOOKUPS = Counter(
    "esia_identity_lookups_total",
    "Identity cache lookups by result",
    ["result"],  # "hit" or "miss" (miss = identity generated)
)
