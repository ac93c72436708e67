"""Application metrics using the Prometheus client library.

One inventory of everything the service measures.  Other modules import a
metric and increment/observe it at the point of action.

  HTTP layer     : populated by MetricsMiddleware
  Workflow layer : one increment per façade operation, labelled by outcome
                    (ok, forbidden, not_found, invalid_transition, conflict,
                    validation_error, store_unavailable)
  Authorization  : one increment per predicate evaluation
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
# Workflow metrics
# ---------------------------------------------------------------------------

WORKFLOW_ACTIONS = Counter(
    "courseflow_workflow_actions_total",
    "Façade operations by entity, action, and outcome",
    ["entity", "action", "outcome"],
)

AUTHZ_DECISIONS = Counter(
    "courseflow_authz_decisions_total",
    "Authorization predicate decisions",
    ["decision"],
)

# ---------------------------------------------------------------------------
# Auth metrics
# ---------------------------------------------------------------------------

LOGIN_ATTEMPTS = Counter(
    "courseflow_login_attempts_total",
    "Login attempts by result",
    ["result"],  # success|failure
)

TOKEN_REVOCATION_CHECKS = Counter(
    "courseflow_token_revocation_checks_total",
    "Revocation list lookups by result",
    ["result"],  # valid|revoked
)
