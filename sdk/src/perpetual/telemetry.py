"""
Prometheus metrics for order building and submission.

Counters are registered on the default registry at import time.  Serving
the registry over HTTP belongs to the host process.
"""

from __future__ import annotations

from prometheus_client import Counter

ORDERS_SIGNED = Counter(
    "perp_orders_signed_total",
    "Orders successfully built and signed",
    labelnames=["market", "side"],
)
ORDER_BUILD_FAILURES = Counter(
    "perp_order_build_failures_total",
    "Order builds rejected by validation, hashing or signing",
    labelnames=["reason"],
)
ORDERS_SUBMITTED = Counter(
    "perp_orders_submitted_total",
    "Orders submitted to the venue by outcome",
    labelnames=["market", "status"],
)
