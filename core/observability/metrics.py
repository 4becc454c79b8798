"""
Prometheus Metrics for wallet connectors.

Provides counters and histograms for the connection lifecycle.
"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================================
# COUNTERS (monotonically increasing)
# ============================================================================

connect_attempts_total = Counter(
    "wallet_connect_attempts_total",
    "Total number of connect() calls",
    ["connector"],
)

connect_success_total = Counter(
    "wallet_connect_success_total",
    "Total number of successful connections",
    ["connector"],
)

connect_failures_total = Counter(
    "wallet_connect_failures_total",
    "Total number of failed connections",
    ["connector", "category"],
)

chain_switches_total = Counter(
    "wallet_chain_switches_total",
    "Total number of chain switches requested during connect",
    ["connector", "unsupported"],
)

listener_resyncs_total = Counter(
    "wallet_listener_resyncs_total",
    "Total number of provider listener re-registrations",
    ["connector", "provider_changed"],
)

# ============================================================================
# GAUGES (can go up and down)
# ============================================================================

connected_connectors = Gauge(
    "wallet_connected_connectors",
    "Connectors currently holding a connection",
    ["connector"],
)

# ============================================================================
# HISTOGRAMS (distribution of values)
# ============================================================================

authorization_wait_seconds = Histogram(
    "wallet_authorization_wait_seconds",
    "Time spent waiting for the wallet to authorize the dapp",
    ["connector"],
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0],
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def record_connect_attempt(connector: str):
    """Record connect() call."""
    connect_attempts_total.labels(connector=connector).inc()


def record_connect_success(connector: str):
    """Record successful connection."""
    connect_success_total.labels(connector=connector).inc()
    connected_connectors.labels(connector=connector).set(1)


def record_connect_failure(connector: str, category: str):
    """Record connection failure."""
    connect_failures_total.labels(connector=connector, category=category).inc()


def record_disconnect(connector: str):
    """Record disconnection."""
    connected_connectors.labels(connector=connector).set(0)


def record_chain_switch(connector: str, unsupported: bool):
    """Record chain switch during connect."""
    chain_switches_total.labels(connector=connector, unsupported=str(unsupported)).inc()


def record_listener_resync(connector: str, provider_changed: bool):
    """Record listener re-registration."""
    listener_resyncs_total.labels(connector=connector, provider_changed=str(provider_changed)).inc()


def observe_authorization_wait(connector: str, seconds: float):
    """Record how long authorization took."""
    authorization_wait_seconds.labels(connector=connector).observe(seconds)
