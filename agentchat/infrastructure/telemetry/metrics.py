"""Prometheus metrics configuration."""

from prometheus_client import Counter, Gauge, Histogram, Info

# Service info
SERVICE_INFO = Info("agentchat", "Agent chat core service information")

# Turn metrics
TURN_RUNS_TOTAL = Counter(
    "turn_runs_total",
    "Total turn pipeline runs",
    ["path", "status"],  # path: remote/local/fallback
)

TURN_DURATION_SECONDS = Histogram(
    "turn_duration_seconds",
    "Turn pipeline latency in seconds",
    ["path"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

TURNS_ACTIVE = Gauge(
    "turn_runs_active",
    "Number of turns currently in flight",
)

# Stage metrics
STAGE_EXECUTIONS_TOTAL = Counter(
    "stage_executions_total",
    "Total stage executions",
    ["stage_name", "status"],
)

STAGE_DURATION_SECONDS = Histogram(
    "stage_duration_seconds",
    "Stage execution latency in seconds",
    ["stage_name"],
    buckets=(0.001, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Backend metrics
BACKEND_REQUESTS_TOTAL = Counter(
    "backend_requests_total",
    "Total generation backend requests",
    ["backend", "status"],
)

BACKEND_REQUEST_DURATION_SECONDS = Histogram(
    "backend_request_duration_seconds",
    "Generation backend latency in seconds",
    ["backend"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

BACKEND_FALLBACKS_TOTAL = Counter(
    "backend_fallbacks_total",
    "Turns that fell back from the remote backend to the local simulator",
    ["reason"],
)


def set_service_info(version: str, environment: str) -> None:
    """Set service information.

    Args:
        version: Service version
        environment: Deployment environment
    """
    SERVICE_INFO.info({
        "version": version,
        "environment": environment,
    })


def record_turn_run(path: str, status: str, duration_seconds: float) -> None:
    """Record a completed turn.

    Args:
        path: Which path produced the reply (remote, local, fallback)
        status: Run status
        duration_seconds: Run duration in seconds
    """
    TURN_RUNS_TOTAL.labels(path=path, status=status).inc()
    TURN_DURATION_SECONDS.labels(path=path).observe(duration_seconds)


def record_stage_execution(stage_name: str, status: str, duration_seconds: float) -> None:
    STAGE_EXECUTIONS_TOTAL.labels(stage_name=stage_name, status=status).inc()
    STAGE_DURATION_SECONDS.labels(stage_name=stage_name).observe(duration_seconds)


def record_backend_request(backend: str, status: str, duration_seconds: float) -> None:
    """Record a generation backend call.

    Args:
        backend: Backend name
        status: success, timeout, error, ...
        duration_seconds: Request duration in seconds
    """
    BACKEND_REQUESTS_TOTAL.labels(backend=backend, status=status).inc()
    BACKEND_REQUEST_DURATION_SECONDS.labels(backend=backend).observe(duration_seconds)


def record_fallback(reason: str) -> None:
    BACKEND_FALLBACKS_TOTAL.labels(reason=reason).inc()
