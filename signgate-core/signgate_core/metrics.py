"""
Gate Metrics
============
Prometheus metrics for request gate decisions.

Usage:
    from fastapi import FastAPI
    from signgate_core.metrics import get_metrics_app

    app = FastAPI()
    app.mount("/metrics", get_metrics_app())
"""

from prometheus_client import CollectorRegistry, Counter, Histogram, make_asgi_app

# Custom registry so several gates in one process do not collide with the default one
GATE_REGISTRY = CollectorRegistry()

GATE_DECISIONS_TOTAL = Counter(
    name="signgate_gate_decisions_total",
    documentation="Signed request gate decisions",
    labelnames=["decision", "reason"],
    registry=GATE_REGISTRY,
)

GATE_EVALUATION_SECONDS = Histogram(
    name="signgate_gate_evaluation_seconds",
    documentation="Time spent evaluating a signed request",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
    registry=GATE_REGISTRY,
)


def record_decision(decision: str, reason: str, duration: float) -> None:
    """Record one gate evaluation."""
    GATE_DECISIONS_TOTAL.labels(decision=decision, reason=reason).inc()
    GATE_EVALUATION_SECONDS.observe(duration)


def get_metrics_app():
    """ASGI app exposing the gate registry."""
    return make_asgi_app(registry=GATE_REGISTRY)
