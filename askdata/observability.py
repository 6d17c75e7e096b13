from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram, start_http_server

from .config import ObservabilityConfig

STAGE_LATENCY = Histogram("askdata_stage_latency_seconds", "Latency of each question stage", ["stage"])
REQUEST_COUNTER = Counter("askdata_requests_total", "Questions answered, by outcome", ["status"])
VISUALIZATION_DEGRADED = Counter(
    "askdata_visualization_degraded_total",
    "Visualization advice replaced by the non-visualizable default after an advisor error",
)


def init_metrics_server(cfg: ObservabilityConfig) -> None:
    if cfg.metrics_port > 0:
        start_http_server(cfg.metrics_port)


@contextmanager
def record_latency(stage: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        STAGE_LATENCY.labels(stage=stage).observe(time.perf_counter() - start)


__all__ = ["init_metrics_server", "record_latency", "STAGE_LATENCY", "REQUEST_COUNTER", "VISUALIZATION_DEGRADED"]
