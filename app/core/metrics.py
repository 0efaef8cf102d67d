from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

GEMINI_CALL_DURATION = Histogram(
    "hakawati_gemini_call_duration_seconds",
    "Latency for Gemini API calls per operation.",
    ["operation"],
    registry=registry,
)

GEMINI_CALLS_TOTAL = Counter(
    "hakawati_gemini_calls_total",
    "Total Gemini API calls partitioned by operation and status.",
    ["operation", "status"],
    registry=registry,
)

JSON_PARSE_FAILURES = Counter(
    "hakawati_json_parse_failures_total",
    "Number of times parsing JSON from Gemini failed.",
    ["operation"],
    registry=registry,
)

BATCH_SCENES_TOTAL = Counter(
    "hakawati_batch_scenes_total",
    "Scenes visited by batch image runs, by outcome.",
    ["outcome"],
    registry=registry,
)

STORE_WRITES_TOTAL = Counter(
    "hakawati_store_writes_total",
    "Whole-document writes to the local store, by document key.",
    ["key"],
    registry=registry,
)

STORE_CORRUPT_READS_TOTAL = Counter(
    "hakawati_store_corrupt_reads_total",
    "Stored documents that failed to parse and were treated as absent.",
    ["key"],
    registry=registry,
)


@contextmanager
def track_gemini_call(operation: str):
    timer = GEMINI_CALL_DURATION.labels(operation=operation).time()
    timer.__enter__()
    try:
        yield
        GEMINI_CALLS_TOTAL.labels(operation=operation, status="success").inc()
    except Exception:
        GEMINI_CALLS_TOTAL.labels(operation=operation, status="error").inc()
        raise
    finally:
        timer.__exit__(None, None, None)


def increment_json_parse_failure(operation: str) -> None:
    JSON_PARSE_FAILURES.labels(operation=operation).inc()


def record_batch_scene(outcome: str) -> None:
    BATCH_SCENES_TOTAL.labels(outcome=outcome).inc()


def record_store_write(key: str) -> None:
    STORE_WRITES_TOTAL.labels(key=key).inc()


def record_corrupt_read(key: str) -> None:
    STORE_CORRUPT_READS_TOTAL.labels(key=key).inc()


def get_metrics_payload() -> bytes:
    return generate_latest(registry)
