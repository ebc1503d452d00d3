"""
Observability infrastructure for relational neural gas
Structured logging, Prometheus metrics, operation tracing and health status
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Dict, Any

import psutil
import structlog
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# Prometheus Metrics
REQUESTS_TOTAL = Counter(
    "relational_gas_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "relational_gas_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

TRAINING_DURATION = Histogram(
    "relational_gas_training_duration_seconds",
    "Relational neural gas training duration in seconds",
    ["n_prototypes"],
)

TRAINING_ITERATIONS = Counter(
    "relational_gas_training_iterations_total", "Total training iterations completed"
)

MODELS_CREATED = Counter(
    "relational_gas_models_created_total", "Total number of models trained"
)

MODELS_ACTIVE = Gauge(
    "relational_gas_models_active", "Number of models currently held in memory"
)

ASSIGNMENT_REQUESTS = Counter(
    "relational_gas_assignments_total", "Total nearest-prototype assignment requests"
)

OBJECTS_ASSIGNED = Counter(
    "relational_gas_objects_assigned_total", "Total objects mapped to a prototype"
)

SYSTEM_MEMORY_USAGE = Gauge(
    "relational_gas_system_memory_usage_bytes", "System memory usage in bytes"
)

SYSTEM_CPU_USAGE = Gauge(
    "relational_gas_system_cpu_usage_percent", "System CPU usage percentage"
)


class CorrelationIDProcessor:
    """Mark log entries emitted outside a traced operation"""

    def __call__(self, logger, method_name, event_dict):
        event_dict.setdefault("correlation_id", "unknown")
        return event_dict


def setup_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """Configure structured logging with structlog"""
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        CorrelationIDProcessor(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


def get_correlation_id() -> str:
    """Generate a new correlation ID"""
    return str(uuid.uuid4())


@contextmanager
def trace_operation(operation_name: str, **extra_context):
    """Context manager for tracing operations with logging"""
    logger = structlog.get_logger()
    correlation_id = get_correlation_id()
    start_time = time.time()

    logger.info(
        "Operation started",
        operation=operation_name,
        correlation_id=correlation_id,
        **extra_context,
    )

    try:
        yield correlation_id
    except Exception as e:
        logger.error(
            "Operation failed",
            operation=operation_name,
            correlation_id=correlation_id,
            duration_seconds=time.time() - start_time,
            error=str(e),
            error_type=type(e).__name__,
            **extra_context,
        )
        raise

    logger.info(
        "Operation completed",
        operation=operation_name,
        correlation_id=correlation_id,
        duration_seconds=time.time() - start_time,
        **extra_context,
    )


def update_system_metrics() -> None:
    """Update system-level metrics"""
    try:
        SYSTEM_MEMORY_USAGE.set(psutil.virtual_memory().used)
        SYSTEM_CPU_USAGE.set(psutil.cpu_percent(interval=None))
    except (psutil.Error, OSError) as e:
        structlog.get_logger().error("Failed to update system metrics", error=str(e))


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format"""
    update_system_metrics()
    return generate_latest()


def log_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Log request metrics to Prometheus"""
    REQUESTS_TOTAL.labels(
        method=method, endpoint=endpoint, status_code=status_code
    ).inc()
    REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


def log_training_metrics(n_prototypes: int, duration: float, iterations: int):
    """Log training metrics to Prometheus"""
    TRAINING_DURATION.labels(n_prototypes=str(n_prototypes)).observe(duration)
    TRAINING_ITERATIONS.inc(iterations)
    MODELS_CREATED.inc()


def log_assignment_metrics(n_objects: int):
    """Log assignment metrics to Prometheus"""
    ASSIGNMENT_REQUESTS.inc()
    OBJECTS_ASSIGNED.inc(n_objects)


def update_active_models_count(count: int):
    MODELS_ACTIVE.set(count)


class RequestTracingMiddleware:
    """ASGI middleware adding a correlation ID to every HTTP request"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = get_correlation_id()
        scope["correlation_id"] = correlation_id

        async def send_with_correlation_id(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-correlation-id", correlation_id.encode()))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_with_correlation_id)


def get_health_status() -> Dict[str, Any]:
    """Get detailed health status"""
    try:
        memory_info = psutil.virtual_memory()
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "system": {
                "memory": {
                    "total": memory_info.total,
                    "available": memory_info.available,
                    "percentage": memory_info.percent,
                },
                "cpu": {"usage_percent": psutil.cpu_percent(interval=None)},
            },
        }
    except (psutil.Error, OSError) as e:
        return {"status": "unhealthy", "timestamp": time.time(), "error": str(e)}

