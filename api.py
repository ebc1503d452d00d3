"""
FastAPI web service for relational neural gas with observability
"""

import os
import time
import uuid
import structlog
from typing import List, Optional, Dict, Any

import numpy as np
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import BaseModel, Field
import uvicorn

from relational_gas import (
    RelationalNeuralGas,
    RNGConfig,
    NeighborhoodStrategy,
    PreconditionViolationError,
    setup_logging,
    trace_operation,
    get_metrics,
    get_health_status,
    log_training_metrics,
    log_assignment_metrics,
    update_active_models_count,
    RequestTracingMiddleware,
)
from relational_gas.observability import log_request_metrics, CONTENT_TYPE_LATEST

VERSION = "0.1.0"


# Pydantic models for API requests/responses
class RNGConfigRequest(BaseModel):
    """Configuration for relational neural gas training"""

    n_prototypes: int = Field(default=2, ge=1, le=1000)
    n_iterations: int = Field(default=100, ge=1, le=10000)
    initial_lambda: Optional[float] = Field(default=None, gt=0)
    final_lambda: float = Field(default=0.01, gt=0)
    neighborhood: NeighborhoodStrategy = NeighborhoodStrategy.EXACT
    logging: bool = False
    seed: Optional[int] = Field(default=None, ge=0)


class TrainingRequest(BaseModel):
    """Request to train relational neural gas"""

    dissimilarities: List[List[float]] = Field(
        description="Square matrix of pairwise dissimilarities"
    )
    config: RNGConfigRequest = Field(default_factory=RNGConfigRequest)


class TrainingResponse(BaseModel):
    """Response from training"""

    model_id: str
    assignments: List[int]
    quantization_error: float
    logged_quantization_error: List[float]
    iterations: int
    message: str


class AssignmentRequest(BaseModel):
    """Request for nearest-prototype assignment"""

    model_id: str
    dissimilarities: List[List[float]] = Field(
        description="Dissimilarities of the reference objects (rows) to new objects (columns)"
    )


class AssignmentResponse(BaseModel):
    """Response from assignment"""

    assignments: List[int]
    model_id: str


class ModelInfo(BaseModel):
    """Information about a trained model"""

    model_id: str
    config: Dict[str, Any]
    n_prototypes: int
    n_objects: int
    total_iterations: int
    created_at: str
    prototypes: Optional[List[List[float]]] = None


# Trained models live in memory only
models_storage: Dict[str, RelationalNeuralGas] = {}

# Initialize observability
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=os.getenv("LOG_FORMAT", "json").lower() == "json",
)

logger = structlog.get_logger()

app = FastAPI(
    title="Relational Neural Gas API",
    description="A REST API for clustering relational data with relational neural gas",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        correlation_id = request.scope.get("correlation_id", "unknown")

        response = await call_next(request)

        duration = time.time() - start_time
        log_request_metrics(
            method=request.method,
            endpoint=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )

        logger.info(
            "HTTP request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration_seconds=duration,
            correlation_id=correlation_id,
        )

        return response


app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestTracingMiddleware)


def _as_matrix(rows: List[List[float]]) -> np.ndarray:
    if not rows or not rows[0]:
        raise HTTPException(status_code=400, detail="Empty matrix provided")
    if len({len(row) for row in rows}) != 1:
        raise HTTPException(status_code=400, detail="Matrix rows differ in length")
    return np.array(rows, dtype=np.float64)


def _get_model(model_id: str) -> RelationalNeuralGas:
    if model_id not in models_storage:
        raise HTTPException(status_code=404, detail="Model not found")
    return models_storage[model_id]


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {"message": "Relational Neural Gas API", "version": VERSION, "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Health check endpoint with system status"""
    health_status = get_health_status()
    health_status["models_loaded"] = len(models_storage)
    health_status["version"] = VERSION

    update_active_models_count(len(models_storage))

    logger.info("Health check requested", status=health_status["status"])
    return health_status


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)


@app.post("/train", response_model=TrainingResponse)
async def train_rng(request: TrainingRequest):
    """Train relational neural gas on a dissimilarity matrix"""
    data = _as_matrix(request.dissimilarities)

    with trace_operation(
        "rng_training",
        n_prototypes=request.config.n_prototypes,
        data_shape=f"{data.shape[0]}x{data.shape[1]}",
    ) as correlation_id:
        try:
            config = RNGConfig(n_objects=data.shape[1], **request.config.model_dump())

            start_time = time.time()
            model = RelationalNeuralGas(config)
            history = model.train(data)
            training_duration = time.time() - start_time

            log_training_metrics(
                n_prototypes=config.n_prototypes,
                duration=training_duration,
                iterations=config.n_iterations,
            )

            assignments = model.use(data)
            qe = model.quantization_error(data)
        except PreconditionViolationError as e:
            logger.error(
                "Training failed - invalid data",
                error=str(e),
                correlation_id=correlation_id,
            )
            raise HTTPException(status_code=400, detail=f"Invalid data: {e}")

        model_id = str(uuid.uuid4())
        models_storage[model_id] = model
        update_active_models_count(len(models_storage))

        logger.info(
            "Training completed successfully",
            model_id=model_id,
            correlation_id=correlation_id,
            quantization_error=qe,
            training_duration=training_duration,
        )

        return TrainingResponse(
            model_id=model_id,
            assignments=assignments.tolist(),
            quantization_error=qe,
            logged_quantization_error=history.quantization_errors,
            iterations=model.metadata["total_iterations"],
            message=f"Trained {config.n_prototypes} prototypes on {data.shape[0]} objects",
        )


@app.post("/assign", response_model=AssignmentResponse)
async def assign(request: AssignmentRequest):
    """Map objects to their nearest prototype"""
    model = _get_model(request.model_id)
    data = _as_matrix(request.dissimilarities)

    try:
        assignments = model.use(data)
    except PreconditionViolationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid data: {e}")

    log_assignment_metrics(len(assignments))
    return AssignmentResponse(assignments=assignments.tolist(), model_id=request.model_id)


@app.get("/models", response_model=List[str])
async def list_models():
    """List all available models"""
    return list(models_storage.keys())


@app.get("/models/{model_id}", response_model=ModelInfo)
async def get_model_info(model_id: str, include_prototypes: bool = False):
    """Get information about a specific model"""
    model = _get_model(model_id)
    info = model.get_info()

    return ModelInfo(
        model_id=model_id,
        config=info["config"],
        n_prototypes=info["n_prototypes"],
        n_objects=info["n_objects"],
        total_iterations=info["total_iterations"],
        created_at=model.metadata["creation_time"],
        prototypes=model.get_prototypes().tolist() if include_prototypes else None,
    )


@app.delete("/models/{model_id}")
async def delete_model(model_id: str):
    """Delete a specific model"""
    _get_model(model_id)
    del models_storage[model_id]
    update_active_models_count(len(models_storage))
    return {"message": f"Model {model_id} deleted successfully"}


def main():
    """Run the FastAPI server"""
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("api:app", host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
