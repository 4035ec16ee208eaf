"""
Locus Site Selection - Main Application Entry Point

This module initializes the FastAPI application with observability through
Logfire, sets up middleware, and exposes the Locus genetic algorithm over
HTTP.
"""

import os
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, Any, Optional, Literal

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
import logfire

from src.core.config import settings
from src.locus import (
    CriteriaConfig,
    DEFAULT_CRITERIA,
    GeneticAlgorithmEngine,
    LocusConfig,
    LocusError,
    LoggingConfig,
    WeightedSumFitness,
    ParameterError
)
from src.locus.core.config import build_config

# Load environment variables
load_dotenv()

# Configure Logfire for observability
logfire.configure(**settings.get_logfire_settings())


def load_active_criteria() -> CriteriaConfig:
    """Criteria from LOCUS_CRITERIA_FILE, or the built-in solar site criteria."""
    if settings.locus_criteria_file:
        return CriteriaConfig.load(settings.locus_criteria_file)
    return DEFAULT_CRITERIA


# Fail fast on a malformed criteria file
criteria = load_active_criteria()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.
    """
    logfire.info(
        "Application starting up",
        environment=settings.environment,
        version=settings.app_version,
        criteria=list(criteria.categories)
    )

    yield

    logfire.info("Application shutting down")


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    description=(
        "Decision-support service that searches for the best-scoring location "
        "over a set of weighted criteria with a genetic algorithm"
    ),
    version=settings.app_version,
    docs_url=settings.api_docs_url,
    openapi_url=settings.api_openapi_url,
    lifespan=lifespan
)

# Enable Logfire instrumentation
logfire.instrument_fastapi(app, capture_headers=True)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time", "X-Request-ID"]
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """
    Add processing time header and request tracking.
    """
    request_id = str(uuid.uuid4())
    start_time = time.time()

    with logfire.span(
        "HTTP Request",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None
    ):
        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id

        logfire.info(
            "Request completed",
            request_id=request_id,
            status_code=response.status_code,
            process_time=process_time
        )

        return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle HTTP exceptions with proper logging.
    """
    logfire.error(
        "HTTP Exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


@app.exception_handler(LocusError)
async def locus_exception_handler(request: Request, exc: LocusError):
    """
    Report invalid run parameters or configuration as unprocessable.
    """
    logfire.warning(
        "Rejected optimization request",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path
    )

    return JSONResponse(
        status_code=422,
        content={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "status_code": 422,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


class OptimizeRequest(BaseModel):
    """Parameters of one optimization run; omitted values use the service defaults."""

    generations: Optional[int] = Field(default=None, description="Maximum number of generations")
    population_size: Optional[int] = Field(default=None, description="Locations per generation")
    elite_rate: Optional[float] = Field(default=None, description="Share of elites kept each generation")
    mutation_rate: Optional[float] = Field(default=None, description="Probability of mutating an offspring")
    mutation_scope: Literal["location", "gene"] = Field(default="location")
    early_stop_threshold: Optional[float] = Field(default=None, description="Minimum best-fitness change")
    patience: Optional[int] = Field(default=None, description="Generations without improvement before stopping")
    custom_weights: Optional[Dict[str, float]] = Field(
        default=None,
        description="Fixed weight per criterion; sampled around the defaults when omitted"
    )
    seed: Optional[int] = Field(default=None, description="Random seed for a reproducible run")


def build_run_config(request: OptimizeRequest) -> LocusConfig:
    """Merge request values over the service defaults."""
    evolution = settings.get_run_defaults()
    evolution.update(request.model_dump(
        include={
            "generations", "population_size", "elite_rate", "mutation_rate",
            "early_stop_threshold", "patience"
        },
        exclude_none=True
    ))
    evolution["mutation_scope"] = request.mutation_scope

    if evolution["population_size"] > settings.max_population_size:
        raise ParameterError(
            f"population_size {evolution['population_size']} exceeds the limit "
            f"of {settings.max_population_size}"
        )
    if evolution["generations"] > settings.max_generations:
        raise ParameterError(
            f"generations {evolution['generations']} exceeds the limit of {settings.max_generations}"
        )

    seed = request.seed if request.seed is not None else settings.locus_random_seed
    return build_config(
        evolution=evolution,
        logging=LoggingConfig(log_interval=max(1, evolution["generations"] // 10)),
        random_seed=seed
    )


# Root endpoint
@app.get("/", tags=["Health"])
async def root() -> Dict[str, Any]:
    """
    Root endpoint providing basic API information.
    """
    return {
        "message": "Locus Site Selection API",
        "status": "operational",
        "version": settings.app_version,
        "docs": settings.api_docs_url,
        "health": "/health"
    }


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.
    """
    with logfire.span("Health check"):
        health_status = {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "service": settings.logfire_service_name,
            "environment": settings.environment,
            "version": settings.app_version,
            "checks": {
                "api": "operational",
                "genetic_algorithm": "operational",
                "criteria": f"{len(criteria.categories)} criteria loaded"
            }
        }

        logfire.info("Health check passed")
        return health_status


@app.get(f"{settings.api_v1_prefix}/criteria", tags=["Optimization"])
async def get_criteria() -> Dict[str, Any]:
    """
    The criteria locations are scored on.
    """
    return criteria.to_dict()


@app.post(f"{settings.api_v1_prefix}/optimize", tags=["Optimization"])
def optimize(request: OptimizeRequest) -> Dict[str, Any]:
    """
    Run the genetic algorithm and return the best location found.
    """
    config = build_run_config(request)

    with logfire.span("Optimize", seed=config.random_seed):
        engine = GeneticAlgorithmEngine(
            config,
            criteria=criteria,
            custom_weights=request.custom_weights
        )
        result = engine.run()

    metrics = WeightedSumFitness(criteria).calculate_metrics(result.best_location, result.best_weights)

    return {
        "best_location": result.best_location.to_dict(),
        "best_weights": dict(result.best_weights),
        "best_fitness": result.best_fitness,
        "contributions": metrics.details["contributions"],
        "labels": criteria.labels(),
        "state": result.state.value,
        "generations_run": result.generations_run,
        "early_stop_generation": result.early_stop_generation
    }


if __name__ == "__main__":
    import uvicorn

    # Development server configuration
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=int(os.getenv("PORT", settings.port)),
        reload=settings.debug,
        log_level="info"
    )
