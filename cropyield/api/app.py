"""
FastAPI forwarding function in front of the model gateway.

Endpoints:
    POST /predict-yield  — Validate, prompt the model, return a normalized prediction
    GET  /options        — Crop/soil options and label sets for building the form
    GET  /health         — Health check
    GET  /metrics        — Prometheus metrics

Failures are answered with {"error": <message>} and a status matching the
classified cause: 429 rate limit, 402 quota, 400 invalid input, 500 otherwise.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from cropyield import __version__
from cropyield.api.schemas import (
    PredictionRequest, PredictionResponse, ErrorResponse, HealthResponse,
    OptionsResponse, OptionModel,
)
from cropyield.config import GatewayConfig
from cropyield.data.schema import CROP_OPTIONS, SOIL_OPTIONS, QUALITY_GRADES, RISK_LEVELS
from cropyield.prediction.errors import PredictionError, classify_error
from cropyield.prediction.service import PredictionService

logger = logging.getLogger(__name__)

# ---- App setup ----
app = FastAPI(
    title="Crop Yield Prediction API",
    description="AI-assisted yield, quality and disease-risk prediction for tropical crops",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# ---- Prometheus metrics ----
REQUEST_COUNT = Counter("predict_yield_requests_total", "Total prediction requests")
REQUEST_ERRORS = Counter(
    "predict_yield_errors_total", "Failed prediction requests by error kind",
    ["kind"],
)
REQUEST_LATENCY = Histogram(
    "predict_yield_latency_seconds", "End-to-end prediction latency",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0],
)

# ---- Global service reference ----
service: PredictionService = None


def get_service() -> PredictionService:
    """Return the configured service, building it from the environment on first use."""
    global service
    if service is None:
        service = PredictionService(GatewayConfig.from_env())
    return service


@app.on_event("startup")
async def startup_event():
    svc = get_service()
    logger.info(
        "Prediction service ready: model=%s endpoint=%s",
        svc.config.model, svc.config.endpoint,
    )
    if svc.config.resolve_api_key() is None:
        logger.warning("%s is not set; predictions will fail", svc.config.api_key_env)


def _error_response(error: PredictionError) -> JSONResponse:
    REQUEST_ERRORS.labels(kind=error.kind).inc()
    return JSONResponse(status_code=error.http_status, content={"error": error.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "Invalid request body"
    if errors:
        loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        detail = f"Invalid request body: {loc} {errors[0].get('msg', '')}".strip()
    REQUEST_ERRORS.labels(kind="ValidationError").inc()
    return JSONResponse(status_code=400, content={"error": detail})


@app.post(
    "/predict-yield",
    response_model=PredictionResponse,
    responses={
        400: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def predict_yield(request: PredictionRequest):
    """Generate a yield prediction for the submitted field conditions."""
    REQUEST_COUNT.inc()
    start_time = time.time()

    try:
        # The gateway call blocks; keep it off the event loop
        report = await run_in_threadpool(get_service().run, request.model_dump())
        return JSONResponse(content=report.result.to_dict())
    except PredictionError as e:
        logger.error("Error in predict-yield: %s: %s", e.kind, e.message)
        return _error_response(e)
    except Exception as e:
        classified = classify_error(e)
        REQUEST_ERRORS.labels(kind=classified.kind).inc()
        return JSONResponse(status_code=500, content={"error": classified.message})
    finally:
        REQUEST_LATENCY.observe(time.time() - start_time)


@app.get("/options", response_model=OptionsResponse)
async def options():
    """Crop and soil choices plus the label sets used in predictions."""
    return OptionsResponse(
        crops=[OptionModel(**c) for c in CROP_OPTIONS],
        soils=[OptionModel(**s) for s in SOIL_OPTIONS],
        quality_grades=QUALITY_GRADES,
        risk_levels=RISK_LEVELS,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    svc = get_service()
    configured = svc.config.resolve_api_key() is not None
    return HealthResponse(
        status="healthy" if configured else "degraded",
        credential_configured=configured,
        model=svc.config.model,
        version=__version__,
    )


@app.get("/metrics")
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
