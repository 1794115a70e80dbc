from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from api.deps import get_analysis_cache
from api.routes.analyze import router as analyze_router
from api.routes.generate import router as generate_router
from api.routes.voicings import router as voicings_router
from infrastructure.metrics import get_metrics_response

app = FastAPI(title="Fretboard Harmony Engine")

# CORS: allow the fretboard UI (React dev server) to call the API
# localhost and 127.0.0.1 are distinct origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analyze_router)
app.include_router(voicings_router)
app.include_router(generate_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Return a simple liveness check."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format.
    """
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)


@app.post("/cache/flush")
def cache_flush() -> dict[str, int]:
    """Drop every cached analysis response.

    Returns:
        Dict with ``deleted`` count.
    """
    cache = get_analysis_cache()
    return {"deleted": cache.flush()}


@app.get("/cache/stats")
def cache_stats() -> dict:
    """Return basic analysis cache statistics."""
    cache = get_analysis_cache()
    return cache.stats()
