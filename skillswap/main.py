from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from skillswap.config import get_settings
from skillswap.database import init_db
from skillswap.middleware.correlation import CorrelationMiddleware
from skillswap.middleware.rate_limit import limiter
from skillswap.routes import auth, suggestion
from skillswap.services.provider import ProviderUnavailableError, get_provider
from skillswap.utils import metrics
from skillswap.utils.logger import logger

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS - Explicit origins from config
allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)


@app.exception_handler(ProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError):
    logger.error(f"Suggestion provider unavailable: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Suggestion service is not available"})


# Startup: Initialize database
@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name} backend...")
    await init_db()
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")


# Health check endpoint (minimal response to prevent information disclosure)
@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/metrics")
async def get_metrics():
    snapshot = metrics.get_snapshot()
    try:
        provider = get_provider()
    except ProviderUnavailableError:
        provider = None
    gateway = getattr(provider, "gateway", None)
    snapshot["circuits"] = gateway.get_circuit_states() if gateway else {}
    return snapshot


# Register routes
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(suggestion.router, prefix="/api/suggestion", tags=["Suggestions"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "skillswap.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )
