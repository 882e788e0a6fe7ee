from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging
from app.core.middleware import RequestLoggingMiddleware
from app.modules.alerts import router as alerts_router
from app.modules.alerts.service import build_orchestrator
from app.modules.patients import router as patients_router
from app.modules.vitals import router as vitals_router
from app.shared.schemas import utc_now

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield

    # Shutdown: release the SMS provider's HTTP connection pool
    await app.state.orchestrator.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    ## ResGuard Backend API

    This API provides:
    * **Vitals Evaluation**: Classify readings against clinical thresholds
    * **Critical Notifications**: Rate-limited SMS to the on-call doctor
    * **Alert History**: Browse and resolve recorded alerts
    """,
    version="0.1.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# One pipeline per app; tests override `get_orchestrator` or replace this attribute.
app.state.orchestrator = build_orchestrator(settings)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)

app.include_router(
    patients_router.router, prefix=f"{settings.API_PREFIX}/patients", tags=["patients"]
)
app.include_router(
    vitals_router.router, prefix=f"{settings.API_PREFIX}/vitals", tags=["vitals"]
)
app.include_router(
    alerts_router.router, prefix=f"{settings.API_PREFIX}/alerts", tags=["alerts"]
)


@app.get("/health")
def health_check() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": utc_now().isoformat(),
        "environment": settings.ENVIRONMENT,
        "notificationMode": app.state.orchestrator.dispatcher.provider.value,
    }
