from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import os
import logging

from waiting_room.api import health, queue
from waiting_room.rate_limiter import limiter
from waiting_room.core.config import settings
from waiting_room.core.logging_config import setup_logging
from waiting_room.core.store import OrderedScoreStore
from waiting_room.exceptions import APIError
from waiting_room.services.admission_gate import AdmissionGateService
from waiting_room.services.admission_scheduler import AdmissionSchedulerService
from waiting_room.services.token_issuer import TokenIssuer
from waiting_room.services.wait_queue import WaitQueueService

logger = logging.getLogger(__name__)

app = FastAPI(title="Waiting Room")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if os.getenv("TESTING") != "true":
    app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.message},
    )


def build_services(store: OrderedScoreStore):
    """Wires the queue services around a store and attaches them to app.state."""
    token_issuer = TokenIssuer(prefix=settings.TOKEN_PREFIX)
    admission_gate = AdmissionGateService(store, token_issuer, atomic=settings.ATOMIC_PROMOTION)

    app.state.store = store
    app.state.token_issuer = token_issuer
    app.state.wait_queue_service = WaitQueueService(store)
    app.state.admission_gate_service = admission_gate
    app.state.admission_scheduler = AdmissionSchedulerService(
        store,
        admission_gate,
        config=settings.scheduler_config()
    )


@app.on_event("startup")
async def startup_event():
    setup_logging(settings.LOG_FILE_PATH)

    logger.info(f"Starting up in {settings.ENVIRONMENT} mode")

    store = OrderedScoreStore(settings.REDIS_URL, socket_timeout=settings.REDIS_SOCKET_TIMEOUT)
    await store.connect()
    build_services(store)

    if settings.SCHEDULER_ENABLED:
        await app.state.admission_scheduler.start()
    else:
        logger.info("Admission scheduler disabled (SCHEDULER_ENABLED=false)")


@app.on_event("shutdown")
async def shutdown_event():
    if hasattr(app.state, "admission_scheduler"):
        await app.state.admission_scheduler.stop()
    if hasattr(app.state, "store"):
        await app.state.store.close()


app.include_router(health.router, prefix="/api/v1/health", tags=["Health Check"])
app.include_router(queue.router, prefix="/api/v1/queue", tags=["Queue"])
