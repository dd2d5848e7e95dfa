import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import PlainTextResponse

from waiting_room.api.dependencies import (
    get_admission_gate_service,
    get_token_issuer,
    get_wait_queue_service,
)
from waiting_room.core.config import settings
from waiting_room.schemas.queue import (
    AdmittedUserResponse,
    AllowedUserResponse,
    AllowUserResponse,
    RankNumberResponse,
    RegisterUserResponse,
)
from waiting_room.services.admission_gate import AdmissionGateService
from waiting_room.services.token_issuer import TokenIssuer
from waiting_room.services.wait_queue import WaitQueueService

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_QUEUE = "default"
# Queue names are a single segment of the store key, so ":" is not allowed.
QUEUE_NAME_PATTERN = r"^[^:]+$"


def token_cookie_name(queue: str) -> str:
    return f"user-queue-{queue}-token"


@router.post("/", response_model=RegisterUserResponse)
async def register_user(
    user_id: int = Query(...),
    queue: str = Query(DEFAULT_QUEUE, pattern=QUEUE_NAME_PATTERN),
    wait_queue_service: WaitQueueService = Depends(get_wait_queue_service)
):
    """
    Registers a user in the queue's wait collection and returns its rank.
    """
    rank = await wait_queue_service.register(queue, user_id)
    return RegisterUserResponse(rank=rank)

@router.post("/allow", response_model=AllowUserResponse)
async def allow_user(
    count: int = Query(..., ge=0),
    queue: str = Query(DEFAULT_QUEUE, pattern=QUEUE_NAME_PATTERN),
    admission_gate_service: AdmissionGateService = Depends(get_admission_gate_service)
):
    """
    Manually promotes up to `count` waiting users into the proceed collection.
    """
    allowed = await admission_gate_service.promote(queue, count)
    logger.info(f"Manual promotion on {queue} queue: requested {count}, allowed {allowed}")
    return AllowUserResponse(requested_count=count, allowed_count=allowed)

@router.get("/allowed", response_model=AllowedUserResponse)
async def is_allowed_user(
    request: Request,
    user_id: int = Query(...),
    queue: str = Query(DEFAULT_QUEUE, pattern=QUEUE_NAME_PATTERN),
    token: Optional[str] = Query(None),
    admission_gate_service: AdmissionGateService = Depends(get_admission_gate_service)
):
    """
    Checks the presented token (query parameter, else the queue's cookie).
    """
    presented = token if token is not None else request.cookies.get(token_cookie_name(queue), "")
    allowed = await admission_gate_service.check_admission_token(queue, user_id, presented)
    return AllowedUserResponse(allowed=allowed)

@router.get("/admitted", response_model=AdmittedUserResponse)
async def is_admitted_user(
    user_id: int = Query(...),
    queue: str = Query(DEFAULT_QUEUE, pattern=QUEUE_NAME_PATTERN),
    admission_gate_service: AdmissionGateService = Depends(get_admission_gate_service)
):
    admitted = await admission_gate_service.is_admitted(queue, user_id)
    return AdmittedUserResponse(admitted=admitted)

@router.get("/rank", response_model=RankNumberResponse)
async def get_user_rank(
    user_id: int = Query(...),
    queue: str = Query(DEFAULT_QUEUE, pattern=QUEUE_NAME_PATTERN),
    wait_queue_service: WaitQueueService = Depends(get_wait_queue_service)
):
    rank = await wait_queue_service.get_rank(queue, user_id)
    return RankNumberResponse(rank=rank)

@router.get("/touch", response_class=PlainTextResponse)
async def touch(
    response: Response,
    user_id: int = Query(...),
    queue: str = Query(DEFAULT_QUEUE, pattern=QUEUE_NAME_PATTERN),
    token_issuer: TokenIssuer = Depends(get_token_issuer)
):
    """
    Issues the access token for (queue, user_id) and sets it as a cookie.
    """
    token = token_issuer.derive(queue, user_id)
    response.set_cookie(
        key=token_cookie_name(queue),
        value=token,
        max_age=settings.TOKEN_COOKIE_MAX_AGE,
        path="/",
    )
    return token
