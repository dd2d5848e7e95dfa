from fastapi import Request

from waiting_room.core.store import OrderedScoreStore
from waiting_room.services.admission_gate import AdmissionGateService
from waiting_room.services.admission_scheduler import AdmissionSchedulerService
from waiting_room.services.token_issuer import TokenIssuer
from waiting_room.services.wait_queue import WaitQueueService


def get_wait_queue_service(request: Request) -> WaitQueueService:
    return request.app.state.wait_queue_service

def get_admission_gate_service(request: Request) -> AdmissionGateService:
    return request.app.state.admission_gate_service

def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer

def get_admission_scheduler(request: Request) -> AdmissionSchedulerService:
    return request.app.state.admission_scheduler

def get_store(request: Request) -> OrderedScoreStore:
    return request.app.state.store
