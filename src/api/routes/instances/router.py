"""Rotas HTTP de instâncias — fachada fina sobre o InstanceRegistry.

Erros de domínio viram status HTTP:
- DuplicateNameError → 409
- InstanceNotFoundError / referência desconhecida → 404
- SessionUnavailableError / TransportNotReadyError → 409
- ValueError (nome/destino inválido) → 422
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from api.routes.instances.models import (
    CreateInstanceRequest,
    CreateInstanceResponse,
    InstanceDetailResponse,
    InstanceSummaryResponse,
    PairingCodeResponse,
    SendMessageRequest,
    SendMessageResponse,
    StatusResponse,
)
from app.instances import InstanceRegistry, InstanceSnapshot
from utils.errors import (
    DuplicateNameError,
    InstanceNotFoundError,
    SessionUnavailableError,
    TransportNotReadyError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CREATED_MESSAGE = "Instância criada; aguarde o código de pareamento"


def _registry(request: Request) -> InstanceRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="registry não inicializado",
        )
    return registry


def _resolve_or_404(registry: InstanceRegistry, reference: str) -> InstanceSnapshot:
    snapshot = registry.resolve(reference)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Instância não encontrada",
        )
    return snapshot


@router.post("/create", response_model=CreateInstanceResponse)
async def create_instance(body: CreateInstanceRequest, request: Request) -> CreateInstanceResponse:
    """Cria instância e inicia o pareamento em background."""
    registry = _registry(request)
    try:
        instance_id = await registry.create(body.name, body.webhook_url)
    except DuplicateNameError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return CreateInstanceResponse(instance_id=instance_id, message=CREATED_MESSAGE)


@router.get("", response_model=list[InstanceSummaryResponse])
async def list_instances(request: Request) -> list[InstanceSummaryResponse]:
    """Lista resumos (id, nome, estado) das instâncias ativas."""
    return [
        InstanceSummaryResponse(**summary.to_dict())
        for summary in _registry(request).list()
    ]


@router.get("/{reference}/qrcode", response_model=PairingCodeResponse)
async def get_pairing_code(reference: str, request: Request) -> PairingCodeResponse:
    """Estado e payload de pareamento corrente (null fora de AWAITING_PAIRING)."""
    snapshot = _resolve_or_404(_registry(request), reference)
    return PairingCodeResponse(status=snapshot.state.value, qr_code=snapshot.pairing_payload)


@router.get("/{reference}", response_model=InstanceDetailResponse)
async def get_instance(reference: str, request: Request) -> InstanceDetailResponse:
    """Snapshot da instância por id ou nome."""
    snapshot = _resolve_or_404(_registry(request), reference)
    return InstanceDetailResponse.from_snapshot_dict(snapshot.to_dict())


@router.post("/{reference}/message", response_model=SendMessageResponse)
async def send_message(
    reference: str,
    body: SendMessageRequest,
    request: Request,
) -> SendMessageResponse:
    """Envia mensagem de texto pela instância."""
    registry = _registry(request)
    try:
        handle = await registry.send(reference, body.number, body.message)
    except InstanceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SessionUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "instance_unavailable", "state": exc.state.value},
        ) from exc
    except TransportNotReadyError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "transport_not_ready"},
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    logger.info(
        "instance_message_sent",
        extra={"instance_id": handle.instance_id, "message_id": handle.message_id},
    )
    return SendMessageResponse(message_id=handle.message_id)


@router.delete("/{reference}", response_model=StatusResponse)
async def delete_instance(reference: str, request: Request) -> StatusResponse:
    """Remove instância (idempotente: referência desconhecida também retorna ok)."""
    await _registry(request).remove_by_reference(reference)
    return StatusResponse()
