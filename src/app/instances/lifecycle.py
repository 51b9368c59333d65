"""Ciclo de vida de uma instância (uma geração de adapter).

Cada InstanceLifecycle possui uma fila de eventos e um único worker:
eventos da mesma instância são processados estritamente em ordem de
chegada e só o worker escreve no InstanceRecord. Falhas do transporte
viram transições de estado e eventos de webhook, nunca exceções para
o registry.

Fluxo típico:
    INITIALIZING → AWAITING_PAIRING → AUTHENTICATED → CONNECTED ⇄ DEGRADED
    qualquer → DISCONNECTED → (reconexão: novo lifecycle) | TERMINATED
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.instances.addressing import format_destination
from app.instances.classifier import classify_message
from app.instances.events import (
    CONNECT_FAILED_REASON,
    DELIVERED_ACK_LEVEL,
    Authenticated,
    AuthFailure,
    DomainEventKind,
    LifecycleEvent,
    LinkLost,
    MessageAckChanged,
    MessageEditedInbound,
    MessageInbound,
    MessageReactionInbound,
    OutboundRecorded,
    PairingChallenge,
    PairingExpired,
    Ready,
    TerminationReason,
)
from app.instances.models import DeliveryHandle, InstanceRecord, InstanceSnapshot
from app.instances.pairing_console import render_pairing_qr
from app.observability import bind_instance_id, record_transition, reset_instance_id
from app.webhooks import build_event_envelope
from config.logging import log_suppressed_failure
from fsm import InstanceState, is_active, is_terminal
from utils.errors import SessionUnavailableError, TransportNotReadyError

if TYPE_CHECKING:
    from app.protocols import TransportAdapterProtocol, TransportFactoryProtocol
    from app.webhooks import WebhookDispatcher
    from config.settings import InstanceSettings

logger = logging.getLogger(__name__)

LIVENESS_PROBE_TEXT = "ping"
LIVENESS_PROBE_FAILED = "liveness_probe_failed"

# Ids enviados via API lembrados para não reportar o eco do aparelho
_SENT_IDS_LIMIT = 500

TerminatedCallback = Callable[["InstanceLifecycle", TerminationReason], Awaitable[None]]
LinkLostCallback = Callable[["InstanceLifecycle", str], None]


class InstanceLifecycle:
    """Máquina de ciclo de vida de uma geração de instância.

    Args:
        record: Registro autoritativo (escrito apenas por este lifecycle)
        adapter_factory: Cria o adapter de transporte desta geração
        dispatcher: Dispatcher de webhooks
        settings: Settings de instância
        on_terminated: Chamado quando o lifecycle termina por conta própria
            (logout remoto, falha de autenticação, pareamento expirado)
        on_link_lost: Chamado após perda de link recuperável
    """

    def __init__(
        self,
        record: InstanceRecord,
        adapter_factory: TransportFactoryProtocol,
        dispatcher: WebhookDispatcher,
        settings: InstanceSettings,
        *,
        on_terminated: TerminatedCallback | None = None,
        on_link_lost: LinkLostCallback | None = None,
    ) -> None:
        self._record = record
        self._dispatcher = dispatcher
        self._settings = settings
        self._on_terminated = on_terminated
        self._on_link_lost = on_link_lost
        self._queue: asyncio.Queue[LifecycleEvent] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._pairing_timer: asyncio.Task[None] | None = None
        self._sent_ids: deque[str] = deque(maxlen=_SENT_IDS_LIMIT)
        # Envio e checagem de eco serializados: o eco pode chegar antes do recibo
        self._send_lock = asyncio.Lock()
        self._closed = False
        self._termination_reason: TerminationReason | None = None
        self._handlers: dict[type, Callable[[Any], Awaitable[None]]] = {
            PairingChallenge: self._on_pairing_challenge,
            Authenticated: self._on_authenticated,
            Ready: self._on_ready,
            LinkLost: self._on_link_lost_event,
            AuthFailure: self._on_auth_failure,
            MessageInbound: self._on_message_inbound,
            MessageAckChanged: self._on_ack_changed,
            MessageReactionInbound: self._on_reaction,
            MessageEditedInbound: self._on_edited,
            PairingExpired: self._on_pairing_expired,
            OutboundRecorded: self._on_outbound_recorded,
        }
        self.adapter: TransportAdapterProtocol = adapter_factory(record.instance_id, self.submit)

    # ──────────────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────────────

    @property
    def instance_id(self) -> str:
        return self._record.instance_id

    @property
    def name(self) -> str:
        return self._record.name

    @property
    def record(self) -> InstanceRecord:
        return self._record

    @property
    def state(self) -> InstanceState:
        return self._record.state

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def termination_reason(self) -> TerminationReason | None:
        return self._termination_reason

    def snapshot(self) -> InstanceSnapshot:
        return self._record.snapshot()

    # ──────────────────────────────────────────────────────────────────────
    # Controle
    # ──────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Inicia o worker e a conexão do adapter em background."""
        if self._worker is not None or self._closed:
            return
        self._worker = asyncio.create_task(
            self._run(),
            name=f"instance:{self.instance_id}:{self._record.generation}",
        )
        self._connect_task = asyncio.create_task(self._connect())

    def submit(self, event: LifecycleEvent) -> None:
        """Enfileira um evento (sink do adapter). Ignorado após o close."""
        if self._closed:
            logger.debug(
                "instance_event_dropped",
                extra={"instance_id": self.instance_id, "event_type": type(event).__name__},
            )
            return
        self._queue.put_nowait(event)

    async def wait_idle(self) -> None:
        """Aguarda o processamento de todos os eventos já enfileirados."""
        if self._worker is None or self._worker.done():
            return
        await self._queue.join()

    def request_teardown(self) -> None:
        """Marca remoção explícita: nenhuma reconexão será solicitada."""
        self._record.teardown_requested = True

    async def close(self, reason: TerminationReason = TerminationReason.TEARDOWN) -> None:
        """Encerra a geração: para o worker, marca TERMINATED e encerra o adapter.

        Idempotente. A transição final só ocorre depois de o worker parar,
        mantendo um único escritor. Falhas no terminate do adapter são
        registradas e engolidas.
        """
        if self._closed:
            return
        self._closed = True
        self._termination_reason = reason
        self._cancel_pairing_timer()

        current = asyncio.current_task()
        tasks = [
            task
            for task in (self._connect_task, self._worker)
            if task is not None and task is not current and not task.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if not is_terminal(self._record.state):
            self._transition(InstanceState.TERMINATED, str(reason))

        try:
            await self.adapter.terminate()
        except Exception as exc:
            log_suppressed_failure(
                logger, "adapter_terminate", exc, instance_id=self.instance_id
            )

        logger.info(
            "instance_closed",
            extra={
                "instance_id": self.instance_id,
                "reason": str(reason),
                "generation": self._record.generation,
            },
        )

    async def send(self, destination: str, content: str) -> DeliveryHandle:
        """Envia mensagem pela instância.

        Raises:
            SessionUnavailableError: Estado fora de CONNECTED/DEGRADED
            TransportNotReadyError: Socket não pronto apesar do estado ativo
            ValueError: Destino inválido
        """
        state = self._record.state
        if not is_active(state):
            raise SessionUnavailableError(self.instance_id, state)
        if not self.adapter.is_ready():
            raise TransportNotReadyError(
                f"Transporte da instância {self.instance_id} não está pronto"
            )

        address = format_destination(destination)
        async with self._send_lock:
            receipt = await self.adapter.send(address, content)
            self._sent_ids.append(receipt.message_id)
        self.submit(
            OutboundRecorded(
                message_id=receipt.message_id,
                destination=address,
                text=content,
                timestamp=receipt.timestamp,
            )
        )
        return DeliveryHandle(
            instance_id=self.instance_id,
            message_id=receipt.message_id,
            destination=address,
            timestamp=receipt.timestamp,
        )

    # ──────────────────────────────────────────────────────────────────────
    # Worker
    # ──────────────────────────────────────────────────────────────────────

    async def _connect(self) -> None:
        try:
            await self.adapter.connect()
        except Exception as exc:
            logger.warning(
                "instance_connect_failed",
                extra={"instance_id": self.instance_id, "error_type": type(exc).__name__},
            )
            self.submit(LinkLost(CONNECT_FAILED_REASON))

    async def _run(self) -> None:
        token = bind_instance_id(self.instance_id)
        try:
            while True:
                event = await self._queue.get()
                try:
                    await self._handle(event)
                except Exception:
                    logger.exception(
                        "instance_event_handler_failed",
                        extra={"event_type": type(event).__name__},
                    )
                finally:
                    self._queue.task_done()
                if is_terminal(self._record.state):
                    break
        finally:
            while not self._queue.empty():
                self._queue.get_nowait()
                self._queue.task_done()
            reset_instance_id(token)

    async def _handle(self, event: LifecycleEvent) -> None:
        if is_terminal(self._record.state):
            return
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("instance_event_unknown", extra={"event_type": type(event).__name__})
            return
        await handler(event)

    # ──────────────────────────────────────────────────────────────────────
    # Handlers
    # ──────────────────────────────────────────────────────────────────────

    async def _on_pairing_challenge(self, event: PairingChallenge) -> None:
        entering = self._record.state is not InstanceState.AWAITING_PAIRING
        if not self._transition(
            InstanceState.AWAITING_PAIRING,
            "pairing_challenge",
            pairing_payload=event.payload,
            metadata={"pairing_payload": event.payload},
        ):
            return

        if entering and self._settings.pairing_timeout_seconds > 0:
            self._start_pairing_timer(self._settings.pairing_timeout_seconds)

        if self._settings.pairing_console_qr:
            try:
                render_pairing_qr(self.name, event.payload)
            except Exception as exc:
                log_suppressed_failure(
                    logger, "pairing_console", exc, instance_id=self.instance_id
                )

        self._emit(DomainEventKind.PAIRING_REQUESTED, pairing_payload=event.payload)

    async def _on_authenticated(self, event: Authenticated) -> None:
        if self._transition(InstanceState.AUTHENTICATED, "authenticated"):
            self._emit(DomainEventKind.AUTHENTICATED)

    async def _on_ready(self, event: Ready) -> None:
        identity = event.identity
        if self._settings.liveness_probe_enabled:
            try:
                await self.adapter.send(identity.jid, LIVENESS_PROBE_TEXT)
            except Exception as exc:
                log_suppressed_failure(
                    logger, "liveness_probe", exc, instance_id=self.instance_id
                )
                if self._transition(InstanceState.INVALID, LIVENESS_PROBE_FAILED):
                    self._emit(DomainEventKind.AUTH_FAILURE, reason=LIVENESS_PROBE_FAILED)
                return

        if not self._transition(InstanceState.CONNECTED, "ready", account_info=identity):
            return
        self._record.reconnect_attempts = 0
        self._emit(DomainEventKind.CONNECTION_READY, account=identity.to_dict())

    async def _on_link_lost_event(self, event: LinkLost) -> None:
        logout = event.is_logout
        if self._record.state is InstanceState.DISCONNECTED:
            # Perda repetida: só um logout muda algo
            if logout:
                await self._terminate(TerminationReason.REMOTE_LOGOUT)
            return

        if not self._transition(
            InstanceState.DISCONNECTED, "link_lost", metadata={"reason": event.reason}
        ):
            return
        self._emit(DomainEventKind.DISCONNECTED, reason=event.reason, logout=logout)

        if logout:
            await self._terminate(TerminationReason.REMOTE_LOGOUT)
            return
        if self._record.teardown_requested:
            return
        if self._on_link_lost is not None:
            self._on_link_lost(self, event.reason)

    async def _on_auth_failure(self, event: AuthFailure) -> None:
        self._emit(
            DomainEventKind.AUTH_FAILURE,
            reason=str(TerminationReason.AUTH_FAILURE),
            message=event.message,
        )
        await self._terminate(TerminationReason.AUTH_FAILURE)

    async def _on_pairing_expired(self, event: PairingExpired) -> None:
        if self._record.state is not InstanceState.AWAITING_PAIRING:
            return
        logger.info(
            "instance_pairing_expired",
            extra={
                "instance_id": self.instance_id,
                "timeout_seconds": self._settings.pairing_timeout_seconds,
            },
        )
        self._emit(DomainEventKind.AUTH_FAILURE, reason=str(TerminationReason.PAIRING_EXPIRED))
        await self._terminate(TerminationReason.PAIRING_EXPIRED)

    async def _on_message_inbound(self, event: MessageInbound) -> None:
        if not is_active(self._record.state):
            logger.debug("instance_message_ignored", extra={"state": str(self._record.state)})
            return

        message = classify_message(event.raw)
        if message is None:
            logger.info("instance_message_dropped", extra={"instance_id": self.instance_id})
            return

        if message.from_me:
            async with self._send_lock:
                own = bool(message.message_id) and message.message_id in self._sent_ids
            if own:
                return
            self._emit(
                DomainEventKind.MESSAGE_SENT,
                origin="device",
                message=message.to_payload(),
            )
            return

        self._emit(DomainEventKind.MESSAGE_RECEIVED, message=message.to_payload())

    async def _on_ack_changed(self, event: MessageAckChanged) -> None:
        state = self._record.state
        if not is_active(state):
            return
        self._record.last_delivery_ack = event.level

        metadata = {"message_id": event.message_id, "ack": event.level}
        if state is InstanceState.CONNECTED and event.level < DELIVERED_ACK_LEVEL:
            self._transition(InstanceState.DEGRADED, "ack_below_delivered", metadata=metadata)
        elif state is InstanceState.DEGRADED and event.level >= DELIVERED_ACK_LEVEL:
            self._transition(InstanceState.CONNECTED, "ack_delivered", metadata=metadata)

    async def _on_reaction(self, event: MessageReactionInbound) -> None:
        if not is_active(self._record.state):
            return
        self._emit(
            DomainEventKind.MESSAGE_RECEIVED,
            message={
                "kind": "reaction",
                "message_id": event.message_id,
                "sender": event.sender,
                "summary": event.emoji,
            },
        )

    async def _on_edited(self, event: MessageEditedInbound) -> None:
        if not is_active(self._record.state):
            return
        self._emit(
            DomainEventKind.MESSAGE_RECEIVED,
            message={
                "kind": "edited",
                "message_id": event.message_id,
                "sender": event.sender,
                "text": event.text,
                "previous_text": event.previous_text,
            },
        )

    async def _on_outbound_recorded(self, event: OutboundRecorded) -> None:
        self._record.last_message_id = event.message_id
        self._emit(
            DomainEventKind.MESSAGE_SENT,
            origin="api",
            message={
                "kind": "text",
                "message_id": event.message_id,
                "destination": event.destination,
                "text": event.text,
                "timestamp": event.timestamp.isoformat(),
            },
        )

    # ──────────────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────────────

    def _transition(self, target: InstanceState, trigger: str, **kwargs: Any) -> bool:
        previous = self._record.state
        try:
            result = self._record.apply_transition(target, trigger, **kwargs)
        except ValueError as exc:
            result_reason = str(exc)
        else:
            result_reason = result.error_reason if not result.success else None

        if result_reason is not None:
            logger.info(
                "instance_transition_rejected",
                extra={
                    "instance_id": self.instance_id,
                    "from_state": str(previous),
                    "to_state": str(target),
                    "trigger": trigger,
                    "reason": result_reason,
                },
            )
            return False

        if previous is InstanceState.AWAITING_PAIRING and not result.transition.is_refresh:
            self._cancel_pairing_timer()

        logger.info(
            "instance_state_changed",
            extra={"instance_id": self.instance_id, **result.transition.to_log_dict()},
        )
        record_transition(self.instance_id, str(previous), str(target), trigger)
        return True

    async def _terminate(self, reason: TerminationReason) -> None:
        await self.close(reason)
        if self._on_terminated is not None:
            await self._on_terminated(self, reason)

    def _emit(self, kind: DomainEventKind, **fields: Any) -> None:
        envelope = build_event_envelope(
            str(kind),
            instance_id=self.instance_id,
            instance_name=self.name,
            **fields,
        )
        self._dispatcher.submit(self._record.webhook_url, envelope)

    def _start_pairing_timer(self, timeout_seconds: float) -> None:
        self._cancel_pairing_timer()
        self._pairing_timer = asyncio.create_task(self._expire_pairing(timeout_seconds))

    async def _expire_pairing(self, timeout_seconds: float) -> None:
        await asyncio.sleep(timeout_seconds)
        self._pairing_timer = None
        self.submit(PairingExpired())

    def _cancel_pairing_timer(self) -> None:
        timer = self._pairing_timer
        self._pairing_timer = None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

    def __repr__(self) -> str:
        return (
            f"InstanceLifecycle(id={self.instance_id!r}, name={self.name!r}, "
            f"state={self._record.state}, generation={self._record.generation})"
        )


def build_record(
    instance_id: str,
    name: str,
    webhook_url: str = "",
    *,
    generation: int = 0,
    reconnect_attempts: int = 0,
    created_at: datetime | None = None,
) -> InstanceRecord:
    """Cria o registro inicial (INITIALIZING) de uma geração."""
    record = InstanceRecord(
        instance_id=instance_id,
        name=name,
        webhook_url=webhook_url or "",
        generation=generation,
        reconnect_attempts=reconnect_attempts,
    )
    if created_at is not None:
        record.created_at = created_at
    return record
