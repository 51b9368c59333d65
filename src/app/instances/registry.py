"""Registry de instâncias: dono único do mapa id → lifecycle.

Todas as mutações do mapa (create, remove, término, reconexão) passam
pelo mesmo asyncio.Lock. Chamadas de rede (connect, terminate, send,
webhooks) acontecem sempre fora da seção crítica.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import Counter
from typing import TYPE_CHECKING

from app.instances.events import TerminationReason
from app.instances.lifecycle import InstanceLifecycle, build_record
from app.instances.reconnect import ReconnectScheduler
from app.observability import record_reconnect
from config.settings import get_instance_settings
from fsm import InstanceState, is_terminal
from utils.errors import DuplicateNameError, InstanceNotFoundError

if TYPE_CHECKING:
    from app.instances.models import (
        DeliveryHandle,
        InstanceRecord,
        InstanceSnapshot,
        InstanceSummary,
    )
    from app.protocols import TransportFactoryProtocol
    from app.webhooks import WebhookDispatcher
    from config.settings import InstanceSettings

logger = logging.getLogger(__name__)


def _name_key(name: str) -> str:
    return name.strip().casefold()


class InstanceRegistry:
    """Gerencia instâncias ativas e suas reconexões."""

    def __init__(
        self,
        adapter_factory: TransportFactoryProtocol,
        dispatcher: WebhookDispatcher,
        settings: InstanceSettings | None = None,
        scheduler: ReconnectScheduler | None = None,
    ) -> None:
        self._adapter_factory = adapter_factory
        self._dispatcher = dispatcher
        self._settings = settings or get_instance_settings()
        self._scheduler = scheduler or ReconnectScheduler()
        self._lock = asyncio.Lock()
        self._instances: dict[str, InstanceLifecycle] = {}
        self._closed = False

    @property
    def dispatcher(self) -> WebhookDispatcher:
        return self._dispatcher

    @property
    def scheduler(self) -> ReconnectScheduler:
        return self._scheduler

    @property
    def is_running(self) -> bool:
        return not self._closed

    # ──────────────────────────────────────────────────────────────────────
    # Criação e remoção
    # ──────────────────────────────────────────────────────────────────────

    async def create(self, name: str, webhook_url: str | None = None) -> str:
        """Cria instância e inicia a conexão em background.

        Returns:
            instance_id gerado

        Raises:
            ValueError: Nome vazio ou registry encerrado
            DuplicateNameError: Já existe instância ativa com o nome
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValueError("nome da instância é obrigatório")

        async with self._lock:
            if self._closed:
                raise ValueError("registry encerrado")
            key = _name_key(clean_name)
            for lifecycle in self._instances.values():
                if _name_key(lifecycle.name) == key and not is_terminal(lifecycle.state):
                    raise DuplicateNameError(clean_name)

            instance_id = str(uuid.uuid4())
            lifecycle = self._build_lifecycle(
                build_record(instance_id, clean_name, webhook_url or "")
            )
            self._instances[instance_id] = lifecycle

        logger.info(
            "instance_created",
            extra={
                "instance_id": instance_id,
                "instance_name": clean_name,
                "webhook_configured": bool(webhook_url),
            },
        )
        lifecycle.start()
        return instance_id

    async def remove(self, instance_id: str) -> bool:
        """Remove instância (idempotente). Retorna True se existia."""
        async with self._lock:
            lifecycle = self._instances.pop(instance_id, None)
            if lifecycle is None:
                return False
            lifecycle.request_teardown()
            self._scheduler.cancel(instance_id)

        await lifecycle.close(TerminationReason.TEARDOWN)
        logger.info("instance_removed", extra={"instance_id": instance_id})
        return True

    async def remove_by_reference(self, reference: str) -> bool:
        """Remove por id ou nome. Referência desconhecida é no-op."""
        lifecycle = self._resolve(reference)
        if lifecycle is None:
            return False
        return await self.remove(lifecycle.instance_id)

    # ──────────────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────────────

    def get(self, instance_id: str) -> InstanceSnapshot | None:
        lifecycle = self._instances.get(instance_id)
        return lifecycle.snapshot() if lifecycle else None

    def get_by_name(self, name: str) -> InstanceSnapshot | None:
        lifecycle = self._find_by_name(name)
        return lifecycle.snapshot() if lifecycle else None

    def resolve(self, reference: str) -> InstanceSnapshot | None:
        """Busca por id e, se não achar, por nome."""
        lifecycle = self._resolve(reference)
        return lifecycle.snapshot() if lifecycle else None

    def list(self) -> list[InstanceSummary]:
        """Resumos em ordem de criação."""
        return [lifecycle.record.summary() for lifecycle in self._instances.values()]

    def stats(self) -> dict[str, int]:
        """Quantidade de instâncias por estado."""
        counts = Counter(str(lifecycle.state) for lifecycle in self._instances.values())
        return {str(state): counts.get(str(state), 0) for state in InstanceState}

    def lifecycle(self, instance_id: str) -> InstanceLifecycle | None:
        """Lifecycle corrente da instância (uso interno e testes)."""
        return self._instances.get(instance_id)

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._instances

    # ──────────────────────────────────────────────────────────────────────
    # Envio
    # ──────────────────────────────────────────────────────────────────────

    async def send(self, reference: str, destination: str, content: str) -> DeliveryHandle:
        """Envia mensagem pela instância indicada (id ou nome).

        Raises:
            InstanceNotFoundError: Referência desconhecida
            SessionUnavailableError: Instância fora de CONNECTED/DEGRADED
            TransportNotReadyError: Socket não pronto
        """
        lifecycle = self._resolve(reference)
        if lifecycle is None:
            raise InstanceNotFoundError(reference)
        return await lifecycle.send(destination, content)

    # ──────────────────────────────────────────────────────────────────────
    # Shutdown
    # ──────────────────────────────────────────────────────────────────────

    async def shutdown(self, drain_timeout_seconds: float = 30.0) -> None:
        """Cancela reconexões, encerra todas as instâncias e drena webhooks."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            lifecycles = list(self._instances.values())
            self._instances.clear()
            for lifecycle in lifecycles:
                lifecycle.request_teardown()

        await self._scheduler.cancel_all()
        await asyncio.gather(
            *(lifecycle.close(TerminationReason.SHUTDOWN) for lifecycle in lifecycles),
            return_exceptions=True,
        )
        await self._dispatcher.drain(drain_timeout_seconds)
        logger.info("instance_registry_shutdown", extra={"closed_instances": len(lifecycles)})

    # ──────────────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────────────

    def _resolve(self, reference: str) -> InstanceLifecycle | None:
        lifecycle = self._instances.get(reference)
        if lifecycle is not None:
            return lifecycle
        return self._find_by_name(reference)

    def _find_by_name(self, name: str) -> InstanceLifecycle | None:
        key = _name_key(name or "")
        if not key:
            return None
        for lifecycle in self._instances.values():
            if _name_key(lifecycle.name) == key:
                return lifecycle
        return None

    def _build_lifecycle(self, record: InstanceRecord) -> InstanceLifecycle:
        return InstanceLifecycle(
            record,
            self._adapter_factory,
            self._dispatcher,
            self._settings,
            on_terminated=self._handle_terminated,
            on_link_lost=self._handle_link_lost,
        )

    async def _handle_terminated(
        self,
        lifecycle: InstanceLifecycle,
        reason: TerminationReason,
    ) -> None:
        async with self._lock:
            if self._instances.get(lifecycle.instance_id) is not lifecycle:
                return
            del self._instances[lifecycle.instance_id]
            self._scheduler.cancel(lifecycle.instance_id)
        logger.info(
            "instance_terminated",
            extra={"instance_id": lifecycle.instance_id, "reason": str(reason)},
        )

    def _handle_link_lost(self, lifecycle: InstanceLifecycle, reason: str) -> None:
        if self._closed:
            return
        record = lifecycle.record
        attempts = record.reconnect_attempts
        max_attempts = self._settings.reconnect_max_attempts
        if max_attempts > 0 and attempts >= max_attempts:
            logger.warning(
                "instance_reconnect_exhausted",
                extra={"instance_id": record.instance_id, "attempts": attempts},
            )
            self._scheduler.schedule(record.instance_id, 0, lambda: self._give_up(lifecycle))
            return

        delay = self._settings.reconnect_delay_for(attempts)
        record_reconnect(record.instance_id, attempts + 1, delay, reason)
        logger.info(
            "instance_reconnect_scheduled",
            extra={
                "instance_id": record.instance_id,
                "delay_seconds": delay,
                "attempt": attempts + 1,
                "reason": reason,
            },
        )
        self._scheduler.schedule(
            record.instance_id, delay, lambda: self._reconnect(lifecycle)
        )

    async def _give_up(self, lifecycle: InstanceLifecycle) -> None:
        async with self._lock:
            if self._instances.get(lifecycle.instance_id) is not lifecycle:
                return
            del self._instances[lifecycle.instance_id]
        await lifecycle.close(TerminationReason.RECONNECT_EXHAUSTED)

    async def _reconnect(self, old: InstanceLifecycle) -> None:
        """Substitui a geração desconectada por um lifecycle novo.

        O registro antigo é descartado; o novo nasce em INITIALIZING com o
        mesmo id, nome e webhook.
        """
        async with self._lock:
            if self._closed:
                return
            if self._instances.get(old.instance_id) is not old:
                return
            if old.record.teardown_requested:
                return

            previous = old.record
            fresh = self._build_lifecycle(
                build_record(
                    previous.instance_id,
                    previous.name,
                    previous.webhook_url,
                    generation=previous.generation + 1,
                    reconnect_attempts=previous.reconnect_attempts + 1,
                    created_at=previous.created_at,
                )
            )
            self._instances[previous.instance_id] = fresh

        logger.info(
            "instance_reconnecting",
            extra={
                "instance_id": previous.instance_id,
                "generation": fresh.record.generation,
                "attempt": fresh.record.reconnect_attempts,
            },
        )
        await old.close(TerminationReason.RECONNECTING)
        async with self._lock:
            if self._closed or self._instances.get(fresh.instance_id) is not fresh:
                return
            fresh.start()
