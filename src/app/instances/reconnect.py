"""Agendador de reconexões canceláveis, indexado por instance_id."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

ReconnectCallback = Callable[[], Awaitable[None]]


class ReconnectScheduler:
    """Mantém no máximo uma tarefa atrasada por chave.

    Agendar uma chave já agendada substitui (cancela) a tarefa anterior.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def schedule(self, key: str, delay: float, callback: ReconnectCallback) -> asyncio.Task[None]:
        """Agenda `callback` para rodar após `delay` segundos."""
        self.cancel(key)
        task = asyncio.create_task(self._run(key, delay, callback), name=f"reconnect:{key}")
        self._tasks[key] = task
        return task

    async def _run(self, key: str, delay: float, callback: ReconnectCallback) -> None:
        await asyncio.sleep(delay)
        if self._tasks.get(key) is asyncio.current_task():
            del self._tasks[key]
        try:
            await callback()
        except Exception:
            logger.exception("reconnect_callback_failed", extra={"instance_id": key})

    def cancel(self, key: str) -> bool:
        """Cancela a tarefa pendente da chave. Retorna True se havia uma."""
        task = self._tasks.pop(key, None)
        if task is None:
            return False
        task.cancel()
        return True

    def is_scheduled(self, key: str) -> bool:
        return key in self._tasks

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def cancel_all(self) -> None:
        """Cancela e aguarda todas as tarefas pendentes."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
