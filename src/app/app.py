"""Entrypoint do serviço de instâncias.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request

from api.routes import create_api_router
from app.bootstrap import create_registry, initialize_app, validate_runtime_settings
from app.observability import reset_correlation_id, set_correlation_id
from config.logging import get_logger
from config.settings import get_base_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from fastapi import Response

    from app.instances import InstanceRegistry

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

CORRELATION_HEADER = "x-correlation-id"


def create_app(registry: InstanceRegistry | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        registry: Registry pré-montado (testes); criado no startup se None.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("app_starting")
        validate_runtime_settings()
        app.state.registry = registry or create_registry()

        yield

        logger.info("app_shutting_down")
        await app.state.registry.shutdown()

    fastapi_app = FastAPI(
        title="Pyloto Instances",
        description="Gerenciador de instâncias de mensageria com webhooks",
        version="1.0.0",
        lifespan=lifespan,
    )

    @fastapi_app.middleware("http")
    async def correlation_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)
        return response

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured")

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    settings = get_base_settings()
    logger.info(
        "app_running",
        extra={"host": settings.http_host, "port": settings.http_port},
    )
    uvicorn.run(
        "app.app:app",
        host=settings.http_host,
        port=settings.http_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
