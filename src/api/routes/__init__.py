"""Rotas HTTP da API — fachada sobre o registry de instâncias.

Responsabilidades:
- Definir endpoints HTTP (instâncias, health)
- Validação de request (pydantic)
- Delegação para o InstanceRegistry
- Mapeamento de erros de domínio para status HTTP

Estrutura:
- routes/instances/: criação, consulta, envio e remoção de instâncias
- routes/health/: health checks e readiness

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
