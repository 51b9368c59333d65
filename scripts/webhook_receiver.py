#!/usr/bin/env python3
"""Receptor local de webhooks para testar instâncias em desenvolvimento.

Uso:
    python scripts/webhook_receiver.py --port 3001

Crie a instância com webhookUrl=http://localhost:3001/webhook e acompanhe
os envelopes recebidos no terminal.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any

import uvicorn
from fastapi import FastAPI, Request

logger = logging.getLogger("webhook_receiver")


def create_receiver_app() -> FastAPI:
    """App que registra e imprime cada envelope recebido."""
    app = FastAPI(title="webhook-receiver")
    app.state.received = []

    @app.post("/webhook")
    async def receive(request: Request) -> dict[str, Any]:
        envelope = await request.json()
        app.state.received.append(envelope)
        instance = envelope.get("instance") or {}
        logger.info(
            "webhook_received event=%s instance=%s",
            envelope.get("event"),
            instance.get("name"),
        )
        print(json.dumps(envelope, indent=2, ensure_ascii=False), flush=True)
        return {"status": "received"}

    return app


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="0.0.0.0", help="Interface de escuta.")
    parser.add_argument("--port", type=int, default=3001, help="Porta de escuta.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO)
    print(f"Receptor de webhook escutando em http://localhost:{args.port}/webhook")
    uvicorn.run(create_receiver_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
