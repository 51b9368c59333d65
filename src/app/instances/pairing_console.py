"""Renderização do QR de pareamento no terminal do operador."""

from __future__ import annotations

import io
import sys

import qrcode


def render_pairing_qr(name: str, payload: str) -> str:
    """Escreve o QR do payload no stdout do operador e retorna o texto renderizado.

    Canal de console proposital: o QR ASCII não cabe numa linha de log JSON.
    """
    qr = qrcode.QRCode(border=1)
    qr.add_data(payload)
    qr.make(fit=True)

    buffer = io.StringIO()
    qr.print_ascii(out=buffer, invert=True)
    rendered = f"Pareamento da instância {name}:\n{buffer.getvalue()}"
    sys.stdout.write(rendered + "\n")
    sys.stdout.flush()
    return rendered
