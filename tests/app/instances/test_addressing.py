"""Testes para normalização de destinos."""

from __future__ import annotations

import pytest

from app.instances.addressing import format_destination


@pytest.mark.parametrize(
    ("destination", "expected"),
    [
        ("5511999990000", "5511999990000@s.whatsapp.net"),
        ("+55 (11) 99999-0000", "5511999990000@s.whatsapp.net"),
        ("120363000000@g.us", "120363000000@g.us"),
        ("5511999990000@s.whatsapp.net", "5511999990000@s.whatsapp.net"),
    ],
)
def test_format_destination(destination: str, expected: str) -> None:
    assert format_destination(destination) == expected


@pytest.mark.parametrize("destination", ["", "   ", "abc"])
def test_format_destination_rejects_empty(destination: str) -> None:
    with pytest.raises(ValueError):
        format_destination(destination)
