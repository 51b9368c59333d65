"""Testes para a tabela de classificação de mensagens."""

from __future__ import annotations

import pytest

from app.instances.classifier import classify_message


class TestClassifyMessage:
    @pytest.mark.parametrize("msg_type", ["chat", "text"])
    def test_text_types_carry_body(self, msg_type: str) -> None:
        message = classify_message(
            {"id": "M1", "type": msg_type, "body": "olá", "from": "5511@c.us", "timestamp": 10}
        )
        assert message is not None
        assert message.kind == "text"
        assert message.text == "olá"
        assert message.summary is None
        assert message.to_payload() == {
            "kind": "text",
            "message_id": "M1",
            "sender": "5511@c.us",
            "from_me": False,
            "timestamp": 10,
            "text": "olá",
        }

    @pytest.mark.parametrize(
        ("msg_type", "kind"),
        [
            ("image", "image"),
            ("video", "video"),
            ("audio", "audio"),
            ("ptt", "audio"),
            ("document", "document"),
            ("sticker", "sticker"),
        ],
    )
    def test_media_without_caption_gets_placeholder(self, msg_type: str, kind: str) -> None:
        message = classify_message({"type": msg_type})
        assert message is not None
        assert message.kind == kind
        assert message.summary == f"[{kind}]"
        assert "text" not in message.to_payload()

    def test_media_caption_is_used(self) -> None:
        message = classify_message({"type": "image", "caption": "cardápio"})
        assert message is not None
        assert message.summary == "cardápio"

    def test_location_summary(self) -> None:
        message = classify_message(
            {"type": "location", "location": {"latitude": -23.5, "longitude": -46.6, "name": "Loja"}}
        )
        assert message is not None
        assert message.kind == "location"
        assert message.summary == "[location] -23.5,-46.6 (Loja)"

    def test_reaction_summary_is_emoji(self) -> None:
        message = classify_message({"type": "reaction", "reaction": "👍"})
        assert message is not None
        assert message.kind == "reaction"
        assert message.summary == "👍"

    @pytest.mark.parametrize("msg_type", ["e2e_notification", "gp2", "revoked", "call_log"])
    def test_system_types(self, msg_type: str) -> None:
        message = classify_message({"type": msg_type})
        assert message is not None
        assert message.kind == "system"
        assert message.summary == f"[system:{msg_type}]"

    def test_unknown_type_is_summarized_not_dropped(self) -> None:
        message = classify_message({"type": "poll_creation"})
        assert message is not None
        assert message.kind == "unhandled"
        assert message.summary == "[unhandled:poll_creation]"

    @pytest.mark.parametrize("raw", [None, "texto", 42, {}, {"type": ""}, {"type": 3}])
    def test_unusable_payloads_are_dropped(self, raw: object) -> None:
        assert classify_message(raw) is None

    def test_from_me_and_serialized_id(self) -> None:
        message = classify_message(
            {"type": "chat", "body": "x", "fromMe": True, "id": {"_serialized": "true_55@c.us_ABC"}}
        )
        assert message is not None
        assert message.from_me is True
        assert message.message_id == "true_55@c.us_ABC"

        snake = classify_message({"type": "chat", "from_me": True})
        assert snake is not None and snake.from_me is True
