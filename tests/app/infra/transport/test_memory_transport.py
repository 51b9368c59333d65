"""Testes para o transporte em memória."""

from __future__ import annotations

import pytest

from app.infra.transport import MemoryTransport, MemoryTransportFactory
from app.instances.events import LinkLost, PairingChallenge, Ready
from app.protocols import TransportAdapterProtocol
from utils.errors import TransportNotReadyError


@pytest.fixture
def published() -> list:
    return []


@pytest.fixture
def transport(published: list) -> MemoryTransport:
    return MemoryTransport("inst-1", published.append)


class TestMemoryTransport:
    def test_satisfies_adapter_protocol(self, transport: MemoryTransport) -> None:
        assert isinstance(transport, TransportAdapterProtocol)

    @pytest.mark.asyncio
    async def test_connect_emits_single_pairing_challenge(
        self, transport: MemoryTransport, published: list
    ) -> None:
        await transport.connect()
        await transport.connect()

        assert transport.connect_calls == 2
        assert len(published) == 1
        assert isinstance(published[0], PairingChallenge)
        assert published[0].payload.startswith("memory-pairing:inst-1:")

    @pytest.mark.asyncio
    async def test_connect_without_auto_pairing_is_silent(self, published: list) -> None:
        transport = MemoryTransport("inst-1", published.append, auto_pairing=False)

        await transport.connect()

        assert published == []

    @pytest.mark.asyncio
    async def test_send_requires_ready_socket(self, transport: MemoryTransport) -> None:
        with pytest.raises(TransportNotReadyError):
            await transport.send("5511@s.whatsapp.net", "oi")

        transport.simulate_ready()
        receipt = await transport.send("5511@s.whatsapp.net", "oi")

        assert receipt.message_id.startswith("3EB0")
        assert transport.sent[0].message_id == receipt.message_id

        transport.fail_sends = True
        with pytest.raises(ConnectionError):
            await transport.send("5511@s.whatsapp.net", "oi")

    @pytest.mark.asyncio
    async def test_terminate_stops_publishing(
        self, transport: MemoryTransport, published: list
    ) -> None:
        transport.simulate_ready()
        await transport.terminate()

        transport.simulate_link_lost()

        assert transport.terminated
        assert not transport.is_ready()
        assert [type(e) for e in published] == [Ready]

    def test_link_lost_marks_socket_down(
        self, transport: MemoryTransport, published: list
    ) -> None:
        transport.simulate_ready()
        transport.simulate_link_lost("LOGOUT")

        assert not transport.is_ready()
        assert published[-1] == LinkLost("LOGOUT")
        assert published[-1].is_logout


class TestMemoryTransportFactory:
    def test_tracks_created_transports(self) -> None:
        factory = MemoryTransportFactory()
        first = factory("inst-1", lambda e: None)
        second = factory("inst-1", lambda e: None)
        factory("inst-2", lambda e: None)

        assert factory.for_instance("inst-1") == [first, second]
        assert factory.latest("inst-1") is second
        with pytest.raises(KeyError):
            factory.latest("inst-3")
