"""Testes para InstanceRecord, snapshots e AccountInfo.

Testa:
    - Campos derivados do estado (payload de pareamento, dados da conta)
    - Snapshots imutáveis e resumos
    - Construção de AccountInfo a partir do provedor
"""

from __future__ import annotations

import dataclasses

import pytest

from app.instances.models import AccountInfo, InstanceRecord
from fsm import InstanceState

ACCOUNT = AccountInfo(number="5511988887777", display_name="Vendas")


@pytest.fixture
def record() -> InstanceRecord:
    return InstanceRecord(instance_id="inst-1", name="Sales", webhook_url="http://hook/x")


class TestRecordDerivedFields:
    def test_new_record_starts_initializing_without_payloads(self, record: InstanceRecord) -> None:
        assert record.state == InstanceState.INITIALIZING
        assert record.pairing_payload is None
        assert record.account_info is None
        assert record.generation == 0
        assert record.teardown_requested is False

    def test_awaiting_pairing_requires_payload(self, record: InstanceRecord) -> None:
        with pytest.raises(ValueError):
            record.apply_transition(InstanceState.AWAITING_PAIRING, "pairing_challenge")
        assert record.state == InstanceState.INITIALIZING

    def test_active_state_requires_account(self, record: InstanceRecord) -> None:
        with pytest.raises(ValueError):
            record.apply_transition(InstanceState.CONNECTED, "ready")

    def test_payload_and_account_follow_state(self, record: InstanceRecord) -> None:
        record.apply_transition(InstanceState.AWAITING_PAIRING, "qr", pairing_payload="Q1")
        assert record.pairing_payload == "Q1"

        record.apply_transition(InstanceState.AWAITING_PAIRING, "qr", pairing_payload="Q2")
        assert record.pairing_payload == "Q2"

        record.apply_transition(InstanceState.CONNECTED, "ready", account_info=ACCOUNT)
        assert record.pairing_payload is None
        assert record.account_info == ACCOUNT

        # DEGRADED preserva a conta já conhecida
        record.apply_transition(InstanceState.DEGRADED, "ack")
        assert record.account_info == ACCOUNT

        record.apply_transition(InstanceState.DISCONNECTED, "link_lost")
        assert record.account_info is None
        assert record.pairing_payload is None
        assert [t.to_state for t in record.history] == [
            InstanceState.AWAITING_PAIRING,
            InstanceState.AWAITING_PAIRING,
            InstanceState.CONNECTED,
            InstanceState.DEGRADED,
            InstanceState.DISCONNECTED,
        ]

    def test_rejected_transition_leaves_fields_untouched(self, record: InstanceRecord) -> None:
        result = record.apply_transition(InstanceState.DEGRADED, "ack", account_info=ACCOUNT)

        assert result.success is False
        assert record.state == InstanceState.INITIALIZING
        assert record.account_info is None

    def test_updated_at_moves_on_transition(self, record: InstanceRecord) -> None:
        before = record.updated_at
        record.apply_transition(InstanceState.AWAITING_PAIRING, "qr", pairing_payload="Q1")
        assert record.updated_at >= before


class TestSnapshots:
    def test_snapshot_is_immutable_copy(self, record: InstanceRecord) -> None:
        record.apply_transition(InstanceState.AWAITING_PAIRING, "qr", pairing_payload="Q1")
        snapshot = record.snapshot()

        record.apply_transition(InstanceState.CONNECTED, "ready", account_info=ACCOUNT)

        assert snapshot.state == InstanceState.AWAITING_PAIRING
        assert snapshot.pairing_payload == "Q1"
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.state = InstanceState.CONNECTED  # type: ignore[misc]

    def test_snapshot_to_dict(self, record: InstanceRecord) -> None:
        record.apply_transition(InstanceState.CONNECTED, "ready", account_info=ACCOUNT)
        data = record.snapshot().to_dict()

        assert data["id"] == "inst-1"
        assert data["state"] == "CONNECTED"
        assert data["account_info"]["number"] == "5511988887777"
        assert data["webhook_configured"] is True
        assert data["pairing_payload"] is None
        assert "T" in data["created_at"]

    def test_summary(self, record: InstanceRecord) -> None:
        assert record.summary().to_dict() == {
            "id": "inst-1",
            "name": "Sales",
            "state": "INITIALIZING",
        }


class TestAccountInfo:
    def test_jid_appends_suffix_only_for_plain_numbers(self) -> None:
        assert ACCOUNT.jid == "5511988887777@s.whatsapp.net"
        assert AccountInfo(number="123@c.us").jid == "123@c.us"

    def test_from_mapping_variants(self) -> None:
        assert AccountInfo.from_mapping({"number": "5511"}).number == "5511"

        from_wid = AccountInfo.from_mapping({"wid": {"user": "5522"}, "pushname": "Loja"})
        assert from_wid.number == "5522"
        assert from_wid.display_name == "Loja"

        assert AccountInfo.from_mapping({"wid": "5533"}).number == "5533"

    def test_from_mapping_without_number_raises(self) -> None:
        with pytest.raises(ValueError):
            AccountInfo.from_mapping({"pushname": "sem número"})
