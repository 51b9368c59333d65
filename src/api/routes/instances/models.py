"""Modelos HTTP das rotas de instâncias (camelCase no fio)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateInstanceRequest(_CamelModel):
    """Body de criação de instância."""

    name: str = Field(min_length=1, max_length=120)
    webhook_url: str | None = Field(default=None, alias="webhookUrl")


class CreateInstanceResponse(_CamelModel):
    status: bool = True
    instance_id: str = Field(alias="instanceId")
    message: str


class InstanceSummaryResponse(_CamelModel):
    id: str
    name: str
    state: str


class AccountInfoResponse(_CamelModel):
    number: str
    display_name: str | None = Field(default=None, alias="displayName")
    platform: str | None = None


class InstanceDetailResponse(_CamelModel):
    """Snapshot de uma instância."""

    id: str
    name: str
    state: str
    pairing_payload: str | None = Field(default=None, alias="pairingPayload")
    account_info: AccountInfoResponse | None = Field(default=None, alias="accountInfo")
    last_delivery_ack: int | None = Field(default=None, alias="lastDeliveryAck")
    last_message_id: str | None = Field(default=None, alias="lastMessageId")
    webhook_configured: bool = Field(alias="webhookConfigured")
    generation: int
    reconnect_attempts: int = Field(alias="reconnectAttempts")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @classmethod
    def from_snapshot_dict(cls, data: dict[str, Any]) -> InstanceDetailResponse:
        account = data.get("account_info")
        return cls(
            id=data["id"],
            name=data["name"],
            state=data["state"],
            pairing_payload=data["pairing_payload"],
            account_info=AccountInfoResponse(**account) if account else None,
            last_delivery_ack=data["last_delivery_ack"],
            last_message_id=data["last_message_id"],
            webhook_configured=data["webhook_configured"],
            generation=data["generation"],
            reconnect_attempts=data["reconnect_attempts"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )


class PairingCodeResponse(_CamelModel):
    status: str
    qr_code: str | None = Field(default=None, alias="qrCode")


class SendMessageRequest(_CamelModel):
    """Body de envio de mensagem de texto."""

    number: str = Field(min_length=1)
    message: str = Field(min_length=1)


class SendMessageResponse(_CamelModel):
    status: bool = True
    message_id: str = Field(alias="messageId")


class StatusResponse(_CamelModel):
    status: bool = True
