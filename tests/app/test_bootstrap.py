"""Testes do composition root (app/bootstrap)."""

from __future__ import annotations

import pytest

from app.bootstrap import create_registry, create_transport_factory, validate_runtime_settings
from app.infra.transport import MemoryTransportFactory
from app.instances import InstanceRegistry
from config.settings import (
    InstanceSettings,
    get_base_settings,
    get_instance_settings,
    get_webhook_settings,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_base_settings.cache_clear()
    get_instance_settings.cache_clear()
    get_webhook_settings.cache_clear()
    yield
    get_base_settings.cache_clear()
    get_instance_settings.cache_clear()
    get_webhook_settings.cache_clear()


class TestTransportFactory:
    def test_memory_backend(self) -> None:
        factory = create_transport_factory(InstanceSettings(transport_backend="memory"))
        assert isinstance(factory, MemoryTransportFactory)

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValueError):
            create_transport_factory(InstanceSettings(transport_backend="baileys"))  # type: ignore[arg-type]


class TestValidateRuntimeSettings:
    def test_development_only_warns(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("WEBHOOK_TIMEOUT_SECONDS", "0")

        validate_runtime_settings()

    def test_production_fails_fast(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("WEBHOOK_TIMEOUT_SECONDS", "0")

        with pytest.raises(RuntimeError, match="WEBHOOK_TIMEOUT_SECONDS"):
            validate_runtime_settings()

    def test_production_with_valid_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")

        validate_runtime_settings()


def test_create_registry_uses_configured_backend() -> None:
    registry = create_registry()

    assert isinstance(registry, InstanceRegistry)
    assert registry.is_running
    assert len(registry) == 0
