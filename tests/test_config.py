"""
Тесты настроек приложения.
"""

import pytest
from pydantic import ValidationError

from supportdesk.core.config import AppConfig


class TestAppConfig:

    def test_defaults(self, monkeypatch):
        for name in ("LOCK_TIMEOUT", "LOCK_MAX_RETRIES", "LOCK_RETRY_DELAY", "STORAGE_BACKEND"):
            monkeypatch.delenv(f"SUPPORTDESK__{name}", raising=False)

        config = AppConfig(_env_file=None)

        assert config.lock_timeout == 5.0
        assert config.lock_max_retries == 10
        assert config.lock_retry_delay == 0.1
        assert config.lock_sweep_interval == 10.0
        assert config.storage_backend == "file"
        assert config.curator_channel == "curators"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SUPPORTDESK__LOCK_TIMEOUT", "2.5")
        monkeypatch.setenv("SUPPORTDESK__STORAGE_BACKEND", "memory")
        monkeypatch.setenv("SUPPORTDESK__WAIT_FOR_DELIVERY", "true")

        config = AppConfig(_env_file=None)

        assert config.lock_timeout == 2.5
        assert config.storage_backend == "memory"
        assert config.wait_for_delivery is True

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(_env_file=None, lock_timeout=0)
        with pytest.raises(ValidationError):
            AppConfig(_env_file=None, storage_backend="redis")
