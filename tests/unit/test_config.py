"""Unit tests for Settings validation and the settings cache."""

import pytest
from pydantic import ValidationError

from securemotor.core.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(database_url="memory://", redis_url=None)

        assert settings.quote_validity_days == 30
        assert settings.policy_term_days == 365
        assert settings.policy_number_prefix == "SM"
        assert settings.claim_number_prefix == "CL"
        assert settings.recent_items_limit == 5
        assert settings.uses_memory_store
        assert not settings.is_production

    def test_settings_are_frozen(self) -> None:
        settings = Settings(database_url="memory://")

        with pytest.raises(ValidationError):
            settings.quote_validity_days = 10  # type: ignore[misc]

    def test_pool_max_below_min_rejected(self) -> None:
        with pytest.raises(ValidationError, match="database_pool_max"):
            Settings(database_pool_min=5, database_pool_max=3)

    def test_unsupported_database_scheme(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported database URL scheme"):
            Settings(database_url="mysql://localhost/portal")

    def test_postgres_url_accepted(self) -> None:
        settings = Settings(database_url="postgresql://portal:secret@db/portal")

        assert not settings.uses_memory_store

    @pytest.mark.parametrize("prefix", ["sm", "SMX", "S1"])
    def test_number_prefix_pattern(self, prefix: str) -> None:
        with pytest.raises(ValidationError):
            Settings(policy_number_prefix=prefix)

    def test_production_flag(self) -> None:
        assert Settings(app_env="production").is_production

    def test_unknown_environment_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(app_env="qa")

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QUOTE_VALIDITY_DAYS", "14")

        assert Settings().quote_validity_days == 14


class TestSettingsCache:
    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("RECENT_ITEMS_LIMIT", "8")

        assert get_settings() is first
        clear_settings_cache()
        assert get_settings().recent_items_limit == 8
