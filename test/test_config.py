"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from marketing_api.config import Settings


class TestSettings:
    def test_declared_defaults(self) -> None:
        # Environment variables may override runtime values, so check the
        # declared defaults on the model fields.
        fields = Settings.model_fields
        assert fields["server_port"].default == 8080
        assert fields["token_duration_minutes"].default == 24 * 60
        assert fields["jwt_algorithm"].default == "HS256"
        assert fields["bcrypt_rounds"].default == 12
        assert fields["request_timeout_seconds"].default is None
        assert fields["database_command_timeout_seconds"].default is None

    @pytest.mark.parametrize("algorithm", ["hs256", "HS384", "HS512"])
    def test_hmac_algorithms_accepted(self, algorithm: str) -> None:
        settings = Settings(_env_file=None, jwt_algorithm=algorithm)

        assert settings.jwt_algorithm == algorithm.upper()

    @pytest.mark.parametrize("algorithm", ["none", "RS256", "ES256"])
    def test_other_algorithms_rejected(self, algorithm: str) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, jwt_algorithm=algorithm)

    def test_short_secret_rejected_outside_development(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, app_env="production", jwt_secret_key="too-short")

    def test_short_secret_allowed_in_development(self) -> None:
        settings = Settings(_env_file=None, app_env="development", jwt_secret_key="dev")

        assert settings.is_development

    def test_long_secret_in_production(self) -> None:
        settings = Settings(_env_file=None, app_env="production", jwt_secret_key="k" * 32)

        assert not settings.is_development

    def test_cors_origins_list(self) -> None:
        settings = Settings(
            _env_file=None,
            cors_origins="http://a.example.com, http://b.example.com,,",
        )

        assert settings.cors_origins_list == ["http://a.example.com", "http://b.example.com"]

    def test_bcrypt_rounds_lower_bound(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, bcrypt_rounds=3)
