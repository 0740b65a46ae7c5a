import pytest

from autologin.core.config import Settings
from autologin.core.exceptions import ConfigurationError
from autologin.services.interfaces import AutologinConfig


class TestAutologinConfig:
    """Test validation of the token configuration."""

    def test_valid_config(self):
        config = AutologinConfig(length=16, lifetime_minutes=30)

        assert config.remove_expired_on_issue is True
        assert config.count_redemptions is True
        assert config.redemption_route_name == "autologin"
        assert config.strict_expiry is False

    @pytest.mark.parametrize("field,value", [
        ("length", 0),
        ("length", -1),
        ("lifetime_minutes", 0),
        ("max_generation_attempts", 0),
        ("redemption_route_name", ""),
    ])
    def test_invalid_values_are_rejected(self, field, value):
        values = {"length": 16, "lifetime_minutes": 30, field: value}

        with pytest.raises(ConfigurationError):
            AutologinConfig(**values)

    def test_config_is_immutable(self):
        config = AutologinConfig(length=16, lifetime_minutes=30)

        with pytest.raises(AttributeError):
            config.length = 8


class TestSettings:
    """Test settings to config mapping."""

    def test_settings_build_config(self):
        settings = Settings(
            AUTOLOGIN_LENGTH=24,
            AUTOLOGIN_LIFETIME=15,
            AUTOLOGIN_REMOVE_EXPIRED=False,
            AUTOLOGIN_COUNT=False,
            AUTOLOGIN_ROUTE_NAME="magic",
            AUTOLOGIN_REDIRECT_URL="/home",
            AUTOLOGIN_STRICT_EXPIRY=True,
        )

        config = settings.autologin_config()

        assert config == AutologinConfig(
            length=24,
            lifetime_minutes=15,
            remove_expired_on_issue=False,
            count_redemptions=False,
            redemption_route_name="magic",
            redirect_url="/home",
            max_generation_attempts=10,
            strict_expiry=True,
        )

    def test_invalid_settings_raise_configuration_error(self):
        with pytest.raises(ConfigurationError):
            Settings(AUTOLOGIN_LENGTH=0).autologin_config()

        with pytest.raises(ConfigurationError):
            Settings(AUTOLOGIN_SWEEP_INTERVAL_MINUTES=0).autologin_config()

    def test_production_requires_secret_key(self):
        with pytest.raises(ValueError):
            Settings(ENVIRONMENT="production")

        Settings(ENVIRONMENT="production", SECRET_KEY="a-real-secret")
