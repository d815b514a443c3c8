"""
Test suite for configuration
"""

from decimal import Decimal

from wisevault import config as config_module
from wisevault.config import WiseVaultConfig, get_config, reload_config
from wisevault.directory import LedgerDirectory


class TestConfig:
    """Test configuration loading"""

    def test_defaults(self, monkeypatch):
        """Test default values"""
        for name in ("FIRST_ACCOUNT_NUMBER", "FIRST_LOAN_ID", "DEFAULT_LOAN_RATE_PERCENT"):
            monkeypatch.delenv(f"WISEVAULT_{name}", raising=False)
        settings = WiseVaultConfig()

        assert settings.first_account_number == 1001
        assert settings.first_loan_id == 1
        assert settings.default_loan_rate_percent == "12.0"
        assert settings.currency_code == "INR"
        assert settings.enable_audit_logging

    def test_environment_override(self, monkeypatch):
        """Test WISEVAULT_ prefixed variables override defaults"""
        monkeypatch.setenv("WISEVAULT_FIRST_ACCOUNT_NUMBER", "7001")
        monkeypatch.setenv("WISEVAULT_DEFAULT_LOAN_RATE_PERCENT", "9.5")
        monkeypatch.setenv("WISEVAULT_ENABLE_AUDIT_LOGGING", "false")

        try:
            settings = reload_config()

            assert settings.first_account_number == 7001
            assert get_config() is settings
            assert config_module.config is settings

            directory = LedgerDirectory()
            assert directory.create_account("A", 0, "Saving", "a").value == 7001
            assert directory.default_rate_percent == Decimal('9.5')
            assert not directory.audit_trail.enabled
        finally:
            monkeypatch.undo()
            reload_config()
