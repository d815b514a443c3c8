"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings


class WiseVaultConfig(BaseSettings):
    """WiseVault ledger configuration"""

    # Identifier issuance
    first_account_number: int = 1001
    first_loan_id: int = 1

    # Loan defaults
    default_loan_rate_percent: str = "12.0"  # Flat annual rate, percent

    # Display configuration
    currency_code: str = "INR"
    display_precision: int = 2

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "WISEVAULT_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = WiseVaultConfig()


def get_config() -> WiseVaultConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WiseVaultConfig:
    """Reload configuration from environment"""
    global config
    config = WiseVaultConfig()
    return config
