from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime settings, read from environment variables prefixed with PEIWAN_
    or from a local .env file.
    """

    app_name: str = "陪玩平台"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite:///./peiwan.db"
    api_v1_prefix: str = "/api/v1"

    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    remember_me_access_token_expire_days: int = 30

    # Percentage applied to gift totals and withdrawal amounts when no
    # platform config row exists yet.
    default_commission_rate: Decimal = Decimal("10.00")
    # Customer-service pay per attended hour when the account sets no rate.
    default_hourly_rate: Decimal = Decimal("20.00")

    seed_admin_username: str = "admin"
    seed_admin_password: str = "admin123"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PEIWAN_", extra="ignore")


settings = Settings()
