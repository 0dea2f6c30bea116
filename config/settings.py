from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Supabase project (defaults match `supabase start` for local dev)
    SUPABASE_URL: str = "http://localhost:54321"

    # Keys: no default, MUST be set in .env
    SUPABASE_ANON_KEY: str
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # Phone numbers without a dial code are parsed in this region
    HOME_REGION: str = "ZW"

    # External ledger ("zm-" accounts live in their own table)
    EXTERNAL_LEDGER_PREFIX: str = "zm-"
    EXTERNAL_LEDGER_TABLE: str = "zm_accounts"

    # Recipient search
    LOOKUP_TIMEOUT_SECONDS: float = 10.0
    SEARCH_DEBOUNCE_MS: int = 400
    USERNAME_SUGGESTION_LIMIT: int = 3

    # Transfers
    MIN_TRANSFER_AMOUNT: Decimal = Decimal("1.00")
    MAX_NOTE_LENGTH: int = 100

    # Profile bootstrap
    PROFILE_FETCH_RETRIES: int = 3
    PROFILE_RETRY_BASE_DELAY_SECONDS: float = 1.0
    STARTING_BALANCE: Decimal = Decimal("1000.00")

    HTTP_TIMEOUT_SECONDS: float = 15.0

    # App
    APP_NAME: str = "ZimPay"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev
    LOG_LEVEL: str = "INFO"


settings = Settings()
