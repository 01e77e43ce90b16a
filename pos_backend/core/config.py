from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Core ---
    PROJECT_NAME: str = "Clothing_POS"
    DATABASE_URL: str = "sqlite:///./pos.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    LOG_LEVEL: str = "INFO"

    # --- Checkout ---
    PAYMENT_TIMEOUT_SECONDS: float = 5.0
    PAYMENT_DECLINE_RATE: float = 0.1
    CART_TTL_SECONDS: int = 3600

    # --- Receipts ---
    STORE_TIMEZONE: str = "Asia/Kolkata"
    CURRENCY_SYMBOL: str = "₹"
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 25
    SMTP_FROM: str = "receipts@localhost"

    # --- Operator alerts (Twilio WhatsApp) ---
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None
    ADMIN_PHONE_NUMBER: str | None = None

    # --- Startup ---
    DB_CONNECT_RETRIES: int = 10
    DB_CONNECT_WAIT_SECONDS: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # The same .env is shared with the frontend and docker-compose
    )

settings = Settings()
