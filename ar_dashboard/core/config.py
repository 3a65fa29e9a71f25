from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("ar-dashboard", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Ledger storage ("sqlite" or "memory")
    ledger_backend: str = Field("sqlite", alias="LEDGER_BACKEND")
    database_path: str = Field("ledger.db", alias="DATABASE_PATH")

    # Teams (overdue reminders)
    teams_webhook_url: str | None = Field(default=None, alias="TEAMS_WEBHOOK_URL")

    # API Base URL (for statement links in Teams cards)
    api_base_url: str = Field("http://127.0.0.1:8000", alias="API_BASE_URL")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Document header
    company_name: str = Field("Zoom Books Company", alias="COMPANY_NAME")
    company_address: str = Field(
        "Acirassi Books Ltd,507/508-19055 Airport Way,Pitt Meadows BC V3Y 0G4",
        alias="COMPANY_ADDRESS",
    )  # Comma-separated lines

    # Dashboard defaults
    default_revenue_window: str = Field("30", alias="DEFAULT_REVENUE_WINDOW")  # Day count or "all"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def company_address_lines(self) -> list[str]:
        return [line.strip() for line in self.company_address.split(",") if line.strip()]

settings = Settings()
