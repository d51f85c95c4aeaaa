from pydantic_settings import BaseSettings
from typing import List
from pydantic import model_validator


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./healx.db"
    ENVIRONMENT: str = "development"
    AUTO_CREATE_TABLES: bool = True
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    DEBUG: bool = True
    APP_NAME: str = "HealX Inventory"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    ENABLE_REQUEST_ID: bool = True
    ENABLE_REQUEST_LOGGING: bool = True
    READINESS_CHECK_DATABASE: bool = True

    # Auto-restock
    RESTOCK_SCHEDULER_ENABLED: bool = True
    RESTOCK_INTERVAL_SECONDS: int = 60
    HOSPITAL_NAME: str = "HealX Healthcare Center"

    # Notifications
    ADMIN_EMAIL: str = "inventory-admin@healx.local"
    DEFAULT_SUPPLIER_EMAIL: str = ""
    NOTIFICATION_FROM_EMAIL: str = "no-reply@healx.local"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @model_validator(mode="after")
    def validate_production_safety(self):
        if self.RESTOCK_INTERVAL_SECONDS < 1:
            raise ValueError("RESTOCK_INTERVAL_SECONDS must be at least 1.")

        if not self.is_production:
            return self

        if "sqlite" in self.DATABASE_URL.lower():
            raise ValueError("SQLite is not allowed when ENVIRONMENT is production.")

        if self.AUTO_CREATE_TABLES:
            raise ValueError("AUTO_CREATE_TABLES must be false in production; use Alembic migrations.")

        return self


settings = Settings()
