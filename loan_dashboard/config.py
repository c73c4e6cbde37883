"""Configuration management using Pydantic Settings"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (MySQL reporting store populated by the ETL)
    db_host: str = "localhost"
    db_user: str = "dbmasteruser"
    db_password: str = ""
    db_database: str = "EmeraldFinanceLtd_db1"
    db_port: int = 3306
    database_url: Optional[str] = None  # Overrides the db_* parts when set

    # Connection pool
    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout: float = 30.0
    db_pool_recycle: int = 3600
    verify_db_on_startup: bool = True

    # Service
    service_name: str = "loan-dashboard-api"
    log_level: str = "INFO"
    port: int = 5001
    cors_origins: str = "*"

    # Query defaults
    default_window_days: int = 7
    summary_window_days: int = 30
    default_row_limit: int = 1000
    loan_type_row_limit: int = 500
    max_row_limit: int = 10_000

    @property
    def sqlalchemy_url(self) -> str | URL:
        if self.database_url:
            return self.database_url
        return URL.create(
            "mysql+pymysql",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
            query={"charset": "utf8mb4"},
        )

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or ["*"]


settings = Settings()
