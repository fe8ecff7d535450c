"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults for pool sizing, timeouts and password hashing cost

Collaborators:
  - infrastructure/db/pool.py: pool sizing + statement_timeout
  - infrastructure/db/instrumentation.py: slow query threshold, healthcheck
  - identity/passwords.py: argon2 cost parameters
  - crosscutting/logger.py: log level / JSON output

Constraints:
  - No business logic — pure configuration

Notes:
  - Singleton via lru_cache
  - Password cost defaults match argon2-cffi's PasswordHasher defaults
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/production)
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        db_pool_min_size: Minimum pooled connections (default: 2)
        db_pool_max_size: Maximum pooled connections (default: 10)
        db_pool_timeout_seconds: Max wait to acquire a connection (default: 30)
        db_statement_timeout_ms: Per-statement timeout (default: 30s, 0 = off)
        db_slow_query_seconds: Threshold for slow query warnings (default: 0.25)
        db_healthcheck_on_acquire: SELECT 1 when acquiring a connection
        password_time_cost: argon2 iterations (default: 3)
        password_memory_cost: argon2 memory in KiB (default: 65536)
        password_parallelism: argon2 lanes (default: 4)
    """

    # Required (no defaults)
    database_url: str

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_pool_timeout_seconds: float = 30.0
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Database - Instrumentation
    db_slow_query_seconds: float = 0.25
    db_healthcheck_on_acquire: bool = True

    # Security - Password hashing (argon2id)
    password_time_cost: int = 3
    password_memory_cost: int = 65536
    password_parallelism: int = 4

    @field_validator("db_pool_min_size", "db_pool_max_size")
    @classmethod
    def pool_size_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("pool sizes must be greater than 0")
        return v

    @field_validator("db_statement_timeout_ms")
    @classmethod
    def statement_timeout_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("db_statement_timeout_ms must be >= 0")
        return v

    @field_validator("password_time_cost", "password_memory_cost", "password_parallelism")
    @classmethod
    def password_cost_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("password hashing parameters must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        if self.db_pool_max_size < self.db_pool_min_size:
            raise ValueError(
                f"db_pool_max_size ({self.db_pool_max_size}) must be >= "
                f"db_pool_min_size ({self.db_pool_min_size})"
            )
        return self

    @model_validator(mode="after")
    def validate_password_memory(self):
        # argon2 exige memory_cost >= 8 * parallelism
        if self.password_memory_cost < 8 * self.password_parallelism:
            raise ValueError(
                "password_memory_cost must be at least 8 * password_parallelism"
            )
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
