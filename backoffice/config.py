from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class DeletePolicy(str, Enum):
    """What happens to a customer/supplier that still has dependents."""

    PERMISSIVE = "permissive"  # delete anyway, storage FKs decide
    RESTRICT = "restrict"  # refuse while sales/products reference the owner


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./backoffice.db"
    SQLITE_FOREIGN_KEYS: bool = True
    OWNER_DELETE_POLICY: DeletePolicy = DeletePolicy.PERMISSIVE
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    IMPORT_ERROR_DIR: str = "tmp/error_reports"


@lru_cache
def get_settings() -> Settings:
    return Settings()
