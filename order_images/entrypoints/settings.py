from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when required credentials or settings are missing or invalid."""


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    SHOPIFY_STORE_NAME: str = Field(min_length=1)
    ADMIN_API_ACCESS_TOKEN: str = Field(min_length=1)
    API_VERSION: str = "2024-04"

    ORDERS_PAGE_LIMIT: int = Field(default=250, ge=1, le=250)
    RANGE_EARLY_EXIT: bool = True
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    BLOB_STORE_DIR: str = "blobs"
    BLOB_BASE_URL: str | None = None
    ARCHIVE_TTL_SECONDS: int = Field(default=900, gt=0)

    LOG_LEVEL: str = "INFO"


def load_config() -> Config:
    """Build ``Config`` from the environment and ``.env``.

    Raises:
        ConfigurationError: if a required setting is absent or invalid.
    """
    try:
        return Config()  # type: ignore[call-arg]
    except ValidationError as exc:
        missing = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
        raise ConfigurationError(f"Invalid or missing settings: {missing}") from exc
