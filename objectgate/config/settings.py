"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a running object store.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "objectgate"
    api_version: str = "0.1.0"

    # Server
    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=3000, description="Port to listen on")

    # Object Store Configuration
    storage_endpoint: str = Field(
        default="localhost",
        description="Object store host name (no scheme)"
    )
    storage_port: int = Field(
        default=9000,
        description="Object store port"
    )
    storage_use_ssl: bool = Field(
        default=False,
        description="Connect to the object store over HTTPS"
    )
    storage_access_key: str = Field(
        default="minioadmin",
        description="Object store access key"
    )
    storage_secret_key: str = Field(
        default="minioadmin",
        description="Object store secret key"
    )
    storage_region: str = Field(
        default="us-east-1",
        description="Region used when the bucket has to be created"
    )
    storage_bucket: str = Field(
        default="my-bucket",
        description="Bucket holding every object served by this API"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of a real object store."
    )

    # Uploads
    max_upload_size_mb: int = Field(
        default=10,
        description="Maximum size of one uploaded file in MB"
    )
    max_upload_files: int = Field(
        default=1,
        description="Maximum number of file parts in one upload request"
    )
    max_upload_fields: int = Field(
        default=10,
        description="Maximum number of non-file form fields in one upload request"
    )

    # Pre-signed URLs
    presigned_url_expiry_seconds: int = Field(
        default=300,
        gt=0,
        description="Validity of pre-signed upload/download URLs in seconds"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def storage_endpoint_url(self) -> str:
        """
        Build the endpoint URL boto3 expects from host, port and TLS flag.

        A scheme in storage_endpoint is tolerated and replaced.
        """
        host = self.storage_endpoint.replace("http://", "").replace("https://", "").rstrip("/")
        scheme = "https" if self.storage_use_ssl else "http"
        return f"{scheme}://{host}:{self.storage_port}"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Return the names of required settings that are missing.

        Credentials are only required when talking to a real store.
        """
        missing = []

        if not self.storage_mock_mode:
            if not self.storage_endpoint:
                missing.append("STORAGE_ENDPOINT")
            if not self.storage_access_key:
                missing.append("STORAGE_ACCESS_KEY")
            if not self.storage_secret_key:
                missing.append("STORAGE_SECRET_KEY")

        if not self.storage_bucket:
            missing.append("STORAGE_BUCKET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
