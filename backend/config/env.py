from fastapi import Request
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional

# Minimum HS256 key length: the size of its SHA-256 digest
MIN_JWT_SECRET_BYTES = 32

class CompletionConfig(BaseSettings):
    """Configuration for the external text-completion service."""
    api_key: Optional[str] = Field(
        default=None,
        description="API key for the completion provider; generation falls back to delimiter parsing when unset"
    )
    model: str = Field(
        default="gpt-3.5-turbo",
        description="Chat model used for flashcard generation and distractors"
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature for generated flashcards"
    )
    distractor_temperature: float = Field(
        default=0.8,
        description="Sampling temperature for multiple-choice distractors"
    )
    max_tokens: int = Field(
        default=1000,
        description="Maximum tokens returned by a single completion"
    )
    timeout_seconds: float = Field(
        default=20.0,
        description="Timeout for a single completion call"
    )
    max_source_chars: int = Field(
        default=4000,
        description="Maximum number of source-text characters included in a prompt"
    )

class StorageConfig(BaseSettings):
    """Configuration for the blob store holding images and documents."""
    bucket_name: Optional[str] = Field(
        default=None,
        description="S3 bucket for uploads"
    )
    region: str = Field(
        default="us-east-1",
        description="AWS region of the bucket"
    )
    max_upload_size_mb: int = Field(
        default=10,
        description="Maximum accepted upload size in megabytes"
    )

class Settings(BaseSettings):
    # Database settings
    database_url: str = Field(
        default="sqlite:///./flashcards.db",
        description="Database connection URL"
    )
    auto_create_tables: bool = Field(
        default=False,
        description="Create missing tables at startup instead of relying on alembic"
    )

    # API settings
    api_title: str = Field(
        default="Flashcard Study API",
        description="API title for documentation"
    )
    api_description: str = Field(
        default="API for flashcard sets, sharing, collaboration and study progress",
        description="API description for documentation"
    )
    api_version: str = Field(
        default="1.0.0",
        description="API version"
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware"
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the web client, used to build share URLs"
    )

    # Identity settings
    jwt_secret: Optional[str] = Field(
        default=None,
        description="Shared secret used to verify bearer credentials; required, at least 32 bytes"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Signing algorithm of bearer credentials"
    )

    # Logging settings
    log_dir: Optional[str] = Field(
        default=None,
        description="Directory for log files; defaults to backend/logs"
    )

    completion: CompletionConfig = Field(
        default_factory=CompletionConfig,
        description="Text-completion service configuration"
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Blob storage configuration"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Allow extra fields in environment without validation errors

    def check_jwt_secret(self):
        """Refuse a missing or short bearer-credential secret.

        Raises:
            ValueError: If ``jwt_secret`` is unset or shorter than 32 bytes
        """
        if not self.jwt_secret:
            raise ValueError("JWT_SECRET must be set to the identity provider's signing secret")
        if len(self.jwt_secret.encode("utf-8")) < MIN_JWT_SECRET_BYTES:
            raise ValueError(f"JWT_SECRET must be at least {MIN_JWT_SECRET_BYTES} bytes long")

def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the app was built with."""
    return request.app.state.settings
