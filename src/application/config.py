"""Application configuration using Pydantic Settings."""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "interview-practice-engine"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Storage backend: "local" or "dynamodb"
    storage_backend: str = "local"

    # AWS settings for the DynamoDB backend
    aws_region: str = "us-east-1"
    sessions_table_name: str = "PracticeSessions"
    usage_table_name: str = "UsageEvents"
    questions_table_name: str = "Questions"
    subscribers_table_name: str = "Subscribers"
    settings_table_name: str = "SystemSettings"

    # AWS credentials (optional, uses default credential chain if not set)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None

    # Scoring provider configuration: "simple", "bedrock" or "openai"
    scoring_provider_type: str = "simple"
    scoring_timeout_seconds: float = 30.0
    scoring_max_tokens: int = 1500
    scoring_temperature: float = 0.3

    # Bedrock configuration
    bedrock_model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"

    # OpenAI configuration
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    # Authentication
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = None

    # Quota defaults for the local settings provider
    free_user_question_daily_limit: int = 5
    free_user_session_daily_limit: int = 2

    @model_validator(mode="after")
    def require_real_secret_for_aws(self) -> "Settings":
        """Refuse the placeholder signing key outside local development."""
        if self.storage_backend.lower() == "dynamodb" and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("jwt_secret must be set when storage_backend is 'dynamodb'")
        return self


# Create a singleton instance
settings = Settings()
