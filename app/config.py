"""Application configuration management."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    These settings are automatically loaded from the .env file or environment variables.
    The API key must come from the environment, never from source code.

    Attributes:
        api_key: Gemini API key (API_KEY or GEMINI_API_KEY)
        analysis_model: Model used to describe style reference images
        generation_model: Model used to generate the final image
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        timeout: Request timeout in seconds (0 disables it)
        server_name: Interface the web UI binds to
        server_port: Port the web UI listens on
        run_integration_tests: Whether to run integration tests
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        populate_by_name=True
    )

    # API Keys
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("api_key", "gemini_api_key")
    )

    # Model Configuration
    analysis_model: str = "gemini-3-flash-preview"
    generation_model: str = "gemini-2.5-flash-image"

    # Application Settings
    log_level: str = "INFO"
    timeout: int = 120
    server_name: str = "0.0.0.0"
    server_port: int = 7860

    # Testing
    run_integration_tests: bool = False

    def validate_required_keys(self) -> None:
        """Validate that the API key is present.

        Raises:
            ValueError: If the API key is missing
        """
        if not self.api_key:
            raise ValueError(
                "API_KEY is required. Please set API_KEY (or GEMINI_API_KEY) in your "
                ".env file or environment variables. "
                "Get a key from: https://aistudio.google.com/apikey"
            )


# Global settings instance
settings = Settings()
