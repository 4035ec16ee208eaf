"""
Core configuration module for the Locus site selection service.

This module manages all application settings using Pydantic Settings,
providing type-safe configuration with environment variable support.
"""

from typing import List, Optional, Dict, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Allow extra fields for forward compatibility
        extra="ignore"
    )

    # Application settings
    app_name: str = "Locus Site Selection"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # API settings
    api_v1_prefix: str = "/api/v1"
    api_docs_url: str = "/api/docs"
    api_openapi_url: str = "/api/openapi.json"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Logfire settings
    logfire_token: str = ""
    logfire_service_name: str = "locus-api"
    logfire_environment: str = "development"

    # CORS settings
    cors_origins: str = "*"

    # Locus genetic algorithm defaults
    locus_population_size: int = Field(default=20, ge=1)
    locus_generations: int = Field(default=100, ge=0)
    locus_elite_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    locus_mutation_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    locus_early_stop_threshold: float = Field(default=0.01, ge=0.0)
    locus_patience: int = Field(default=10, ge=1)
    locus_random_seed: Optional[int] = None
    locus_criteria_file: Optional[str] = None

    # Upper bounds on work accepted through the API
    max_population_size: int = Field(default=10000, ge=1)
    max_generations: int = Field(default=10000, ge=0)

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_logfire_settings(self) -> Dict[str, Any]:
        """Get Logfire configuration."""
        return {
            "token": self.logfire_token or None,
            "service_name": self.logfire_service_name,
            "environment": self.logfire_environment,
            "send_to_logfire": "if-token-present",
        }

    def get_run_defaults(self) -> Dict[str, Any]:
        """Default genetic algorithm parameters."""
        return {
            "population_size": self.locus_population_size,
            "generations": self.locus_generations,
            "elite_rate": self.locus_elite_rate,
            "mutation_rate": self.locus_mutation_rate,
            "early_stop_threshold": self.locus_early_stop_threshold,
            "patience": self.locus_patience,
        }

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


# Create global settings instance
settings = Settings()
