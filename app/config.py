"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class CalorieSource(str, Enum):
    """Where a scaled food's calorie value comes from"""

    STORED = "stored"
    MACROS = "macros"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="MealTrack", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Database settings
    database_url: str = Field(
        default="postgresql+psycopg2://user@localhost:5432/mealtrack",
        description="SQLAlchemy connection URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # USDA FoodData Central
    usda_api_key: Optional[str] = Field(
        default=None, description="FoodData Central API key; lookups disabled when unset"
    )
    usda_base_url: str = Field(
        default="https://api.nal.usda.gov/fdc/v1",
        description="FoodData Central base URL",
    )
    usda_timeout_sec: float = Field(
        default=8.0, gt=0, description="Timeout for a single FoodData Central request"
    )
    usda_search_page_size: int = Field(
        default=10, ge=1, le=200, description="Results requested per food search"
    )

    # Nutrition engine
    default_target_calories: float = Field(
        default=2000, gt=0, description="Daily target used when a plan omits one"
    )
    distribution_tolerance: float = Field(
        default=0.1,
        gt=0,
        description="Percentage points a distribution may deviate from 100 before rescaling",
    )
    new_meal_percentage_cap: float = Field(
        default=50, gt=0, le=100, description="Largest share a newly inserted meal may take"
    )
    default_new_meal_percentage: float = Field(
        default=20, ge=0, le=100, description="Share given to a new meal when none is requested"
    )
    calorie_source: CalorieSource = Field(
        default=CalorieSource.STORED,
        description="Authoritative calorie source when scaling a food",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="MealTrack API", description="API documentation title"
    )
    api_description: str = Field(
        default="Meal plans, eaten tracking and nutrient summaries",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("calorie_source", mode="before")
    @classmethod
    def validate_calorie_source(cls, v):
        if isinstance(v, str):
            return CalorieSource(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING


# Global settings instance
settings = Settings()
