from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "AgroSat API"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Database
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "agrosat"

    @property
    def DATABASE_URL(self) -> str:
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    CACHE_ENABLED: bool = True

    @property
    def REDIS_URL(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Auth provider (Supabase GoTrue). Tokens are issued there, only verified here.
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_JWT_SECRET: str = "super-secret-jwt-token-with-at-least-32-characters-long"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # CORS - accepts comma-separated string from env vars
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        return list(self.CORS_ORIGINS)

    # LLM Configuration. OpenAI-compatible endpoints (e.g. Groq) are used
    # through OPENAI_BASE_URL; Anthropic is the second choice.
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANTHROPIC_API_KEY: str | None = None
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    LLM_TIMEOUT_SECONDS: float = 30.0
    INSIGHT_TEMPERATURE: float = 0.4
    INSIGHT_MAX_TOKENS: int = 500
    CHAT_TEMPERATURE: float = 0.7
    CHAT_MAX_TOKENS: int = 300

    # Satellite imagery (Copernicus Data Space Ecosystem)
    COPERNICUS_USER: str | None = None
    COPERNICUS_PASS: str | None = None
    COPERNICUS_CLIENT_ID: str = "cdse-public"
    COPERNICUS_TOKEN_URL: str = (
        "https://identity.dataspace.copernicus.eu/auth/realms/CDSE/protocol/openid-connect/token"
    )
    COPERNICUS_CATALOG_URL: str = "https://catalogue.dataspace.copernicus.eu/odata/v1/Products"
    COPERNICUS_COLLECTION: str = "SENTINEL-2"
    IMAGERY_DEFAULT_START: str = "2023-01-01"

    @property
    def imagery_configured(self) -> bool:
        return bool(self.COPERNICUS_USER and self.COPERNICUS_PASS)

    # Weather (Open-Meteo)
    OPEN_METEO_URL: str = "https://api.open-meteo.com/v1/forecast"
    WEATHER_PAST_DAYS: int = 14

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0
    HTTP_MAX_RETRIES: int = 2

    # Synthetic analysis fallback
    SYNTHETIC_DELAY_SECONDS: float = 1.5

    # Cache TTL (in seconds)
    CACHE_TTL_WEATHER: int = 1800  # 30 minutes

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()


settings = get_settings()
