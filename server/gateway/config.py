import os
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _parse_bool(raw_value: str) -> bool:
    return raw_value.strip().lower() in ("true", "1", "yes")


class Settings:
    # Project info
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Chat Gateway")
    VERSION: str = os.getenv("VERSION", "1.0.0")

    # API settings
    API_TITLE: str = os.getenv("API_TITLE", f"{PROJECT_NAME} API")

    # CORS settings
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")
        if origin.strip()
    ]
    CORS_CREDENTIALS: bool = _parse_bool(os.getenv("CORS_CREDENTIALS", "true"))
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))
    RELOAD: bool = _parse_bool(os.getenv("RELOAD", "true"))

    # Production settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # OpenAI settings
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")

    # Perplexity settings (OpenAI-compatible API)
    PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "")
    PERPLEXITY_BASE_URL: str = os.getenv("PERPLEXITY_BASE_URL", "https://api.perplexity.ai")

    # Anthropic settings
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")

    # LLM call settings
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    LLM_WORKER_POOL_SIZE: int = int(os.getenv("LLM_WORKER_POOL_SIZE", "8"))

    # Conversation threads
    THREAD_TIMEOUT_MINUTES: int = int(os.getenv("THREAD_TIMEOUT_MINUTES", "30"))

    # Database settings (PostgreSQL only)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "chat_gateway")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "")
    DB_POOL_MIN_CONN: int = int(os.getenv("DB_POOL_MIN_CONN", "1"))
    DB_POOL_MAX_CONN: int = int(os.getenv("DB_POOL_MAX_CONN", "10"))
    SKIP_DB_CONNECTION: bool = _parse_bool(os.getenv("SKIP_DB_CONNECTION", ""))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Create settings instance
settings = Settings()
