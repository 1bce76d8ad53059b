from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Intent recognition
    # Switch providers by changing this string
    RECOGNIZER_PROVIDER: Literal["luis", "openai"] = "luis"
    LUIS_APP_ID: str | None = None
    LUIS_API_KEY: str | None = None
    LUIS_API_HOSTNAME: str | None = None
    LUIS_MIN_SCORE: float = 0.0

    # LLM recognizer
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    LLM_TEMPERATURE: float = 0.0

    # QnA knowledge base
    QNA_KNOWLEDGEBASE_ID: str | None = None
    QNA_ENDPOINT_KEY: str | None = None
    QNA_ENDPOINT_HOSTNAME: str | None = None

    # OAuth sign-in
    # "service" talks to the token service; "memory" is for local development only
    TOKEN_PROVIDER: Literal["service", "memory"] = "service"
    OAUTH_CONNECTION_NAME: str = "SmartThings"
    OAUTH_TIMEOUT_MS: int = 300_000
    TOKEN_SERVICE_URL: str = "https://token.botframework.com"
    TOKEN_SERVICE_APP_TOKEN: str | None = None

    # Remote device API
    SMARTTHINGS_API_URL: str = "https://api.smartthings.com/v1"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Dialog engine
    MAX_STACK_DEPTH: int = 16

    # Session storage
    SESSION_STORE: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite:///./smartthings_dialogs.db"

    LOG_LEVEL: str = "INFO"

    # Loads from a .env file in the root directory
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Singleton instance
settings = Settings()
