# quack_companion/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..schemas.chat import ParseErrorPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    PROJECT_NAME: str = "Quack Companion"
    VERSION: str = "0.1.0"

    # Local companion API
    API_V1_PREFIX: str = "/api/v1"
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Remote Quack API
    ENDPOINT: str = "http://localhost:8050"
    GITHUB_TOKEN: str = ""

    # Request deadlines (seconds)
    REQUEST_TIMEOUT: float = 30.0
    STREAM_READ_TIMEOUT: float = 120.0

    # How to treat chat chunks that are not valid JSON
    PARSE_ERROR_POLICY: ParseErrorPolicy = ParseErrorPolicy.SKIP

    # Session state
    STATE_PATH: str = ".quack/state.json"


settings = Settings()
