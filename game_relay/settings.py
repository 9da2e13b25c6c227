from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    # Server binding
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # WebSocket endpoint path, clients connect to ws://<host>:<port><WS_PATH>
    WS_PATH: str = "/"

    # Directory with the game UI, mounted at "/" when it exists
    STATIC_DIR: str = "public"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str | None = None
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]
    ENVIRONMENT: str = "development"


app_settings = Settings()
