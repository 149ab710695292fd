from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("portal-invoice-extractor", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Uploads (10MB, same limit the portal enforces on invoice uploads)
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # Documents shorter than this also get the whole-text keyword search
    keyword_fallback_min_lines: int = Field(9, alias="KEYWORD_FALLBACK_MIN_LINES")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

settings = Settings()
