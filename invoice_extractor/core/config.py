from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("gst-invoice-extractor", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Gemini (API key is supplied per request via the X-API-Key header)
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")

    # Filesystem locations
    upload_dir: str = Field("uploads", alias="UPLOAD_DIR")
    export_dir: str = Field("exports", alias="EXPORT_DIR")
    activity_log_file: str = Field("logs/activity.json", alias="ACTIVITY_LOG_FILE")

    # Activity log keeps only the most recent entries
    activity_log_capacity: int = Field(100, alias="ACTIVITY_LOG_CAPACITY")

    # Upload limits
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Observability
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

settings = Settings()
