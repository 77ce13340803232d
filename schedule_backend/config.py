from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- logging ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # --- upload ---
    MAX_UPLOAD_MB: int = 10
    ALLOWED_EXTENSIONS: List[str] = [".xlsx", ".xls", ".xlsm", ".csv"]

    # --- CORS ---
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    # JSON file with {"EEC 101": {"lecture": 2, "lab": 1, "total": 3}, ...}
    CANONICAL_SPANS_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

settings = Settings()
