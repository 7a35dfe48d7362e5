# agripulse/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
import os
from dotenv import load_dotenv

# Load .env file from the project root
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), '.env')
load_dotenv(dotenv_path=dotenv_path)

class Settings(BaseSettings):
    # API Keys & Settings
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL_NAME: str = "gemini-3-flash-preview"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Diagnostics uploads ("PNG, JPG up to 10MB")
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Oldest in-memory session is evicted beyond this
    MAX_SESSIONS: int = 1000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        case_sensitive=False # Environment variables are usually uppercase
    )

settings = Settings()
