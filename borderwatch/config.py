import os
from dotenv import load_dotenv

load_dotenv()

ROOT_DIR = os.getcwd()


class Config:
    DB_PATH = os.getenv("DB_PATH", os.path.join(ROOT_DIR, "scenarios.db"))
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")

    # Storage
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(ROOT_DIR, "uploads"))
    PUBLIC_DIR = os.getenv("PUBLIC_DIR", os.path.join(ROOT_DIR, "public"))

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 3001))
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Chat Settings
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", 0.2))
    LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", 30))
    CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", 10))
    DEBUG_LOG_LLM_PROMPTS = os.getenv("DEBUG_LOG_LLM_PROMPTS", "false").lower() == "true"

    # Logging
    LOG_DIR = os.getenv("LOG_DIR", os.path.join(ROOT_DIR, "logs"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 1_048_576))
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", 5))

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


settings = Config()
