import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    # --- Database ---
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI", "sqlite:///taskboard.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_recycle": 280}

    # --- Backend selection (real database or local mock) ---
    USE_MOCK_BACKEND = _env_flag("USE_MOCK_BACKEND")
    MOCK_STORAGE_PATH = os.getenv("MOCK_STORAGE_PATH", "mock_storage.json")

    # --- Auth ---
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "change-me")
    ACCESS_TOKEN_MINUTES = int(os.getenv("ACCESS_TOKEN_MINUTES", "60"))

    # --- Uploads ---
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    # Fallback value is 5 * 1024 * 1024 bytes (5MB)
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 5 * 1024 * 1024))
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")

    # --- Generative AI ---
    SUMMARY_PROXY_URL = os.getenv("SUMMARY_PROXY_URL", "")
    GEMINI_API_URL = os.getenv("GEMINI_API_URL", "")
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GOOGLE_SERVICE_ACCOUNT_JSON = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "")
    GOOGLE_PROJECT_ID = os.getenv("GOOGLE_PROJECT_ID", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "")

    # --- Weather ---
    OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY", "")

    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SWAGGER = {
        "title": "Taskboard API",
        "uiversion": 3,
        "specs_route": "/apidocs/",
    }
