import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))

# Database — stored in backend/data/
DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "wiki.db"),
)
MIGRATIONS_DIR: str = os.path.join(BACKEND_DIR, "migrations")

# Content generator (OpenAI-compatible chat completions endpoint)
CONTENT_GENERATOR_URL: str = os.getenv(
    "CONTENT_GENERATOR_URL", "https://openrouter.ai/api/v1/chat/completions"
)
CONTENT_GENERATOR_API_KEY: str = os.getenv("CONTENT_GENERATOR_API_KEY", "").strip()
CONTENT_GENERATOR_MODEL: str = os.getenv("CONTENT_GENERATOR_MODEL", "openai/gpt-4o-mini")
CONTENT_GENERATOR_TIMEOUT_SECONDS: float = float(os.getenv("CONTENT_GENERATOR_TIMEOUT_SECONDS", "60"))

CORS_ALLOW_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
