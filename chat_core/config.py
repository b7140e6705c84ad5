"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_DB_PATH = DATA_DIR / "chat.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_CONTEXT_MAX_TOKENS = 8000
DEFAULT_MEM0_BASE_URL = "https://api.mem0.ai/v1"
DEFAULT_UPLOAD_FOLDER = "chatgpt-clone"


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime settings read from the environment."""

    database_url: str | None = None
    anthropic_api_key: str | None = None
    anthropic_model: str = DEFAULT_MODEL
    context_max_tokens: int = DEFAULT_CONTEXT_MAX_TOKENS
    mem0_api_key: str | None = None
    mem0_base_url: str = DEFAULT_MEM0_BASE_URL
    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    cloudinary_folder: str = DEFAULT_UPLOAD_FOLDER
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    bcrypt_rounds: int = 12
    api_host: str = "localhost"
    api_port: int = 8000


def load_settings() -> Settings:
    """Build Settings from environment variables."""
    defaults = Settings()
    cors = os.getenv("CORS_ORIGINS")
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
        anthropic_model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
        context_max_tokens=int(
            os.getenv("CONTEXT_MAX_TOKENS", str(DEFAULT_CONTEXT_MAX_TOKENS))
        ),
        mem0_api_key=os.getenv("MEM0_API_KEY"),
        mem0_base_url=os.getenv("MEM0_BASE_URL", DEFAULT_MEM0_BASE_URL),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY"),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET"),
        cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", DEFAULT_UPLOAD_FOLDER),
        cors_origins=_split_csv(cors) if cors else defaults.cors_origins,
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        api_host=os.getenv("API_HOST", "localhost"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )
