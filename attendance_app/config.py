import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# -----------------------------
# Paths
# -----------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOG_DIR = PROJECT_ROOT / "logs"

# -----------------------------
# Defaults
# -----------------------------
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TIMEOUT = 60.0
DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'attendance.db'}"

# Storage slot names
STUDENTS_SLOT = "attendance_students"
RECORDS_SLOT = "attendance_records"


class Settings(BaseModel):
    """Runtime settings, read from the environment (and a local .env file)."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT
    database_url: str = DEFAULT_DATABASE_URL
    max_slot_bytes: int = 0  # 0 = no quota
    log_dir: Path = LOG_DIR
    log_level: str = "INFO"

    @property
    def recognition_enabled(self) -> bool:
        return bool(self.api_key)


def get_settings() -> Settings:
    # API_KEY is the name the browser build used for the same credential
    return Settings(
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
        model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        timeout=float(os.getenv("GEMINI_TIMEOUT", str(DEFAULT_TIMEOUT))),
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        max_slot_bytes=int(os.getenv("MAX_SLOT_BYTES", "0")),
        log_dir=Path(os.getenv("LOG_DIR", str(LOG_DIR))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
