from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class Settings:
    """Configuration container for the database, static frontend, and server binding."""
    database_url: str
    database_configured: bool
    frontend_dir: Path
    data_dir: Path
    host: str
    port: int
    environment: str
    log_level: str
    cors_origins: List[str]


def normalize_database_url(url: str) -> str:
    """Rewrite Heroku/Neon style ``postgres://`` URLs to the scheme SQLAlchemy expects."""
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://") :]
    return url


def load_settings() -> Settings:
    """Purpose: Load configuration from environment variables and defaults.
    Inputs/Outputs: No inputs; returns a Settings instance.
    Side Effects / State: Reads environment variables and creates the data directory.
    Dependencies: Uses os.getenv and BASE_DIR for default paths.
    Failure Modes: Invalid PORT env values raise ValueError.
    If Removed: App cannot locate its database or frontend and fails at startup.
    Testing Notes: Verify defaults and overrides via environment variables.
    """
    # Resolve data and frontend paths, then build Settings.
    data_dir = Path(os.getenv("DATA_DIR") or (BASE_DIR / "data")).resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    frontend_path = os.getenv("FRONTEND_DIR")
    if frontend_path:
        frontend_dir = Path(frontend_path).resolve()
    else:
        frontend_dir = (BASE_DIR / ".." / "frontend").resolve()

    raw_url = os.getenv("DATABASE_URL", "").strip()
    if raw_url:
        database_url = normalize_database_url(raw_url)
    else:
        database_url = f"sqlite:///{data_dir / 'thinkbright.db'}"

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        database_url=database_url,
        database_configured=bool(raw_url),
        frontend_dir=frontend_dir,
        data_dir=data_dir,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        environment=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )
