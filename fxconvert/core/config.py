from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, STRICT_RATE_PAIRS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "FX Convert"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "fxconvert.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Rate resolution
    pivot_currency: str = "USD"
    rate_jitter_enabled: bool = True
    # Unknown pairs resolve to a neutral 1.0 unless strict
    strict_rate_pairs: bool = False
    trend_days: int = 7

    # Auth / sessions
    session_cookie_name: str = "fx_session"
    session_ttl_days: int = 7
    password_min_length: int = 6

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.pivot_currency = self.pivot_currency.upper()
        if not 1 <= self.trend_days <= 90:
            raise ValueError(f"trend_days must be within 1..90, got {self.trend_days}")
        if self.session_ttl_days <= 0:
            raise ValueError("session_ttl_days must be positive")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
