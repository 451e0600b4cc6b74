import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        data_dir: Path,
        database_url: str,
        timezone: str,
        session_secret: str,
        csrf_secret: str,
        session_max_age_hours: int,
        demo_latency_scale: float,
        log_level: str,
    ) -> None:
        self.data_dir = data_dir
        self.database_url = database_url
        self.timezone = timezone
        self.session_secret = session_secret
        self.csrf_secret = csrf_secret
        self.session_max_age_hours = session_max_age_hours
        self.demo_latency_scale = demo_latency_scale
        self.log_level = log_level

    @property
    def demo_data_dir(self) -> Path:
        return self.data_dir / "demo"


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("FINANCE_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "finance.db"
    database_url = os.getenv("FINANCE_DATABASE_URL", f"sqlite:///{default_db}")
    timezone = os.getenv("FINANCE_TIMEZONE", "Asia/Jakarta")
    session_secret = os.getenv(
        "FINANCE_SESSION_SECRET",
        "4f2c0d8a9b1e7365a0c3d9e8f1b2a4c6d7e8f90a1b2c3d4e5f60718293a4b5c6",
    )
    csrf_secret = os.getenv(
        "FINANCE_CSRF_SECRET",
        "9a8b7c6d5e4f30211f2e3d4c5b6a79880a1b2c3d4e5f6a7b8c9d0e1f2a3b4c5d",
    )
    session_max_age_hours = int(os.getenv("FINANCE_SESSION_MAX_AGE_HOURS", "168"))
    demo_latency_scale = float(os.getenv("FINANCE_DEMO_LATENCY_SCALE", "1"))
    log_level = os.getenv("FINANCE_LOG_LEVEL", "INFO").upper()
    return Settings(
        data_dir=data_dir,
        database_url=database_url,
        timezone=timezone,
        session_secret=session_secret,
        csrf_secret=csrf_secret,
        session_max_age_hours=session_max_age_hours,
        demo_latency_scale=demo_latency_scale,
        log_level=log_level,
    )
