from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from psedata.data.models import ConnectionInfo

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PSEDATA_", env_file=".env", env_file_encoding="utf-8")

    log_level: str = "INFO"
    log_dir: Path = PROJECT_ROOT / "logs"

    engine: Literal["sqlite", "duckdb", "postgres"] = "sqlite"
    data_dir: Path = PROJECT_ROOT / "data"

    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "pse"
    db_password: str = ""
    db_name: str = "pse_data"
    # zone applied when provisioning; stored dates are calendar days either way
    time_zone: str | None = "Asia/Manila"

    def connection_info(self) -> ConnectionInfo:
        return ConnectionInfo(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            database=self.db_name,
        )


settings = Settings()
