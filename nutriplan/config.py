from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the plan engine backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("NUTRIPLAN_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("NUTRIPLAN_DB_PATH") or (self.data_root / "nutriplan.db")
        ).expanduser()
        self.log_level: str = (os.environ.get("NUTRIPLAN_LOG_LEVEL") or "INFO").upper()

        # ---- Remote target estimator (OpenAI-compatible chat completions) ----
        self.estimator_base_url: str = os.environ.get(
            "TARGETS_ESTIMATOR_BASE_URL", "https://api.openai.com/v1"
        )
        # Unset key disables the estimator; callers fall back to the formula.
        self.estimator_api_key: str | None = os.environ.get("TARGETS_ESTIMATOR_API_KEY") or None
        self.estimator_model: str = os.environ.get("TARGETS_ESTIMATOR_MODEL", "gpt-4o-mini")
        self.estimator_timeout: float = float(os.environ.get("TARGETS_ESTIMATOR_TIMEOUT") or "15")
        self.estimator_temperature: float = float(
            os.environ.get("TARGETS_ESTIMATOR_TEMPERATURE") or "0.2"
        )

        self.plan_max_range_days: int = int(os.environ.get("PLAN_MAX_RANGE_DAYS") or "31")

        cors = os.environ.get("NUTRIPLAN_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
