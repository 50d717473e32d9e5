# backend/healthcheck/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    database_url: str = "sqlite:///./healthcheck.db"
    allow_sqlite_in_prod: bool = False

    # ---- Scoring ----
    # raise: a mistyped answer rejects the completion
    # skip:  the offending item is counted as unanswered
    invalid_response_policy: str = "raise"

    # ---- Alerts ----
    low_score_alert_threshold: float = 60.0
    low_score_alert_severity: str = "high"

    # ---- Equipment health ----
    health_score_window: int = 5
    health_score_lookback_days: int = 180
    health_score_critical_below: int = 50

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"

    def model_post_init(self, __context) -> None:
        policy = (self.invalid_response_policy or "raise").strip().lower()
        if policy not in ("raise", "skip"):
            raise ValueError(f"invalid_response_policy must be 'raise' or 'skip', got {self.invalid_response_policy!r}")
        object.__setattr__(self, "invalid_response_policy", policy)

        if self.health_score_window < 1:
            raise ValueError("health_score_window must be >= 1")

        env = (self.app_env or "local").strip().lower()
        if env in ("prod", "production"):
            if self.database_url.startswith("sqlite") and not self.allow_sqlite_in_prod:
                raise ValueError("CONFIG: sqlite database_url is not allowed in prod")


settings = Settings()
