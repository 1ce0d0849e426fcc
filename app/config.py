import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Settings read from the environment (+ optional .env)"""
    supabase_url: Optional[str]
    supabase_service_role_key: Optional[str]
    log_level: str
    timer_tick_seconds: float
    time_entries_table: str
    tasks_table: str
    time_summary_view: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            # Never tick faster than 10 Hz
            timer_tick_seconds=max(0.1, _env_float("TIMER_TICK_SECONDS", 1.0)),
            time_entries_table=os.getenv("TIME_ENTRIES_TABLE", "task_time_entries"),
            tasks_table=os.getenv("TASKS_TABLE", "tasks"),
            time_summary_view=os.getenv("TIME_SUMMARY_VIEW", "v_task_time_summary"),
        )


settings = Settings.from_env()
