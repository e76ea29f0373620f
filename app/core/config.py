from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Supabase
        raw_url = os.getenv("SUPABASE_URL", "")
        self.supabase_url: str = raw_url.rstrip("/")
        self.supabase_anon_key: str = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", "")
        self.supabase_key: str = self.supabase_anon_key  # alias
        self.supabase_service_role_key: str = (
            os.getenv("SUPABASE_SERVICE_ROLE_KEY")
            or os.getenv("SUPABASE_SERVICE_KEY")
            or ""
        )
        self.supabase_query_timeout_s: float = float(os.getenv("SUPABASE_QUERY_TIMEOUT", "5"))
        # Database (migrations only; runtime goes through Supabase)
        self.database_url: str = os.getenv("DATABASE_URL", "")
        # Judge0
        self.judge0_api_url: str = os.getenv("JUDGE0_API_URL") or os.getenv("JUDGE0_BASE_URL", "https://judge0-ce.p.rapidapi.com")
        self.judge0_api_key: str = os.getenv("JUDGE0_API_KEY") or os.getenv("JUDGE0_KEY", "")
        self.judge0_host: str = os.getenv("JUDGE0_HOST", "judge0-ce.p.rapidapi.com")
        self.judge0_timeout_s: float = float(os.getenv("JUDGE0_TIMEOUT_S", "10"))
        # Sandbox limits, sent string-encoded (seconds / kilobytes)
        self.judge0_cpu_time_limit: str = os.getenv("JUDGE0_CPU_TIME_LIMIT", "2.0")
        self.judge0_memory_limit: str = os.getenv("JUDGE0_MEMORY_LIMIT", "128000")
        self.judge0_wall_time_limit: str = os.getenv("JUDGE0_WALL_TIME_LIMIT", "5.0")
        # Polling
        self.judge_poll_max_attempts: int = int(os.getenv("JUDGE_POLL_MAX_ATTEMPTS", "30"))
        self.judge_poll_interval_ms: int = int(os.getenv("JUDGE_POLL_INTERVAL_MS", "1000"))
        # Test suite execution
        self.judge_parallel_test_cases: bool = _env_bool("JUDGE_PARALLEL_TEST_CASES")
        self.judge_test_case_concurrency: int = max(1, int(os.getenv("JUDGE_TEST_CASE_CONCURRENCY", "4")))
        # CORS
        self.allow_origins: list[str] = [
            o.strip().rstrip("/")
            for o in os.getenv("ALLOW_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
            if o.strip()
        ]
        # App meta
        self.app_name: str = "Daily Judge Backend"
        self.debug: bool = _env_bool("DEBUG")

    def get_database_url(self) -> str:
        return self.database_url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
