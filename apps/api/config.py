from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pydantic's BaseSettings automatically reads from environment variables
    and .env files. This is the single source of truth for all config.
    """

    # App
    app_name: str = "Pulsecheck API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS - which dashboard URLs can call this API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Target application - the system being diagnosed
    target_base_url: str = "http://localhost:3000"
    gateway_health_path: str = "/api/health"

    # Probes
    probe_timeout_seconds: float = 5.0          # Per-probe limit
    http_timeout_seconds: float = 5.0           # Per-request limit inside a probe
    max_concurrent_probes: int = 4
    slow_gateway_threshold_ms: float = 2000.0   # Gateway slower than this is degraded

    # Remediation
    remediation_timeout_seconds: float = 10.0

    # Event bus - "redis" or "memory"
    event_bus_backend: str = "redis"
    redis_url: str = "redis://localhost:6379/0"
    event_history_size: int = 100               # In-memory backend keeps this many events

    # Report archive - empty string disables archiving
    report_archive_dir: str = "data/reports"

    # Synthesis thresholds (heuristic, flagged for product review)
    outage_down_services: int = 2
    outage_critical_modules: int = 2
    cascading_degraded_modules: int = 3

    # Recovery plan
    short_term_eta: str = "30-60 minutes"

    model_config = {
        "env_file": ".env",          # Reads from .env file in project root
        "env_file_encoding": "utf-8",
        "case_sensitive": False,      # REDIS_URL and redis_url both work
    }


# Singleton instance — import this wherever you need settings
settings = Settings()
