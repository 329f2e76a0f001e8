from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream HR services (attendance, leave, payroll, work schedules, directory)
    UPSTREAM_BASE_URL: str = "http://localhost:8080"
    UPSTREAM_TIMEOUT_SEC: float = 10.0
    UPSTREAM_PAGE_SIZE: int = 1000
    UPSTREAM_MAX_PAGES: int = 20
    UPSTREAM_API_TOKEN: str | None = None

    # Per-employee lookups issued after the primary datasets
    ATTENDANCE_SUMMARY_FAN_OUT: int = 20
    LEAVE_BALANCE_FAN_OUT: int = 50

    TOP_N_LIMIT: int = 10
    CHRONIC_ABSENCE_THRESHOLD: int = 3

    # Records without a shift / department / leave type end up under this key
    UNASSIGNED_LABEL: str = "unassigned"

    AI_REPORT_PATH: str = "/api/ai-reports/generate"

    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]


settings = Settings()
