import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:4200"])
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Role allowed to manage every provider's schedule.
ELEVATED_SCHEDULE_ROLE = os.getenv("ELEVATED_SCHEDULE_ROLE", "overlord")

DEFAULT_APPOINTMENT_DURATION_MINUTES = int(os.getenv("DEFAULT_APPOINTMENT_DURATION_MINUTES", "60"))
DEFAULT_BUFFER_MINUTES = int(os.getenv("DEFAULT_BUFFER_MINUTES", "15"))

DEFAULT_RECURRENCE_COUNT = int(os.getenv("DEFAULT_RECURRENCE_COUNT", "12"))
MAX_RECURRENCE_COUNT = int(os.getenv("MAX_RECURRENCE_COUNT", "104"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if DEFAULT_BUFFER_MINUTES < 0:
        raise RuntimeError("DEFAULT_BUFFER_MINUTES cannot be negative.")
    if DEFAULT_RECURRENCE_COUNT > MAX_RECURRENCE_COUNT:
        raise RuntimeError("DEFAULT_RECURRENCE_COUNT cannot exceed MAX_RECURRENCE_COUNT.")
