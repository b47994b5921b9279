import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def finalization_settings(*, scheduler_default: str = "1") -> dict:
    """FINALIZATION block shared by every environment, read from the environment."""
    return {
        "interval_minutes": int(os.getenv("FINALIZATION_INTERVAL_MINUTES", "15")),
        "shift_end_buffer_minutes": int(os.getenv("SHIFT_END_BUFFER_MINUTES", "30")),
        "auto_clock_out_buffer_minutes": int(os.getenv("AUTO_CLOCK_OUT_BUFFER_MINUTES", "30")),
        "timezone": os.getenv("ATTENDANCE_TIMEZONE") or None,
        "scheduler_enabled": _flag("FINALIZATION_SCHEDULER_ENABLED", scheduler_default),
        "notification_workers": int(os.getenv("NOTIFICATION_WORKERS", "2")),
        "weekend_days": os.getenv("WEEKEND_DAYS", "5,6"),
    }
