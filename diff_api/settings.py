"""
Settings for the structural diff service, read once from the environment.
"""
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _optional_int(name: str):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


class AppSettings:
    """Application settings with environment variable support."""

    def __init__(self):
        self.api_version: str = os.getenv("API_VERSION", "1.0.0")
        self.environment: str = os.getenv("ENVIRONMENT", "development")
        self.build_commit: str = os.getenv("BUILD_COMMIT", "unknown")
        self.enable_audit_logging: bool = _flag("ENABLE_AUDIT_LOGGING", "true")
        self.enable_redaction: bool = _flag("ENABLE_REDACTION", "true")
        # Rendered diff limits (unset = unlimited)
        self.diff_max_lines = _optional_int("DIFF_MAX_LINES")
        self.diff_max_bytes = _optional_int("DIFF_MAX_BYTES")
        # Cap on structured differences returned per response
        self.max_differences: int = int(os.getenv("MAX_DIFFERENCES", "200"))


settings = AppSettings()
