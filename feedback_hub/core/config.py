import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

_DEV_JWT_SECRET = "dev-only-insecure-jwt-secret-DO-NOT-USE-IN-PROD"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


class Config(BaseModel):
    app_name: str = "Feedback Hub"
    environment: str = os.getenv("APP_ENV", os.getenv("NODE_ENV", "development"))
    api_prefix: str = "/api/v1"
    port: int = int(os.getenv("PORT", "8000"))

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./feedback_hub.db")

    # Auth
    google_client_id: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
    jwt_secret: str = os.getenv("JWT_SECRET", _DEV_JWT_SECRET)
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
    auth_cookie_name: str = "authToken"

    # Operations
    maintenance_mode: bool = _env_flag("MAINTENANCE_MODE")
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    # Rate limiting is off by default under test so suites don't trip the window
    rate_limit_enabled: bool = _env_flag(
        "RATE_LIMIT_ENABLED",
        "false" if os.getenv("APP_ENV", os.getenv("NODE_ENV", "")) == "testing" else "true",
    )
    hierarchy_rate_limit: str = os.getenv("HIERARCHY_RATE_LIMIT", "100/15minutes")

    @property
    def is_development(self) -> bool:
        return self.environment in ("development", "testing")


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if not settings.is_development:
    if settings.jwt_secret in ("", "changeme", _DEV_JWT_SECRET):
        raise RuntimeError(
            "FATAL: JWT_SECRET must be set to a secure random value for non-development "
            "environments. Generate one with: openssl rand -base64 32"
        )
else:
    if settings.jwt_secret == _DEV_JWT_SECRET:
        _logger.warning("Using insecure default JWT_SECRET, only acceptable in development.")
