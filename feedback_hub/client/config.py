import os
from typing import Optional
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _build_flag(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() == "true"


class ClientConfig(BaseModel):
    api_url: str = os.getenv("CLIENT_API_URL", "http://localhost:8000/api/v1")
    timeout: float = float(os.getenv("CLIENT_TIMEOUT", "10"))
    google_client_id: Optional[str] = os.getenv("CLIENT_GOOGLE_CLIENT_ID")
    # Baked in at build time; when true the client never asks the server
    maintenance_mode: Optional[bool] = _build_flag("CLIENT_MAINTENANCE_MODE")
    maintenance_poll_seconds: float = 30.0


client_settings = ClientConfig()
