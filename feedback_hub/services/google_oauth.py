"""
Google Sign-In verification.
The heavy lifting (signature, issuer, expiry, audience) is done by google-auth.
"""
import logging
from typing import Any, Dict, Optional

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from feedback_hub.core.config import settings
from feedback_hub.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class GoogleOAuthService:
    def __init__(self, client_id: Optional[str] = None):
        self.client_id = client_id or settings.google_client_id

    def verify_id_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a Google ID token against the configured client id.
        Returns the decoded payload exactly as google-auth hands it back.
        """
        try:
            payload = id_token.verify_oauth2_token(token, google_requests.Request(), audience=self.client_id)
        except ValueError as e:
            logger.warning("Google ID token rejected", extra={"reason": str(e)})
            raise AuthenticationError("Invalid Google ID token") from e

        if not payload:
            logger.warning("Google ID token produced no payload")
            raise AuthenticationError("Invalid Google ID token")
        return payload
