import logging
from typing import Any, Dict, Optional

import requests

from feedback_hub.client.config import client_settings

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Thin JSON client for the Feedback Hub API.

    Raises:
        requests.HTTPError: on any non-2xx response.
        requests.RequestException: on connection problems and timeouts.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
    ):
        self.base_url = (base_url or client_settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else client_settings.timeout
        self.session = session or requests.Session()
        self.token = token

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        response = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=json)

    def login_with_google(self, id_token: str) -> Dict[str, Any]:
        data = self.post("/auth/google", json={"idToken": id_token})
        self.set_token(data["token"])
        logger.info("Signed in", extra={"user_id": data["user"]["id"]})
        return data
