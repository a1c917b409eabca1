from unittest.mock import patch

import pytest

from feedback_hub.core.exceptions import AuthenticationError
from feedback_hub.services.google_oauth import GoogleOAuthService

VERIFY = "feedback_hub.services.google_oauth.id_token.verify_oauth2_token"


def test_verify_id_token_rejects_missing_payload():
    with patch(VERIFY, return_value=None):
        with pytest.raises(AuthenticationError) as exc:
            GoogleOAuthService(client_id="client-123").verify_id_token("token")
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid Google ID token"


def test_verify_id_token_returns_the_exact_payload():
    payload = {"sub": "g-1", "email": "eli@acme.io", "name": "Eli"}
    with patch(VERIFY, return_value=payload) as verify:
        result = GoogleOAuthService(client_id="client-123").verify_id_token("token")

    assert result is payload
    args, kwargs = verify.call_args
    assert args[0] == "token"
    assert kwargs["audience"] == "client-123"


def test_verify_id_token_maps_library_errors():
    with patch(VERIFY, side_effect=ValueError("Token expired")):
        with pytest.raises(AuthenticationError):
            GoogleOAuthService(client_id="client-123").verify_id_token("token")
