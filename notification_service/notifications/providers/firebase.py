"""Firebase Cloud Messaging push provider.

API Details:
    Endpoint: {api_base_url}/projects/{project_id}/messages:send
    Method: POST (JSON {"message": {...}})
    Authentication: OAuth2 bearer token minted from a service account
    Response: JSON object whose 'name' identifies the message
"""

import threading
from typing import Any, Callable, Dict, Optional

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from notification_service.logging import get_logger
from notification_service.notifications.models import PushPayload

from .base import BaseProvider
from .exceptions import (
    ProviderConfigurationError,
    ProviderDeliveryError,
    ProviderHTTPError,
    ProviderTimeoutError,
)

logger = get_logger(__name__, component="provider")

FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_authorized_session(project_id: str, client_email: str, private_key: str) -> requests.Session:
    """Create an HTTP session that attaches service-account bearer tokens.

    Raises:
        ProviderConfigurationError: If the service account key cannot be loaded
    """
    creds_info = {
        "type": "service_account",
        "project_id": project_id,
        "client_email": client_email,
        "private_key": private_key,
        "token_uri": TOKEN_URI,
    }
    try:
        credentials = service_account.Credentials.from_service_account_info(
            creds_info, scopes=[FCM_SCOPE]
        )
    except (ValueError, GoogleAuthError) as e:
        raise ProviderConfigurationError(f"Invalid Firebase service account: {e}") from e
    return AuthorizedSession(credentials)


class FirebasePushProvider(BaseProvider[PushPayload]):
    """Push provider backed by the FCM HTTP v1 API."""

    name = "firebase-fcm"
    vendor_label = "Firebase FCM"

    def __init__(
        self,
        project_id: Optional[str],
        client_email: Optional[str],
        private_key: Optional[str],
        api_base_url: str = "https://fcm.googleapis.com/v1",
        timeout: int = 10,
        session_factory: Optional[Callable[[str, str, str], requests.Session]] = None,
    ):
        self.project_id = project_id
        self.client_email = client_email
        self.private_key = private_key
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self._session_factory = session_factory or build_authorized_session
        self._session: Optional[requests.Session] = None
        self._session_lock = threading.Lock()

    def is_configured(self) -> bool:
        return bool(self.project_id and self.client_email and self.private_key)

    def _get_session(self) -> requests.Session:
        # Partition workers may send concurrently; build the session once.
        with self._session_lock:
            if self._session is None:
                self._session = self._session_factory(
                    self.project_id, self.client_email, self.private_key
                )
            return self._session

    def build_message(self, payload: PushPayload) -> Dict[str, Any]:
        """Translate a PushPayload into the FCM v1 message body."""
        notification: Dict[str, Any] = {"title": payload.title, "body": payload.body}
        if payload.image_url:
            notification["image"] = payload.image_url

        message: Dict[str, Any] = {"token": payload.to, "notification": notification}

        if payload.data:
            # FCM only accepts string values in the data map
            message["data"] = {str(key): str(value) for key, value in payload.data.items()}

        return {"message": message}

    def _deliver(self, payload: PushPayload) -> Optional[str]:
        url = f"{self.api_base_url}/projects/{self.project_id}/messages:send"
        session = self._get_session()

        try:
            response = session.post(url, json=self.build_message(payload), timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(
                f"Request to FCM timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderDeliveryError(f"Request to FCM failed: {e}") from e
        except GoogleAuthError as e:
            raise ProviderConfigurationError(f"Failed to obtain FCM access token: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            detail = response.reason
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                detail = body["error"].get("message") or detail
            raise ProviderHTTPError(
                f"FCM HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
                url=url,
            )

        return body.get("name") if isinstance(body, dict) else None
