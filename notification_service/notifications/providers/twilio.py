"""Twilio SMS provider.

API Details:
    Endpoint: {api_base_url}/Accounts/{account_sid}/Messages.json
    Method: POST (form-encoded To, From, Body)
    Authentication: HTTP basic (account SID, auth token)
    Response: JSON object whose 'sid' identifies the message
"""

from typing import Any, Dict, Optional

import requests

from notification_service.logging import get_logger
from notification_service.notifications.models import SmsPayload

from .base import BaseProvider
from .exceptions import ProviderDeliveryError, ProviderHTTPError, ProviderTimeoutError

logger = get_logger(__name__, component="provider")


class TwilioSmsProvider(BaseProvider[SmsPayload]):
    """SMS provider backed by the Twilio Messages REST API."""

    name = "twilio-sms"
    vendor_label = "Twilio SMS"

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        api_base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def _deliver(self, payload: SmsPayload) -> Optional[str]:
        url = f"{self.api_base_url}/Accounts/{self.account_sid}/Messages.json"
        form = {
            "To": payload.to,
            "From": payload.from_number or self.from_number,
            "Body": payload.body,
        }

        logger.debug(
            "HTTP POST request to Twilio",
            extra={"event": "provider.request", "url": url, "timeout": self.timeout},
        )

        try:
            response = self._session.post(
                url,
                data=form,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(
                f"Request to Twilio timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderDeliveryError(f"Request to Twilio failed: {e}") from e

        body = self._parse_json(response)

        if response.status_code >= 400:
            detail = body.get("message") or response.reason
            raise ProviderHTTPError(
                f"Twilio HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
                url=url,
            )

        return body.get("sid")

    @staticmethod
    def _parse_json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
