from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from config import (
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_TIMEOUT_SECONDS,
    TWILIO_VERIFY_SERVICE_SID,
)

# -------------------------------------------------------------------
# Twilio Verify v2
# -------------------------------------------------------------------

VERIFY_BASE = "https://verify.twilio.com/v2/Services"
APPROVED = "approved"


class VerificationError(Exception):
    """
    Provider said no (or is not configured).
    status_code is the provider's HTTP status when there was a response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TwilioVerifyClient:
    def __init__(
        self,
        account_sid: Optional[str] = TWILIO_ACCOUNT_SID,
        auth_token: Optional[str] = TWILIO_AUTH_TOKEN,
        service_sid: Optional[str] = TWILIO_VERIFY_SERVICE_SID,
        timeout: float = TWILIO_TIMEOUT_SECONDS,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.service_sid = service_sid
        self.timeout = timeout

        if not self.configured:
            print(
                "[otp] Twilio credentials not set. "
                "OTP endpoints will fail until you add env vars."
            )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.service_sid)

    def _post(self, resource: str, data: Dict[str, str]) -> Dict[str, Any]:
        if not self.configured:
            raise VerificationError("Twilio not configured")

        url = f"{VERIFY_BASE}/{self.service_sid}/{resource}"
        try:
            response = requests.post(
                url,
                data=data,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise VerificationError(f"Twilio request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok:
            # Twilio error shape: {"code": 60200, "message": "...", "status": 400}
            message = payload.get("message") or response.text or response.reason
            raise VerificationError(message, status_code=response.status_code)

        return payload

    def send(self, phone: str) -> Dict[str, Any]:
        """
        Start an SMS verification. Returns {"sid", "status"}.
        """
        payload = self._post("Verifications", {"To": phone, "Channel": "sms"})
        return {"sid": payload.get("sid"), "status": payload.get("status")}

    def check(self, phone: str, code: str) -> Dict[str, Any]:
        """
        Check a code. status == "approved" means the code matched.
        """
        payload = self._post("VerificationCheck", {"To": phone, "Code": code})
        return {"status": payload.get("status")}
