"""
One-time passcode gateway

Abstracts "send a code to this email" and "check this code" over an OTP
provider. Exactly one provider is active at a time, chosen by which
credential set is configured. With no credentials the factory reports a
configuration error; there is no mock fallback.

References:
- Twilio Verify email channel: https://www.twilio.com/docs/verify/email
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import requests
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

logger = logging.getLogger(__name__)


class OTPError(Exception):
    """Raised when the OTP provider cannot be reached or rejects the request"""
    pass


class OTPConfigurationError(OTPError):
    """Raised when no OTP provider credentials are configured"""
    pass


class VerifyResult(Enum):
    APPROVED = "approved"
    NOT_APPROVED = "not_approved"


class OTPGateway(ABC):
    """Contract every OTP provider adapter implements"""

    @abstractmethod
    def send_code(self, email: str) -> None:
        """Send a code to the address; raises OTPError on failure"""

    @abstractmethod
    def verify_code(self, email: str, code: str) -> VerifyResult:
        """Check a code; wrong codes return NOT_APPROVED, provider failures raise OTPError"""


class TwilioOTPGateway(OTPGateway):
    """
    Twilio Verify adapter using the email channel

    Twilio answers a check with 404 once the pending verification is gone
    (expired, already approved, or too many attempts); that is reported as a
    wrong code rather than a provider failure.
    """

    CHANNEL = "email"

    def __init__(self, account_sid: str, auth_token: str, service_sid: str, client: Client = None):
        self.client = client or Client(account_sid, auth_token)
        self.service_sid = service_sid

    @property
    def _service(self):
        return self.client.verify.v2.services(self.service_sid)

    def send_code(self, email: str) -> None:
        try:
            verification = self._service.verifications.create(to=email, channel=self.CHANNEL)
            logger.info(f"Verification {verification.sid} sent, status {verification.status}")
        except TwilioRestException as e:
            logger.error(f"Twilio send OTP error: status={e.status} code={e.code} msg={e.msg}")
            raise OTPError(e.msg or "Failed to send OTP")
        except (TwilioException, requests.RequestException) as e:
            logger.error(f"Twilio send OTP transport error: {str(e)}")
            raise OTPError(str(e) or "Failed to send OTP")

    def verify_code(self, email: str, code: str) -> VerifyResult:
        try:
            check = self._service.verification_checks.create(to=email, code=code)
        except TwilioRestException as e:
            if e.status == 404:
                logger.info("Verification check found no pending verification")
                return VerifyResult.NOT_APPROVED
            logger.error(f"Twilio verify OTP error: status={e.status} code={e.code} msg={e.msg}")
            raise OTPError(e.msg or "Failed to verify OTP")
        except (TwilioException, requests.RequestException) as e:
            logger.error(f"Twilio verify OTP transport error: {str(e)}")
            raise OTPError(str(e) or "Failed to verify OTP")

        if check.status == "approved":
            return VerifyResult.APPROVED
        return VerifyResult.NOT_APPROVED


@dataclass(frozen=True)
class GatewaySelection:
    """Tagged result of provider selection: a configured gateway or the reason there is none"""

    gateway: Optional[OTPGateway] = None
    error: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.gateway is not None

    def require(self) -> OTPGateway:
        """Return the gateway or raise OTPConfigurationError"""
        if self.gateway is None:
            raise OTPConfigurationError(self.error or "OTP Provider configuration missing")
        return self.gateway


TWILIO_KEYS = ('TWILIO_ACCOUNT_SID', 'TWILIO_AUTH_TOKEN', 'TWILIO_VERIFY_SERVICE_SID')


def select_otp_gateway(settings: Mapping[str, Any]) -> GatewaySelection:
    """
    Pick the OTP provider whose credential set is fully configured

    Args:
        settings: Mapping of configuration keys (e.g. Flask app.config)

    Returns:
        GatewaySelection holding either the adapter or a configuration error
    """
    account_sid, auth_token, service_sid = (settings.get(key) for key in TWILIO_KEYS)

    if account_sid and auth_token and service_sid:
        return GatewaySelection(gateway=TwilioOTPGateway(account_sid, auth_token, service_sid))

    logger.error("OTP provider configuration missing (Twilio Verify credentials not set)")
    return GatewaySelection(error="OTP Provider configuration missing")
