"""
HTTP client for the signup proxy API

Used by the wizard steps to reach the backend endpoints. Every call carries
a timeout; network errors, timeouts and unexpected statuses surface as
ApiTransportError so callers can tell them apart from business answers
(duplicate email, wrong code).
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .otp import VerifyResult

logger = logging.getLogger(__name__)


class ApiTransportError(Exception):
    """Raised when a proxy call fails for reasons other than a business answer"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class DuplicateCheck:
    exists: bool
    message: Optional[str] = None


class SignupApiClient:
    """Thin wrapper over the /api endpoints served by signup.app"""

    def __init__(self, base_url: str, timeout: float = 15, session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            logger.error(f"{method} {path} timed out after {self.timeout}s")
            raise ApiTransportError("Request timed out")
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise ApiTransportError(str(e))

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    def _fail(self, response: requests.Response, default: str) -> ApiTransportError:
        body = self._json(response)
        message = body.get("error") if isinstance(body, dict) else None
        logger.error(f"{response.request.method} {response.url} -> {response.status_code}: {response.text}")
        return ApiTransportError(message or default, response.status_code)

    def check_email(self, email: str) -> DuplicateCheck:
        response = self._request("POST", "/check-email", json={"email": email})
        if response.status_code != 200:
            raise self._fail(response, "Failed to verify email")
        body = self._json(response)
        if not isinstance(body, dict) or "exists" not in body:
            logger.error(f"Unexpected email check response: {response.text}")
            raise ApiTransportError("Unexpected response from email check", response.status_code)
        return DuplicateCheck(exists=bool(body.get("exists")), message=body.get("message"))

    def send_code(self, email: str) -> None:
        response = self._request("POST", "/otp/send", json={"email": email})
        if response.status_code != 200:
            raise self._fail(response, "Failed to send code")

    def verify_code(self, email: str, code: str) -> VerifyResult:
        response = self._request("POST", "/otp/verify", json={"email": email, "code": code})
        if response.status_code == 200:
            return VerifyResult.APPROVED
        if response.status_code == 400:
            body = self._json(response)
            if isinstance(body, dict) and body.get("error") == "Invalid code":
                return VerifyResult.NOT_APPROVED
        raise self._fail(response, "Failed to verify code")

    def enrich(self, email: str) -> Any:
        response = self._request("GET", "/enrich", params={"email": email})
        if not response.ok:
            raise self._fail(response, "Failed to fetch company data")
        return self._json(response)
