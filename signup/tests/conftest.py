"""Shared fixtures for the signup tests"""

import pytest

from ..app import create_app
from ..client import ApiTransportError, DuplicateCheck
from ..config import TestingConfig
from ..cooldown import ResendCooldown
from ..otp import VerifyResult
from ..wizard import SignupWizard


class FakeApiClient:
    """
    In-memory stand-in for SignupApiClient

    Records every call in `calls`; hooks let a test act while a call is
    "in flight" (e.g. navigate away before the response is applied).
    """

    def __init__(self, registered=("duplicate@cloud4wi.com",), valid_code="123456",
                 company=None):
        self.registered = {email.lower() for email in registered}
        self.valid_code = valid_code
        self.company = company
        self.sent_to = []
        self.calls = []
        self.fail_check = False
        self.fail_send = False
        self.fail_verify = False
        self.on_verify = None
        self.on_enrich = None

    def check_email(self, email):
        self.calls.append(("check_email", email))
        if self.fail_check:
            raise ApiTransportError("Failed to check email", 500)
        if email.lower() in self.registered:
            return DuplicateCheck(True, "This email is already associated with an existing account.")
        return DuplicateCheck(False)

    def send_code(self, email):
        self.calls.append(("send_code", email))
        if self.fail_send:
            raise ApiTransportError("Provider unavailable", 500)
        self.sent_to.append(email)

    def verify_code(self, email, code):
        self.calls.append(("verify_code", email, code))
        if self.on_verify:
            self.on_verify()
        if self.fail_verify:
            raise ApiTransportError("Provider unavailable", 500)
        if email in self.sent_to and code == self.valid_code:
            return VerifyResult.APPROVED
        return VerifyResult.NOT_APPROVED

    def enrich(self, email):
        self.calls.append(("enrich", email))
        if self.on_enrich:
            self.on_enrich()
        if self.company is None:
            raise ApiTransportError("Failed to fetch company data", 404)
        return self.company

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def app():
    """Flask app with the signup blueprint and test configuration"""
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def api():
    return FakeApiClient()


@pytest.fixture
def wizard(api):
    """Wizard whose cooldown never ticks on its own"""
    w = SignupWizard(
        api,
        config=TestingConfig,
        sleep=lambda seconds: None,
        cooldown_factory=lambda: ResendCooldown(tick_seconds=3600)
    )
    yield w
    w.close()


JOHN = {
    "first_name": "John",
    "last_name": "Doe",
    "work_email": "john@acme.com",
    "accept_terms": True,
}
