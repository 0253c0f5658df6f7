"""
Tests for the OTP gateway and provider selection

Run with: pytest signup/tests/test_otp.py -v
"""

import pytest
from unittest.mock import Mock, patch

import requests
from twilio.base.exceptions import TwilioRestException

from ..otp import (
    GatewaySelection,
    OTPConfigurationError,
    OTPError,
    TwilioOTPGateway,
    VerifyResult,
    select_otp_gateway,
)

CREDENTIALS = {
    'TWILIO_ACCOUNT_SID': 'AC_test',
    'TWILIO_AUTH_TOKEN': 'token',
    'TWILIO_VERIFY_SERVICE_SID': 'VA_test',
}


@pytest.fixture
def twilio_client():
    return Mock()


@pytest.fixture
def gateway(twilio_client):
    return TwilioOTPGateway('AC_test', 'token', 'VA_test', client=twilio_client)


def _service(twilio_client):
    return twilio_client.verify.v2.services.return_value


class TestProviderSelection:

    @patch('signup.otp.Client')
    def test_full_credentials_select_twilio(self, mock_client):
        selection = select_otp_gateway(CREDENTIALS)

        assert selection.is_configured
        assert isinstance(selection.require(), TwilioOTPGateway)
        mock_client.assert_called_once_with('AC_test', 'token')

    @pytest.mark.parametrize("missing", list(CREDENTIALS))
    def test_partial_credentials_are_a_configuration_error(self, missing):
        settings = dict(CREDENTIALS, **{missing: None})

        selection = select_otp_gateway(settings)

        assert not selection.is_configured
        assert selection.error == "OTP Provider configuration missing"
        with pytest.raises(OTPConfigurationError):
            selection.require()

    def test_configuration_error_is_an_otp_error(self):
        with pytest.raises(OTPError):
            GatewaySelection(error="missing").require()


class TestTwilioGateway:

    def test_send_uses_email_channel(self, gateway, twilio_client):
        gateway.send_code("john@acme.com")

        twilio_client.verify.v2.services.assert_called_with('VA_test')
        _service(twilio_client).verifications.create.assert_called_once_with(
            to="john@acme.com", channel="email"
        )

    def test_send_failure_raises_with_provider_message(self, gateway, twilio_client):
        _service(twilio_client).verifications.create.side_effect = TwilioRestException(
            429, "https://verify.twilio.com", msg="Max send attempts reached", code=60203
        )

        with pytest.raises(OTPError, match="Max send attempts reached"):
            gateway.send_code("john@acme.com")

    def test_send_network_failure(self, gateway, twilio_client):
        _service(twilio_client).verifications.create.side_effect = requests.ConnectionError("down")

        with pytest.raises(OTPError):
            gateway.send_code("john@acme.com")

    def test_verify_approved(self, gateway, twilio_client):
        _service(twilio_client).verification_checks.create.return_value = Mock(status="approved")

        assert gateway.verify_code("john@acme.com", "123456") is VerifyResult.APPROVED
        _service(twilio_client).verification_checks.create.assert_called_once_with(
            to="john@acme.com", code="123456"
        )

    def test_verify_wrong_code(self, gateway, twilio_client):
        _service(twilio_client).verification_checks.create.return_value = Mock(status="pending")

        assert gateway.verify_code("john@acme.com", "000000") is VerifyResult.NOT_APPROVED

    def test_verify_without_pending_verification(self, gateway, twilio_client):
        _service(twilio_client).verification_checks.create.side_effect = TwilioRestException(
            404, "https://verify.twilio.com", msg="Not found", code=20404
        )

        assert gateway.verify_code("john@acme.com", "123456") is VerifyResult.NOT_APPROVED

    def test_verify_provider_failure_is_not_a_wrong_code(self, gateway, twilio_client):
        _service(twilio_client).verification_checks.create.side_effect = TwilioRestException(
            503, "https://verify.twilio.com", msg="Service unavailable"
        )

        with pytest.raises(OTPError, match="Service unavailable"):
            gateway.verify_code("john@acme.com", "123456")
