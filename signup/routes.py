"""
Flask routes for the signup proxy API

Thin, stateless endpoints used by the wizard:
- Duplicate work-email check
- OTP send / verify through the configured OTP provider
- Company enrichment lookup

Each handler validates the minimal input shape, forwards to exactly one
upstream dependency and maps the outcome to a small fixed set of responses.
"""

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, request, jsonify, current_app

from .otp import select_otp_gateway, OTPError, VerifyResult
from .enrichment import (
    CompanyLookupService,
    EnrichmentConfigurationError,
    EnrichmentUpstreamError,
    EnrichmentError,
)

bp = Blueprint("signup", __name__)
logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already associated with an existing account."


# Response helpers
def error_response(message: str, code: int = 400, details: Any = None) -> tuple:
    """Standard error response format"""
    response = {"error": message}
    if details is not None:
        response["details"] = details
    return jsonify(response), code


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _required_text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


@bp.route("/check-email", methods=["POST"])
def check_email():
    """
    Report whether a work email already belongs to an account

    Body:
        email: Address to check

    Returns:
        200: {"exists": false} or {"exists": true, "message": ...}
        400: Email missing
    """
    try:
        email = _required_text(_json_body(), "email")
        if not email:
            return error_response("Email is required")

        # Stand-in for an account registry lookup
        sentinel = current_app.config.get("DUPLICATE_SENTINEL_EMAIL", "")
        if sentinel and email.lower() == sentinel.lower():
            return jsonify({"exists": True, "message": DUPLICATE_EMAIL_MESSAGE}), 200

        return jsonify({"exists": False}), 200

    except Exception as e:
        logger.error(f"Check email error: {str(e)}", exc_info=True)
        return error_response("Failed to check email", 500)


@bp.route("/otp/send", methods=["POST"])
def otp_send():
    """
    Send a verification code to an email address

    Body:
        email: Recipient address

    Returns:
        200: {"success": true}
        400: Email missing
        500: Provider failure or provider not configured
    """
    email = _required_text(_json_body(), "email")
    if not email:
        return error_response("Email is required")

    try:
        gateway = select_otp_gateway(current_app.config).require()
        gateway.send_code(email)
        return jsonify({"success": True}), 200

    except OTPError as e:
        logger.error(f"Send OTP API error: {str(e)}")
        return error_response(str(e) or "Failed to send OTP", 500)
    except Exception as e:
        logger.error(f"Send OTP API error: {str(e)}", exc_info=True)
        return error_response("Failed to send OTP", 500)


@bp.route("/otp/verify", methods=["POST"])
def otp_verify():
    """
    Check a verification code

    Body:
        email: Address the code was sent to
        code: Code entered by the user

    Returns:
        200: {"success": true}
        400: Missing fields, or {"error": "Invalid code"}
        500: Provider failure or provider not configured
    """
    data = _json_body()
    email = _required_text(data, "email")
    code = _required_text(data, "code")
    if not email or not code:
        return error_response("Email and code are required")

    try:
        gateway = select_otp_gateway(current_app.config).require()
        result = gateway.verify_code(email, code)

    except OTPError as e:
        logger.error(f"Verify OTP API error: {str(e)}")
        return error_response(str(e) or "Failed to verify OTP", 500)
    except Exception as e:
        logger.error(f"Verify OTP API error: {str(e)}", exc_info=True)
        return error_response("Failed to verify OTP", 500)

    if result is VerifyResult.APPROVED:
        return jsonify({"success": True}), 200
    return error_response("Invalid code", 400)


@bp.route("/enrich", methods=["GET"])
def enrich():
    """
    Look up company data for an email address

    Query:
        email: Work email to enrich

    Returns:
        200: Upstream body, verbatim
        400: Email missing
        500: Token not configured or network failure
        4xx/5xx: Upstream status with error details
    """
    email = request.args.get("email", "").strip()
    if not email:
        return error_response("Email is required")

    service = CompanyLookupService(
        current_app.config.get("COMPANIES_API_URL"),
        current_app.config.get("THE_COMPANIES_API_TOKEN"),
        timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS", 15)
    )

    try:
        data = service.lookup(email)
        return jsonify(data), 200

    except EnrichmentConfigurationError:
        return error_response("Server configuration error", 500)
    except EnrichmentUpstreamError as e:
        return error_response("Failed to fetch company data", e.status_code, details=e.body)
    except EnrichmentError:
        return error_response("Internal server error", 500)
