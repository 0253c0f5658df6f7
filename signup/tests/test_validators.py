"""
Tests for the wizard validation schema

Run with: pytest signup/tests/test_validators.py -v
"""

import pytest

from ..models import WizardState
from ..validators import EmailValidator, validate, validate_step, STEP_FIELDS, WIZARD_SCHEMA


def _valid_state(**overrides):
    state = WizardState(
        first_name="John",
        last_name="Doe",
        work_email="john@acme.com",
        accept_terms=True,
        verification_code="123456",
        password="Passw0rd",
        confirm_password="Passw0rd",
    )
    state.update(**overrides)
    return state


class TestPasswordRules:
    """Each password rule fails independently"""

    @pytest.mark.parametrize("password, message", [
        ("Pass0rd", "Password must be at least 8 characters"),
        ("passw0rd", "Must contain at least one uppercase letter"),
        ("Password", "Must contain at least one number"),
    ])
    def test_single_rule_failure(self, password, message):
        errors = validate({"password": password}, ["password"])
        assert errors == {"password": message}

    def test_valid_password(self):
        assert validate({"password": "Passw0rd"}, ["password"]) == {}

    def test_mismatch_reported_on_confirm_password_only(self):
        state = _valid_state(confirm_password="Passw0rd!")
        errors = validate(state)

        assert errors == {"confirm_password": "Passwords do not match"}
        assert "password" not in errors

    def test_mismatch_with_invalid_password_keeps_errors_apart(self):
        errors = validate_step(3, _valid_state(password="short", confirm_password="other"))

        assert errors["password"] == "Password must be at least 8 characters"
        assert errors["confirm_password"] == "Passwords do not match"


class TestWorkEmailRule:

    @pytest.mark.parametrize("email", [
        "user@gmail.com", "user@hotmail.com", "user@yahoo.com", "user@outlook.com"
    ])
    def test_free_mail_domains_rejected(self, email):
        errors = validate({"work_email": email}, ["work_email"])
        assert errors == {"work_email": "Please use a work email address"}

    def test_work_domain_accepted(self):
        assert validate({"work_email": "user@acme.com"}, ["work_email"]) == {}

    def test_free_mail_domain_case_insensitive(self):
        errors = validate({"work_email": "user@Gmail.com"}, ["work_email"])
        assert errors == {"work_email": "Please use a work email address"}

    @pytest.mark.parametrize("email", ["", "not-an-email", "user@", "user@acme"])
    def test_invalid_format(self, email):
        errors = validate({"work_email": email}, ["work_email"])
        assert errors == {"work_email": "Invalid email address"}

    def test_domain_helpers(self):
        assert EmailValidator.domain_of("john@acme.com") == "acme.com"
        assert EmailValidator.domain_of("john") is None
        assert EmailValidator.is_plausible("a@b")
        assert not EmailValidator.is_plausible("ab")


class TestSchema:

    def test_empty_state_reports_required_fields(self):
        errors = validate(WizardState())

        assert errors["first_name"] == "First name is required"
        assert errors["last_name"] == "Last name is required"
        assert errors["accept_terms"] == "You must accept the conditions"
        assert errors["verification_code"] == "Code must be 6 digits"
        for optional in ("company_name", "industry", "country", "website"):
            assert optional not in errors

    def test_complete_state_is_valid(self):
        assert validate(_valid_state()) == {}

    def test_step_subset_ignores_other_steps(self):
        state = WizardState(first_name="John", last_name="Doe",
                            work_email="john@acme.com", accept_terms=True)

        assert validate_step(1, state) == {}
        assert "password" in validate_step(3, state)

    def test_code_length(self):
        assert validate({"verification_code": "12345"}, ["verification_code"])
        assert validate({"verification_code": "1234567"}, ["verification_code"])
        assert validate({"verification_code": "123456"}, ["verification_code"]) == {}

    def test_step_fields_cover_schema(self):
        covered = {name for names in STEP_FIELDS.values() for name in names}
        assert covered == set(WIZARD_SCHEMA)

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            validate({}, ["nickname"])
