"""
Input validators for the signup wizard

A single declarative schema covers every wizard field. Each field maps to an
ordered list of rules; the first failing rule supplies the field's message.
Validation never raises: it returns a mapping of field name to message, which
is empty when the checked fields are valid.
"""

import re
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# rule(value, data) -> True when the value is acceptable
Rule = Tuple[Callable[[Any, Mapping[str, Any]], bool], str]


class EmailValidator:
    """Email validation utilities"""

    EMAIL_PATTERN = re.compile(
        r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    )

    # Consumer mail providers rejected for work accounts
    FREE_MAIL_DOMAINS = {
        'gmail.com', 'hotmail.com', 'yahoo.com', 'outlook.com'
    }

    @classmethod
    def is_valid_format(cls, email: str) -> bool:
        return bool(email) and bool(cls.EMAIL_PATTERN.match(email.strip()))

    @staticmethod
    def domain_of(email: str) -> Optional[str]:
        """Return the part after '@', or None when there is none"""
        if not email or '@' not in email:
            return None
        domain = email.split('@', 1)[1].strip()
        return domain or None

    @classmethod
    def is_work_email(cls, email: str) -> bool:
        domain = cls.domain_of(email)
        return domain is not None and domain.lower() not in cls.FREE_MAIL_DOMAINS

    @staticmethod
    def is_plausible(email: str) -> bool:
        """Loose check used before firing an enrichment lookup"""
        return bool(email) and '@' in email


PASSWORD_MIN_LENGTH = 8
VERIFICATION_CODE_LENGTH = 6
_UPPERCASE = re.compile(r'[A-Z]')
_DIGIT = re.compile(r'[0-9]')


def _non_empty(value, data):
    return isinstance(value, str) and len(value) > 0


def _optional(value, data):
    return value is None or isinstance(value, str)


WIZARD_SCHEMA: Dict[str, List[Rule]] = {
    # Step 1
    'first_name': [(_non_empty, "First name is required")],
    'last_name': [(_non_empty, "Last name is required")],
    'work_email': [
        (lambda v, d: EmailValidator.is_valid_format(v), "Invalid email address"),
        (lambda v, d: EmailValidator.is_work_email(v), "Please use a work email address"),
    ],
    'accept_terms': [(lambda v, d: v is True, "You must accept the conditions")],

    # Step 2
    'verification_code': [
        (lambda v, d: isinstance(v, str) and len(v) == VERIFICATION_CODE_LENGTH,
         "Code must be 6 digits"),
    ],

    # Step 3
    'password': [
        (lambda v, d: isinstance(v, str) and len(v) >= PASSWORD_MIN_LENGTH,
         "Password must be at least 8 characters"),
        (lambda v, d: bool(_UPPERCASE.search(v)), "Must contain at least one uppercase letter"),
        (lambda v, d: bool(_DIGIT.search(v)), "Must contain at least one number"),
    ],
    # Cross-field: the mismatch is always reported on confirm_password
    'confirm_password': [
        (lambda v, d: v == d.get('password'), "Passwords do not match"),
    ],

    # Step 4
    'company_name': [(_optional, "Company name must be text")],
    'industry': [(_optional, "Industry must be text")],
    'country': [(_optional, "Country must be text")],
    'website': [(_optional, "Website must be text")],
}

STEP_FIELDS: Dict[int, Tuple[str, ...]] = {
    1: ('first_name', 'last_name', 'work_email', 'accept_terms'),
    2: ('verification_code',),
    3: ('password', 'confirm_password'),
    4: ('company_name', 'industry', 'country', 'website'),
}


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if is_dataclass(data):
        return asdict(data)
    return data


def validate(data: Any, fields: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """
    Validate wizard data against the schema

    Args:
        data: WizardState or mapping keyed by field name
        fields: Optional subset of field names to check (default: all)

    Returns:
        Dict of field name to the first failing rule's message
    """
    values = _as_mapping(data)
    names = list(fields) if fields is not None else list(WIZARD_SCHEMA)
    errors = {}

    for name in names:
        rules = WIZARD_SCHEMA.get(name)
        if rules is None:
            raise KeyError(f"Unknown wizard field: {name}")
        value = values.get(name)
        for check, message in rules:
            if not check(value, values):
                errors[name] = message
                break

    return errors


def validate_step(step: int, data: Any) -> Dict[str, str]:
    """Validate only the fields owned by a wizard step"""
    return validate(data, STEP_FIELDS[step])
