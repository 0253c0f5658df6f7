"""
Centralised configuration for the signup service and wizard.

Values are read from the environment (a local .env file is loaded first),
so the same module configures the Flask proxy and the terminal wizard.
"""

import os
from typing import Dict, Any

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration."""

    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = False
    TESTING = False

    # CORS
    ALLOWED_ORIGINS = os.getenv('ALLOWED_ORIGINS', '*').split(',')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # Twilio Verify (OTP over email)
    TWILIO_ACCOUNT_SID = os.getenv('TWILIO_ACCOUNT_SID')
    TWILIO_AUTH_TOKEN = os.getenv('TWILIO_AUTH_TOKEN')
    TWILIO_VERIFY_SERVICE_SID = os.getenv('TWILIO_VERIFY_SERVICE_SID')

    # Company enrichment
    THE_COMPANIES_API_TOKEN = os.getenv('THE_COMPANIES_API_TOKEN')
    COMPANIES_API_URL = os.getenv(
        'COMPANIES_API_URL', 'https://api.thecompaniesapi.com/v2/companies/by-email'
    )

    # Account registry stand-in: this single address is reported as taken
    DUPLICATE_SENTINEL_EMAIL = os.getenv('DUPLICATE_SENTINEL_EMAIL', 'duplicate@cloud4wi.com')
    LOGIN_URL = os.getenv('LOGIN_URL', 'https://dashboard.cloud4wi.com')

    # Wizard client
    SIGNUP_API_URL = os.getenv('SIGNUP_API_URL', 'http://localhost:5001/api')
    HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS', '15'))
    RESEND_COOLDOWN_SECONDS = int(os.getenv('RESEND_COOLDOWN_SECONDS', '45'))
    SUBMIT_DELAY_SECONDS = float(os.getenv('SUBMIT_DELAY_SECONDS', '2'))

    PORT = int(os.getenv('PORT', '5001'))

    @classmethod
    def validate(cls) -> Dict[str, Any]:
        """Check the configuration and report errors and warnings."""
        errors = []
        warnings = []

        twilio_keys = {
            'TWILIO_ACCOUNT_SID': cls.TWILIO_ACCOUNT_SID,
            'TWILIO_AUTH_TOKEN': cls.TWILIO_AUTH_TOKEN,
            'TWILIO_VERIFY_SERVICE_SID': cls.TWILIO_VERIFY_SERVICE_SID,
        }
        missing = [key for key, value in twilio_keys.items() if not value]
        if missing:
            errors.append(f"OTP provider not configured, missing: {', '.join(missing)}")

        if not cls.THE_COMPANIES_API_TOKEN:
            warnings.append("THE_COMPANIES_API_TOKEN not set - enrichment lookups will fail")

        if cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            warnings.append("SECRET_KEY uses the default value - change it in production")

        return {
            'errors': errors,
            'warnings': warnings,
            'is_valid': len(errors) == 0
        }


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    """Configuration for tests: no real credentials, no delays."""
    DEBUG = True
    TESTING = True

    TWILIO_ACCOUNT_SID = None
    TWILIO_AUTH_TOKEN = None
    TWILIO_VERIFY_SERVICE_SID = None
    THE_COMPANIES_API_TOKEN = 'test-companies-token'
    DUPLICATE_SENTINEL_EMAIL = 'duplicate@cloud4wi.com'
    SUBMIT_DELAY_SECONDS = 0


class ProductionConfig(Config):
    @classmethod
    def validate(cls) -> Dict[str, Any]:
        result = super().validate()

        if cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            result['errors'].append("SECRET_KEY must be changed in production")

        if '*' in cls.ALLOWED_ORIGINS:
            result['warnings'].append("ALLOWED_ORIGINS allows every origin")

        result['is_valid'] = len(result['errors']) == 0
        return result


def get_config() -> type:
    """Return the configuration class selected by FLASK_ENV."""
    env = os.getenv('FLASK_ENV', 'development').lower()

    config_map = {
        'development': DevelopmentConfig,
        'testing': TestingConfig,
        'production': ProductionConfig
    }

    return config_map.get(env, DevelopmentConfig)
