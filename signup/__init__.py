"""
Work-email signup module

Four-step account signup with minimal friction:
1. Name, work email and terms (duplicate check, then a code is emailed)
2. Verify the emailed one-time code
3. Choose a password
4. Business details, pre-filled from a company lookup

The Flask blueprint proxies the duplicate check, OTP provider and company
lookup; the wizard drives the steps and assembles the final payload.
"""

from .routes import bp as signup_bp
from .wizard import SignupWizard

__all__ = ['signup_bp', 'SignupWizard']
