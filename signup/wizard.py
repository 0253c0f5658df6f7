"""
Signup wizard controller

Owns the current step index and the shared WizardState, and is the only
place where data from different steps is merged into the final payload.

States: Step1 -> Step2 -> Step3 -> Step4 -> Submitted. The step index is
clamped to [1, 4]; back-transitions are unguarded, forward transitions are
guarded by the step components. Submitted is terminal for a session and
restart() begins a new one with an empty WizardState.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from .client import SignupApiClient
from .config import Config
from .cooldown import ResendCooldown
from .models import WizardError, WizardState
from .steps import (
    WizardStep,
    AccountInfoStep,
    VerificationStep,
    PasswordStep,
    BusinessInfoStep,
)
from .validators import WIZARD_SCHEMA, validate

logger = logging.getLogger(__name__)

FIRST_STEP = 1
LAST_STEP = 4

# Every rule except the code, which is consumed by the verify call
SUBMISSION_FIELDS: List[str] = [name for name in WIZARD_SCHEMA if name != "verification_code"]


def build_payload(state: WizardState) -> Dict[str, Any]:
    """Flat identity and credential fields plus a nested business block"""
    return {
        "firstName": state.first_name,
        "lastName": state.last_name,
        "workEmail": state.work_email,
        "password": state.password,
        "isDomainConditionsAccepted": state.accept_terms,
        "business": {
            "companyName": state.company_name or "",
            "industry": state.industry or "",
            "country": state.country or "",
            "website": state.website or "",
        }
    }


class SignupWizard:
    """
    Multi-step signup state machine

    Args:
        client: API client used by the steps for proxy calls
        config: Object exposing configuration attributes (default: Config)
        sleep: Callable used for the simulated submission delay
        cooldown_factory: Builds the resend cooldown for the verification step
    """

    STEP_CLASSES = (AccountInfoStep, VerificationStep, PasswordStep, BusinessInfoStep)

    def __init__(self, client: SignupApiClient, config: Any = Config,
                 sleep: Callable[[float], None] = time.sleep,
                 cooldown_factory: Callable[[], ResendCooldown] = ResendCooldown):
        self.client = client
        self.config = config
        self._sleep = sleep
        self._cooldown_factory = cooldown_factory
        self._lock = threading.RLock()
        self._reset()

    def _reset(self):
        self.state = WizardState()
        self.current_step = FIRST_STEP
        self.email_verified = False
        self.payload: Optional[Dict[str, Any]] = None
        self.is_submitting = False
        # Keeps counting across restarts so pre-restart responses stay stale
        self._navigation_token = getattr(self, "_navigation_token", -1) + 1
        self.steps: Dict[int, WizardStep] = {
            cls.number: cls(self) for cls in self.STEP_CLASSES
        }
        self.steps[FIRST_STEP].on_enter()

    def settings(self, key: str, default: Any = None) -> Any:
        return getattr(self.config, key, default)

    def make_cooldown(self) -> ResendCooldown:
        return self._cooldown_factory()

    # Navigation

    @property
    def step(self) -> WizardStep:
        return self.steps[self.current_step]

    @property
    def is_submitted(self) -> bool:
        return self.payload is not None

    @property
    def progress_label(self) -> str:
        return f"Step {self.current_step} of {LAST_STEP}"

    @property
    def navigation_token(self) -> int:
        with self._lock:
            return self._navigation_token

    def is_current(self, token: int) -> bool:
        """True while no navigation happened since the token was taken"""
        with self._lock:
            return token == self._navigation_token and not self.is_submitted

    def advance(self) -> int:
        return self._go_to(min(self.current_step + 1, LAST_STEP))

    def retreat(self) -> int:
        return self._go_to(max(self.current_step - 1, FIRST_STEP))

    def _go_to(self, number: int) -> int:
        with self._lock:
            if self.is_submitted:
                raise WizardError("Wizard already submitted; call restart() to begin again")
            if number == self.current_step:
                return self.current_step

            self.step.on_exit()
            logger.debug(f"Wizard step {self.current_step} -> {number}")
            self.current_step = number
            self._navigation_token += 1

        self.step.on_enter()
        return self.current_step

    # State

    def set_fields(self, **values: Any):
        """Update form fields and let the current step react to the change"""
        with self._lock:
            if self.is_submitted:
                raise WizardError("Wizard already submitted; call restart() to begin again")
            self.state.update(**values)
            if "work_email" in values:
                self.email_verified = False
        self.step.on_fields_changed(values.keys())

    def mark_email_verified(self):
        self.email_verified = True
        # The code is only needed for the verify call
        self.state.verification_code = ""

    def reverify(self) -> int:
        """Send the user back to step 1 so a changed email gets a new code"""
        logger.info(f"Email changed to {self.state.work_email}, verification required")
        return self._go_to(FIRST_STEP)

    # Submission

    def submit(self) -> Dict[str, str]:
        """
        Validate the whole record and build the payload

        Returns:
            Field errors; empty when the wizard was submitted

        Raises:
            WizardError: Not on the last step, already submitted, or the
                email was never verified
        """
        with self._lock:
            if self.is_submitted:
                raise WizardError("Wizard already submitted")
            if self.current_step != LAST_STEP:
                raise WizardError(f"Cannot submit from step {self.current_step}")
            if not self.email_verified:
                raise WizardError("Work email has not been verified")

        errors = validate(self.state, SUBMISSION_FIELDS)
        if errors:
            return errors

        self.is_submitting = True
        try:
            # Simulated account creation latency
            self._sleep(self.settings("SUBMIT_DELAY_SECONDS", 2))
            payload = build_payload(self.state)
        finally:
            self.is_submitting = False

        with self._lock:
            self.step.on_exit()
            self.payload = payload
            self._navigation_token += 1

        logger.info(f"Signup submitted for {self.state.work_email}")
        return {}

    def restart(self):
        """Start over with a fresh, empty WizardState on step 1"""
        with self._lock:
            self.step.on_exit()
            self._reset()
        logger.info("Wizard restarted")

    def close(self):
        """Release step resources (the resend cooldown)"""
        self.step.on_exit()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
