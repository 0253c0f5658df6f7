"""
Wizard step components

Each step owns a slice of the shared WizardState plus its own transient UI
state (inline errors, notices, loading flags). Steps move only through
explicit next()/back() calls made by the front end; nothing advances on its
own.

Network calls are wrapped in an ActionState so a second click while a call
is in flight is refused. A response is applied only if the wizard is still
on the navigation generation that issued the call; anything else is a
stale answer and is dropped.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from .client import ApiTransportError
from .cooldown import ResendCooldown
from .enrichment import map_company_fields, website_from_email
from .models import ActionState, StepResult, WizardError
from .otp import VerifyResult
from .validators import EmailValidator, validate_step, VERIFICATION_CODE_LENGTH

if TYPE_CHECKING:
    from .wizard import SignupWizard

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred. Please try again."
BUSY_MESSAGE = "Please wait for the current request to finish."


class WizardStep:
    """Base class for the four wizard steps"""

    number = 0
    title = ""

    def __init__(self, wizard: "SignupWizard"):
        self.wizard = wizard
        self.errors: Dict[str, str] = {}
        self.action = ActionState()

    @property
    def state(self):
        return self.wizard.state

    @property
    def client(self):
        return self.wizard.client

    def on_enter(self):
        """Called by the wizard after this step becomes current"""
        self.errors = {}
        self.action.reset()

    def on_exit(self):
        """Called by the wizard before another step becomes current"""

    def on_fields_changed(self, names: Iterable[str]):
        """Called after the wizard state changed while this step is current"""
        for name in names:
            self.errors.pop(name, None)

    def next(self) -> StepResult:
        raise NotImplementedError

    def back(self) -> StepResult:
        self.wizard.retreat()
        return StepResult(advanced=False)

    def _validate(self) -> Dict[str, str]:
        self.errors = validate_step(self.number, self.state)
        return self.errors

    def _is_stale(self, token: int) -> bool:
        if self.wizard.is_current(token):
            return False
        logger.info(f"Ignoring stale response for step {self.number}")
        self.action.reset()
        return True

    def _stale_result(self) -> StepResult:
        return StepResult(advanced=False, message="Step is no longer active")


class AccountInfoStep(WizardStep):
    """Step 1: name, work email and terms, then duplicate check and first code"""

    number = 1
    title = "Create your account"

    def __init__(self, wizard: "SignupWizard"):
        super().__init__(wizard)
        self.duplicate_message: Optional[str] = None

    @property
    def login_url(self) -> str:
        return self.wizard.settings("LOGIN_URL", "")

    def on_fields_changed(self, names: Iterable[str]):
        names = list(names)
        super().on_fields_changed(names)
        if "work_email" in names:
            self.duplicate_message = None

    def dismiss_duplicate(self):
        self.duplicate_message = None

    def next(self) -> StepResult:
        if self._validate():
            return StepResult(advanced=False, errors=dict(self.errors))

        if not self.action.start():
            return StepResult(advanced=False, message=BUSY_MESSAGE)

        token = self.wizard.navigation_token
        email = self.state.work_email

        try:
            check = self.client.check_email(email)
            if self._is_stale(token):
                return self._stale_result()

            if check.exists:
                self.duplicate_message = check.message or "This email is already registered."
                self.action.fail(self.duplicate_message)
                return StepResult(advanced=False, message=self.duplicate_message)

            self.duplicate_message = None
            self.client.send_code(email)

        except ApiTransportError as e:
            logger.error(f"Account step failed for {email}: {str(e)}")
            if self._is_stale(token):
                return self._stale_result()
            self.action.fail(GENERIC_ERROR)
            return StepResult(advanced=False, message=GENERIC_ERROR)

        if self._is_stale(token):
            return self._stale_result()

        self.action.succeed()
        self.wizard.advance()
        return StepResult(advanced=True)


class VerificationStep(WizardStep):
    """Step 2: enter the emailed code, with a throttled resend"""

    number = 2
    title = "Verify your email"

    INCOMPLETE_CODE = "Please enter the complete 6-digit code"
    INVALID_CODE = "Invalid code"
    RESEND_SENT = "A new verification code has been sent to your email."
    RESEND_FAILED = "Failed to resend code. Please try again."

    def __init__(self, wizard: "SignupWizard"):
        super().__init__(wizard)
        self.resend_action = ActionState()
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self.cooldown: Optional[ResendCooldown] = None

    def on_enter(self):
        super().on_enter()
        self.resend_action.reset()
        self.error = None
        self.notice = None
        self.cooldown = self.wizard.make_cooldown()

    def on_exit(self):
        if self.cooldown:
            self.cooldown.cancel()
            self.cooldown = None

    @property
    def cooldown_remaining(self) -> int:
        return self.cooldown.remaining if self.cooldown else 0

    @property
    def can_resend(self) -> bool:
        return self.cooldown_remaining == 0 and not self.resend_action.is_pending

    @property
    def resend_label(self) -> str:
        remaining = self.cooldown_remaining
        return f"Resend ({remaining}s)" if remaining > 0 else "Resend"

    def next(self) -> StepResult:
        # Reached again via back from step 3; the current email is already verified
        if self.wizard.email_verified:
            self.wizard.advance()
            return StepResult(advanced=True)

        code = self.state.verification_code or ""
        if len(code) != VERIFICATION_CODE_LENGTH:
            self.error = self.INCOMPLETE_CODE
            return StepResult(advanced=False, errors={"verification_code": self.INCOMPLETE_CODE})

        if not self.action.start():
            return StepResult(advanced=False, message=BUSY_MESSAGE)

        self.error = None
        token = self.wizard.navigation_token

        try:
            result = self.client.verify_code(self.state.work_email, code)
        except ApiTransportError as e:
            logger.error(f"Verify OTP error: {str(e)}")
            if self._is_stale(token):
                return self._stale_result()
            self.error = GENERIC_ERROR
            self.action.fail(GENERIC_ERROR)
            return StepResult(advanced=False, message=GENERIC_ERROR)

        if self._is_stale(token):
            return self._stale_result()

        if result is not VerifyResult.APPROVED:
            self.error = self.INVALID_CODE
            self.action.fail(self.INVALID_CODE)
            return StepResult(advanced=False, message=self.INVALID_CODE)

        self.action.succeed()
        self.wizard.mark_email_verified()
        self.wizard.advance()
        return StepResult(advanced=True)

    def resend(self) -> bool:
        """Send a fresh code; returns True when the provider accepted it"""
        if not self.can_resend or not self.resend_action.start():
            return False

        token = self.wizard.navigation_token
        try:
            self.client.send_code(self.state.work_email)
        except ApiTransportError as e:
            logger.error(f"Resend OTP error: {str(e)}")
            if self._is_stale(token):
                return False
            self.notice = self.RESEND_FAILED
            self.resend_action.fail(self.RESEND_FAILED)
            return False

        if not self.wizard.is_current(token):
            logger.info("Ignoring stale resend response")
            self.resend_action.reset()
            return False

        self.notice = self.RESEND_SENT
        self.resend_action.succeed()
        if self.cooldown:
            self.cooldown.start(self.wizard.settings("RESEND_COOLDOWN_SECONDS", 45))
        return True


class PasswordStep(WizardStep):
    """Step 3: choose a password. Local validation only."""

    number = 3
    title = "Set your password"

    def next(self) -> StepResult:
        if self._validate():
            return StepResult(advanced=False, errors=dict(self.errors))
        self.wizard.advance()
        return StepResult(advanced=True)


class BusinessInfoStep(WizardStep):
    """Step 4: optional company details, pre-filled from enrichment. Forward submits."""

    number = 4
    title = "Tell us about your business"

    REVERIFY_MESSAGE = "Your email changed. Please verify the new address."

    def __init__(self, wizard: "SignupWizard"):
        super().__init__(wizard)
        self.lookup_action = ActionState()
        self.payload: Optional[Dict[str, Any]] = None

    @property
    def is_loading(self) -> bool:
        return self.lookup_action.is_pending

    def on_enter(self):
        super().on_enter()
        self.lookup_action.reset()
        self.enrich()

    def on_fields_changed(self, names: Iterable[str]):
        names = list(names)
        super().on_fields_changed(names)
        if "work_email" in names:
            self.enrich()

    def enrich(self) -> bool:
        """
        Pre-fill business fields from the company lookup

        Returns:
            True when enrichment data was applied, False when the fallback
            website was used or nothing was done
        """
        email = self.state.work_email
        if not EmailValidator.is_plausible(email):
            return False
        if not self.lookup_action.start():
            return False

        token = self.wizard.navigation_token
        try:
            data = self.client.enrich(email)
        except ApiTransportError as e:
            logger.warning(f"Failed to fetch business data for {email}: {str(e)}")
            data = None

        if not self.wizard.is_current(token):
            logger.info("Ignoring stale enrichment response")
            self.lookup_action.reset()
            return False

        company = map_company_fields(data) if data is not None else None
        if company:
            self.state.update(**company)
            self.lookup_action.succeed()
            return True

        website = website_from_email(email)
        if website:
            self.state.website = website
        self.lookup_action.fail("Company not found")
        return False

    def next(self) -> StepResult:
        if self._validate():
            return StepResult(advanced=False, errors=dict(self.errors))

        if not self.wizard.email_verified:
            self.wizard.reverify()
            return StepResult(advanced=False, message=self.REVERIFY_MESSAGE)

        try:
            errors = self.wizard.submit()
        except WizardError as e:
            logger.error(f"Submission refused: {str(e)}")
            return StepResult(advanced=False, message=GENERIC_ERROR)
        if errors:
            self.errors = errors
            return StepResult(advanced=False, errors=dict(errors))

        self.payload = self.wizard.payload
        return StepResult(advanced=True)
