"""
Data structures for the signup wizard

WizardState is the record accumulated across the four steps. It lives in
memory for one wizard session only and is never partially persisted.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional


@dataclass
class WizardState:
    """Form data collected by the wizard, created with empty defaults"""

    # Step 1
    first_name: str = ""
    last_name: str = ""
    work_email: str = ""
    accept_terms: bool = False

    # Step 2 (held only until the verify call)
    verification_code: str = ""

    # Step 3
    password: str = ""
    confirm_password: str = ""

    # Step 4, pre-filled by enrichment
    company_name: str = ""
    industry: str = ""
    country: str = ""
    website: str = ""

    def update(self, **values: Any) -> None:
        """Set several fields at once, rejecting unknown names"""
        known = {f.name for f in fields(self)}
        for name, value in values.items():
            if name not in known:
                raise AttributeError(f"WizardState has no field '{name}'")
            setattr(self, name, value)


class WizardError(Exception):
    """Raised on an operation the wizard's current state does not allow"""
    pass


class ActionStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ActionState:
    """
    Lifecycle of one asynchronous step action (Idle -> Pending -> Success | Failure)

    Transition guards read only the terminal status; a PENDING action refuses
    to start again until it resolves.
    """

    status: ActionStatus = ActionStatus.IDLE
    error: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status is ActionStatus.PENDING

    @property
    def succeeded(self) -> bool:
        return self.status is ActionStatus.SUCCESS

    def start(self) -> bool:
        """Move to PENDING; returns False if a call is already in flight"""
        if self.is_pending:
            return False
        self.status = ActionStatus.PENDING
        self.error = None
        return True

    def succeed(self) -> None:
        self.status = ActionStatus.SUCCESS
        self.error = None

    def fail(self, message: str) -> None:
        self.status = ActionStatus.FAILURE
        self.error = message

    def reset(self) -> None:
        self.status = ActionStatus.IDLE
        self.error = None


@dataclass
class StepResult:
    """Outcome of a step's forward attempt"""

    advanced: bool
    errors: Dict[str, str] = field(default_factory=dict)
    message: Optional[str] = None
