from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from services.errors import ErrorKind


class FormStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class DuplicateSubmission(Exception):
    """Raised when a form is submitted again while a submission is in flight"""


@dataclass
class FormState:
    """Idle -> Submitting -> Success | Failed(kind)"""

    status: FormStatus = FormStatus.IDLE
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def in_flight(self) -> bool:
        return self.status is FormStatus.SUBMITTING

    def begin(self) -> None:
        if self.in_flight:
            raise DuplicateSubmission()
        # A resubmitted form has been edited since its last outcome
        self.edit()
        self.status = FormStatus.SUBMITTING

    def succeed(self) -> None:
        self.status = FormStatus.SUCCESS

    def fail(self, kind: ErrorKind, message: Optional[str] = None,
             field_errors: Optional[Dict[str, str]] = None) -> None:
        self.status = FormStatus.FAILED
        self.error = kind
        self.message = message
        self.field_errors = dict(field_errors or {})

    def edit(self) -> None:
        if self.in_flight:
            return
        self.status = FormStatus.IDLE
        self.error = None
        self.message = None
        self.field_errors = {}
