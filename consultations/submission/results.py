"""
Tagged step results and the submission result handed back to the caller.

Each orchestrator step returns Ok(value) or Err(error). The error type tells
the orchestrator what to do next: ValidationError / SafetyBlockError abort,
PersistenceError fails, DegradedCompletionError / NotificationError are
recorded and the pipeline carries on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E', bound=Exception)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


StepResult = Union[Ok[T], Err[E]]


class SubmissionState(str, Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    CHECKING_INTERACTIONS = 'checking_interactions'
    PERSISTING = 'persisting'
    DERIVING_INVOICE = 'deriving_invoice'
    SCHEDULING_FOLLOW_UP = 'scheduling_follow_up'
    NOTIFYING = 'notifying'
    SUCCEEDED = 'succeeded'
    ABORTED = 'aborted'
    FAILED = 'failed'


class AbortReason(str, Enum):
    VALIDATION = 'validation'
    INTERACTION = 'interaction'


@dataclass(frozen=True)
class StepOutcome:
    step: SubmissionState
    status: str          # ok / failed / skipped
    detail: str = ''


@dataclass
class SubmissionResult:
    success: bool
    consultation_id: str | None = None
    errors: dict[str, str] | None = None        # validation aborts only
    error: str | None = None                    # interaction aborts and hard failures
    abort_reason: AbortReason | None = None
    findings: list = field(default_factory=list)
    invoice_id: str | None = None
    follow_up_id: str | None = None
    notified_channels: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    steps: list[StepOutcome] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {
                'success': True,
                'consultationId': self.consultation_id,
                'invoiceId': self.invoice_id,
                'followUpId': self.follow_up_id,
                'notifiedChannels': list(self.notified_channels),
                'warnings': list(self.warnings),
            }
        if self.errors is not None:
            return {'success': False, 'errors': dict(self.errors)}
        body = {'success': False, 'error': self.error}
        if self.findings:
            body['findings'] = [finding.to_dict() for finding in self.findings]
        return body
