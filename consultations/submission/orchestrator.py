"""
SubmissionOrchestrator — drives one consultation submission.

  VALIDATING → CHECKING_INTERACTIONS → PERSISTING → DERIVING_INVOICE
    → SCHEDULING_FOLLOW_UP → NOTIFYING → SUCCEEDED

  ABORTED  from VALIDATING / CHECKING_INTERACTIONS (nothing persisted)
  FAILED   when the consultation record cannot be created

Once the consultation exists the submission reports success: invoice and
follow-up failures are degraded completion (warnings), notification failures
are only logged. Nothing already created is rolled back and nothing is retried.

Steps run strictly one after another; the only suspension points are the
collaborator calls. is_submitting is a single-writer flag for the caller; a
second submit() while one is in flight is a caller error and is not guarded.
"""

import logging
from datetime import timedelta

from django.utils import timezone

from ..draft import ConsultationDraft
from ..exceptions import (
    DegradedCompletionError,
    NotificationError,
    PersistenceError,
    SafetyBlockError,
    ValidationError,
)
from ..interactions import InteractionFinding, check_interactions, has_blocking
from ..pricing import invoice_due_days, notification_template_for, price_for_follow_up
from ..validation import validate
from .base import (
    BaseConsultationStore,
    BaseNotifier,
    ConsultationRecord,
    FollowUpRecord,
    FollowUpRequest,
    InvoiceItem,
    InvoiceRecord,
    InvoiceRequest,
    NotificationRequest,
    NotificationResult,
)
from .results import AbortReason, Err, Ok, StepOutcome, StepResult, SubmissionResult, SubmissionState

logger = logging.getLogger(__name__)

INTERACTION_BLOCK_MESSAGE = 'High-risk drug interaction detected. Please review medications.'
GENERIC_FAILURE_MESSAGE = 'Error submitting consultation'
INVOICE_STATUS = 'pending'
FOLLOW_UP_PAYMENT_STATUS = 'pending'


class SubmissionOrchestrator:

    def __init__(
        self,
        store: BaseConsultationStore | None = None,
        notifier: BaseNotifier | None = None,
        rules=None,
        clock=None,
    ):
        if store is None or notifier is None:
            from .factory import get_consultation_store, get_notifier
            store = store or get_consultation_store()
            notifier = notifier or get_notifier()
        self.store = store
        self.notifier = notifier
        self.rules = rules
        self._clock = clock or timezone.now

        self.state = SubmissionState.IDLE
        self.history: list[SubmissionState] = [SubmissionState.IDLE]
        self.abort_reason: AbortReason | None = None
        self.is_submitting = False
        self.validation_errors: dict[str, str] = {}

    def _transition(self, state: SubmissionState) -> None:
        logger.info("[submission] %s → %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    async def submit(self, draft: ConsultationDraft, patient=None) -> SubmissionResult:
        """Run the whole pipeline for one draft. Never raises for collaborator failures."""
        self.is_submitting = True
        self.validation_errors = {}
        self.abort_reason = None
        self.state = SubmissionState.IDLE
        self.history = [SubmissionState.IDLE]
        try:
            return await self._run(draft, patient)
        finally:
            self.is_submitting = False

    async def _run(self, draft: ConsultationDraft, patient) -> SubmissionResult:
        steps: list[StepOutcome] = []
        warnings: list[str] = []

        # 1. structural validation
        self._transition(SubmissionState.VALIDATING)
        validated = self._validate(draft)
        if isinstance(validated, Err):
            self.validation_errors = validated.error.detail['errors']
            steps.append(StepOutcome(SubmissionState.VALIDATING, 'failed', validated.error.message))
            return self._abort(AbortReason.VALIDATION, SubmissionResult(
                success=False,
                errors=dict(self.validation_errors),
                abort_reason=AbortReason.VALIDATION,
                steps=steps,
            ))
        steps.append(StepOutcome(SubmissionState.VALIDATING, 'ok'))

        # 2. safety gate
        self._transition(SubmissionState.CHECKING_INTERACTIONS)
        checked = self._check_interactions(draft, patient)
        if isinstance(checked, Err):
            findings = checked.error.detail['findings']
            steps.append(StepOutcome(SubmissionState.CHECKING_INTERACTIONS, 'failed', checked.error.message))
            return self._abort(AbortReason.INTERACTION, SubmissionResult(
                success=False,
                error=checked.error.message,
                abort_reason=AbortReason.INTERACTION,
                findings=findings,
                steps=steps,
            ))
        findings = checked.value
        warnings.extend(finding.message for finding in findings)
        steps.append(StepOutcome(SubmissionState.CHECKING_INTERACTIONS, 'ok'))

        # 3. the consultation itself, the only hard failure
        self._transition(SubmissionState.PERSISTING)
        persisted = await self._persist(draft)
        if isinstance(persisted, Err):
            steps.append(StepOutcome(SubmissionState.PERSISTING, 'failed', persisted.error.message))
            self._transition(SubmissionState.FAILED)
            return SubmissionResult(success=False, error=persisted.error.message, findings=findings, steps=steps)
        consultation = persisted.value
        steps.append(StepOutcome(SubmissionState.PERSISTING, 'ok', consultation.id))

        # 4. invoice (degraded on failure)
        self._transition(SubmissionState.DERIVING_INVOICE)
        invoice_id = None
        if draft.patient_id:
            invoiced = await self._derive_invoice(draft, consultation)
            if isinstance(invoiced, Err):
                warnings.append(invoiced.error.message)
                steps.append(StepOutcome(SubmissionState.DERIVING_INVOICE, 'failed', invoiced.error.message))
            else:
                invoice_id = invoiced.value.id
                steps.append(StepOutcome(SubmissionState.DERIVING_INVOICE, 'ok', invoice_id))
        else:
            steps.append(StepOutcome(SubmissionState.DERIVING_INVOICE, 'skipped', 'no patient'))

        # 5. follow-up (degraded on failure)
        self._transition(SubmissionState.SCHEDULING_FOLLOW_UP)
        follow_up_id = None
        if draft.follow_up.template_id:
            scheduled = await self._schedule_follow_up(draft, consultation, invoice_id)
            if isinstance(scheduled, Err):
                warnings.append(scheduled.error.message)
                steps.append(StepOutcome(SubmissionState.SCHEDULING_FOLLOW_UP, 'failed', scheduled.error.message))
            else:
                follow_up_id = scheduled.value.id
                steps.append(StepOutcome(SubmissionState.SCHEDULING_FOLLOW_UP, 'ok', follow_up_id))
        else:
            steps.append(StepOutcome(SubmissionState.SCHEDULING_FOLLOW_UP, 'skipped', 'no template'))

        # 6. notification (logged only)
        self._transition(SubmissionState.NOTIFYING)
        notified = await self._notify(draft, consultation)
        channels: list[str] = []
        if isinstance(notified, Err):
            steps.append(StepOutcome(SubmissionState.NOTIFYING, 'failed', notified.error.message))
        else:
            channels = notified.value.delivered_channels()
            steps.append(StepOutcome(SubmissionState.NOTIFYING, 'ok', ', '.join(channels)))

        self._transition(SubmissionState.SUCCEEDED)
        return SubmissionResult(
            success=True,
            consultation_id=consultation.id,
            findings=findings,
            invoice_id=invoice_id,
            follow_up_id=follow_up_id,
            notified_channels=channels,
            warnings=warnings,
            steps=steps,
        )

    def _abort(self, reason: AbortReason, result: SubmissionResult) -> SubmissionResult:
        self.abort_reason = reason
        self._transition(SubmissionState.ABORTED)
        logger.info("[submission] aborted (%s)", reason.value)
        return result

    # ── steps ──────────────────────────────────────────────────────────────

    def _validate(self, draft: ConsultationDraft) -> StepResult[None, ValidationError]:
        result = validate(draft)
        if result.is_valid:
            return Ok(None)
        return Err(ValidationError(
            message='Consultation validation failed',
            code='CONSULTATION_INVALID',
            detail={'errors': result.errors},
        ))

    def _check_interactions(
        self, draft: ConsultationDraft, patient,
    ) -> StepResult[list[InteractionFinding], SafetyBlockError]:
        findings = check_interactions(draft.medications, draft.notes.contraindications, self.rules, patient)
        if has_blocking(findings):
            logger.warning(
                "[submission] blocked by interaction rules: %s",
                '; '.join(f.message for f in findings if f.is_blocking),
            )
            return Err(SafetyBlockError(message=INTERACTION_BLOCK_MESSAGE, detail={'findings': findings}))
        return Ok(findings)

    async def _persist(self, draft: ConsultationDraft) -> StepResult[ConsultationRecord, PersistenceError]:
        try:
            consultation = await self.store.create_consultation(draft)
        except Exception as exc:
            logger.exception("[submission] consultation could not be created")
            return Err(PersistenceError(message=str(exc) or GENERIC_FAILURE_MESSAGE))
        logger.info("[submission] consultation %s created", consultation.id)
        return Ok(consultation)

    async def _derive_invoice(
        self, draft: ConsultationDraft, consultation: ConsultationRecord,
    ) -> StepResult[InvoiceRecord, DegradedCompletionError]:
        amount = price_for_follow_up(draft.follow_up.period)
        request = InvoiceRequest(
            patient_id=draft.patient_id,
            consultation_id=consultation.id,
            items=(InvoiceItem(
                description=f"Follow-up consultation ({draft.follow_up.display_text})",
                amount=amount,
                quantity=1,
            ),),
            status=INVOICE_STATUS,
            due_date=self._clock() + timedelta(days=invoice_due_days()),
        )
        try:
            invoice = await self.store.create_invoice(request)
        except Exception as exc:
            logger.warning("[submission] invoice for consultation %s failed: %s", consultation.id, exc)
            return Err(DegradedCompletionError(
                message=f"Consultation saved but the invoice could not be created: {exc}",
                code='INVOICE_NOT_CREATED',
                detail={'consultation_id': consultation.id},
            ))
        logger.info("[submission] invoice %s created: $%s", invoice.id, amount)
        return Ok(invoice)

    async def _schedule_follow_up(
        self, draft: ConsultationDraft, consultation: ConsultationRecord, invoice_id: str | None,
    ) -> StepResult[FollowUpRecord, DegradedCompletionError]:
        request = FollowUpRequest(
            patient_id=draft.patient_id,
            consultation_id=consultation.id,
            template_id=draft.follow_up.template_id,
            period=draft.follow_up.period,
            payment_status=FOLLOW_UP_PAYMENT_STATUS,
            invoice_id=invoice_id,
        )
        try:
            follow_up = await self.store.schedule_follow_up(request)
        except Exception as exc:
            logger.warning("[submission] follow-up for consultation %s failed: %s", consultation.id, exc)
            return Err(DegradedCompletionError(
                message=f"Consultation saved but the follow-up could not be scheduled: {exc}",
                code='FOLLOW_UP_NOT_SCHEDULED',
                detail={'consultation_id': consultation.id},
            ))
        logger.info("[submission] follow-up %s scheduled for %s", follow_up.id, draft.follow_up.display_text)
        return Ok(follow_up)

    async def _notify(
        self, draft: ConsultationDraft, consultation: ConsultationRecord,
    ) -> StepResult[NotificationResult, NotificationError]:
        request = NotificationRequest(
            patient_id=draft.patient_id,
            note_id=consultation.id,
            template_id=notification_template_for(draft.service_id),
        )
        try:
            result = await self.notifier.notify_patient(request)
        except Exception as exc:
            logger.error("[submission] failed to notify patient %s: %s", draft.patient_id, exc)
            return Err(NotificationError(message=str(exc) or 'Failed to notify patient'))
        if not result.success:
            logger.error("[submission] failed to notify patient %s: %s", draft.patient_id, result.error)
            return Err(NotificationError(message=result.error or 'Failed to notify patient'))
        if result.delivered_channels():
            logger.info("[submission] patient notified via: %s", ', '.join(result.delivered_channels()))
        return Ok(result)
