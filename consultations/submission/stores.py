"""
Django ORM implementation of BaseConsultationStore.

Uses Django's async ORM API so the orchestrator can await each call. Every
method writes exactly one business row (plus the follow-up reminder); nothing
here is updated in place later by the submission pipeline.
"""

import logging
from datetime import timedelta

from asgiref.sync import sync_to_async
from django.utils import timezone

from ..draft import ConsultationDraft
from ..models import Consultation, FollowUp, Invoice, ScheduledNotification
from ..pricing import calculate_follow_up_date
from .base import (
    BaseConsultationStore,
    ConsultationRecord,
    FollowUpRecord,
    FollowUpRequest,
    InvoiceRecord,
    InvoiceRequest,
)

logger = logging.getLogger(__name__)

REMINDER_LEAD_DAYS = 2


def _enqueue_reminder(reminder_id: str, eta) -> None:
    from consultations.tasks import deliver_scheduled_notification
    deliver_scheduled_notification.apply_async(args=[reminder_id], eta=eta)


class DjangoConsultationStore(BaseConsultationStore):

    async def create_consultation(self, draft: ConsultationDraft) -> ConsultationRecord:
        payload = draft.to_dict()
        consultation = await Consultation.objects.acreate(
            patient_id=draft.patient_id,
            provider_id=draft.provider_id,
            service_id=draft.service_id,
            service_name=draft.service_name,
            status=draft.status,
            notes=payload['notes'],
            medications=payload['medication_order']['medications'],
            follow_up=payload['follow_up'],
            resources=payload['resources'],
        )
        return ConsultationRecord(id=str(consultation.id), created_at=consultation.created_at)

    async def create_invoice(self, request: InvoiceRequest) -> InvoiceRecord:
        invoice = await Invoice.objects.acreate(
            patient_id=request.patient_id,
            consultation_id=request.consultation_id,
            items=[item.to_dict() for item in request.items],
            amount=request.total,
            status=request.status,
            due_date=request.due_date,
        )
        return InvoiceRecord(id=str(invoice.id), total=request.total)

    async def schedule_follow_up(self, request: FollowUpRequest) -> FollowUpRecord:
        scheduled_date = calculate_follow_up_date(request.period, timezone.now())
        follow_up = await FollowUp.objects.acreate(
            patient_id=request.patient_id,
            consultation_id=request.consultation_id,
            template_id=request.template_id,
            period=request.period,
            scheduled_date=scheduled_date,
            status='scheduled',
            payment_status=request.payment_status or 'pending',
            invoice_id=request.invoice_id,
        )

        # Reminder two days ahead. A failed reminder does not undo the follow-up.
        remind_at = scheduled_date - timedelta(days=REMINDER_LEAD_DAYS)
        try:
            reminder = await ScheduledNotification.objects.acreate(
                patient_id=request.patient_id,
                follow_up=follow_up,
                scheduled_date=remind_at,
            )
            await sync_to_async(_enqueue_reminder)(str(reminder.id), remind_at)
        except Exception:
            logger.exception("Could not schedule reminder for follow-up %s", follow_up.id)

        return FollowUpRecord(id=str(follow_up.id), scheduled_date=scheduled_date)
