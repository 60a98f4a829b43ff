"""
Patient notification backends.

PortalNotifier publishes the consultation note to the patient portal, stores a
PatientNotification and fans out to the channels the patient opted into.
The portal channel always succeeds once the notification row exists; email
and SMS are handed to the delivery log (the outbound gateways live outside
this service) and report per-channel success.
"""

import logging

from django.utils import timezone

from ..exceptions import NotificationError
from ..models import Consultation, NotificationDelivery, PatientContact, PatientNotification
from .base import BaseNotifier, NotificationRequest, NotificationResult

logger = logging.getLogger(__name__)

NEW_NOTE_TITLE = 'New Consultation Note Available'
NEW_NOTE_MESSAGE = (
    'Your provider has completed your consultation note. '
    'You can view it in your patient portal.'
)
DEFAULT_CHANNELS = ('portal',)


class PortalNotifier(BaseNotifier):

    async def notify_patient(self, request: NotificationRequest) -> NotificationResult:
        try:
            consultation = await Consultation.objects.aget(id=request.note_id)
        except Consultation.DoesNotExist:
            raise NotificationError(
                message=f"Consultation note with ID {request.note_id} not found",
                code='NOTE_NOT_FOUND',
                detail={'note_id': request.note_id},
            )

        consultation.is_published_to_patient = True
        consultation.published_at = timezone.now()
        await consultation.asave(update_fields=['is_published_to_patient', 'published_at', 'updated_at'])

        notification = await PatientNotification.objects.acreate(
            patient_id=request.patient_id,
            reference_id=request.note_id,
            reference_type='consultation_note',
            type='new_note',
            template_id=request.template_id,
            title=NEW_NOTE_TITLE,
            message=NEW_NOTE_MESSAGE,
        )

        contact = await PatientContact.objects.filter(patient_id=request.patient_id).afirst()
        channels = (contact.notification_channels if contact else None) or DEFAULT_CHANNELS

        results = {'portal': {'success': True, 'message': 'Added to patient portal'}}
        if contact is not None:
            for channel, recipient in (('email', contact.email), ('sms', contact.phone)):
                if channel not in channels or not recipient:
                    continue
                try:
                    await self._deliver(notification, channel, recipient)
                    results[channel] = {'success': True, 'recipient': recipient}
                except Exception as exc:
                    logger.exception("Error sending %s notification to patient %s", channel, request.patient_id)
                    results[channel] = {'success': False, 'error': str(exc)}

        return NotificationResult(success=True, channels=results, notification_id=str(notification.id))

    async def _deliver(self, notification: PatientNotification, channel: str, recipient: str) -> None:
        logger.info("Queueing %s notification %s for %s", channel, notification.id, recipient)
        await NotificationDelivery.objects.acreate(
            notification=notification,
            channel=channel,
            recipient=recipient,
            status='sent',
            sent_at=timezone.now(),
        )
