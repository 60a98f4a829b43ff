"""
Unit tests for the follow-up reminder Celery task.

Runs the task body in-process (direct call / eager apply); no broker.
"""
import uuid
from unittest.mock import patch

import pytest

from consultations.models import PatientNotification, ScheduledNotification
from consultations.tasks import deliver_scheduled_notification
from tests.conftest import ScheduledNotificationFactory


@pytest.mark.django_db
class TestDeliverScheduledNotification:

    def test_delivers_pending_reminder(self):
        reminder = ScheduledNotificationFactory()

        deliver_scheduled_notification(str(reminder.id))

        reminder.refresh_from_db()
        assert reminder.status == 'sent'
        assert reminder.sent_at is not None
        notification = PatientNotification.objects.get(reference_id=str(reminder.follow_up_id))
        assert notification.type == 'follow_up_reminder'
        assert notification.patient_id == reminder.patient_id

    def test_missing_reminder_is_skipped(self):
        deliver_scheduled_notification(str(uuid.uuid4()))
        assert PatientNotification.objects.count() == 0

    def test_already_sent_is_skipped(self):
        reminder = ScheduledNotificationFactory(status='sent')

        deliver_scheduled_notification(str(reminder.id))

        assert PatientNotification.objects.count() == 0

    def test_failure_with_retries_left_raises(self):
        reminder = ScheduledNotificationFactory()

        with patch.object(PatientNotification.objects, 'create', side_effect=RuntimeError('db gone')):
            with pytest.raises(RuntimeError):
                deliver_scheduled_notification(str(reminder.id))

        reminder.refresh_from_db()
        assert reminder.status == 'pending'

    def test_exhausted_retries_mark_failed(self):
        reminder = ScheduledNotificationFactory()

        with patch.object(PatientNotification.objects, 'create', side_effect=RuntimeError('db gone')):
            deliver_scheduled_notification.apply(args=[str(reminder.id)], retries=3)

        reminder.refresh_from_db()
        assert reminder.status == 'failed'
        assert reminder.error_message == '[failed after 3 retries] db gone'
        assert ScheduledNotification.objects.filter(status='failed').count() == 1
