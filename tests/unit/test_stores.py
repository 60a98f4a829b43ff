"""
Unit tests for DjangoConsultationStore (database-backed).

The store is async; each test drives it through async_to_sync so the ORM
calls land on the test's own connection and transaction.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync
from django.utils import timezone

from consultations.models import Consultation, FollowUp, Invoice, ScheduledNotification
from consultations.submission.base import FollowUpRequest, InvoiceItem, InvoiceRequest
from consultations.submission.stores import DjangoConsultationStore
from tests.conftest import ConsultationFactory, InvoiceFactory, make_draft


@pytest.fixture
def store():
    return DjangoConsultationStore()


@pytest.mark.django_db
class TestCreateConsultation:

    def test_persists_draft(self, store):
        record = async_to_sync(store.create_consultation)(make_draft(resources=('res-1',)))

        consultation = Consultation.objects.get(id=record.id)
        assert consultation.patient_id == 'patient-1'
        assert consultation.service_name == 'Weight Management'
        assert consultation.notes['hpi'] == 'Weight gain over 2 years'
        assert consultation.medications[0]['id'] == 'semaglutide'
        assert consultation.follow_up['template_id'] == 'tpl-wm-4w'
        assert consultation.resources == ['res-1']
        assert consultation.is_published_to_patient is False
        assert record.created_at is not None


@pytest.mark.django_db
class TestCreateInvoice:

    def test_persists_invoice_with_total(self, store):
        consultation = ConsultationFactory()
        request = InvoiceRequest(
            patient_id=consultation.patient_id,
            consultation_id=str(consultation.id),
            items=(InvoiceItem('Follow-up consultation (2 weeks)', Decimal('49.99')),),
            status='pending',
            due_date=timezone.now() + timedelta(days=7),
        )

        record = async_to_sync(store.create_invoice)(request)

        invoice = Invoice.objects.get(id=record.id)
        assert invoice.amount == Decimal('49.99')
        assert invoice.consultation_id == consultation.id
        assert invoice.items == [
            {'description': 'Follow-up consultation (2 weeks)', 'amount': '49.99', 'quantity': 1},
        ]
        assert record.total == Decimal('49.99')

    def test_total_sums_items(self, store):
        consultation = ConsultationFactory()
        request = InvoiceRequest(
            patient_id=consultation.patient_id,
            consultation_id=str(consultation.id),
            items=(InvoiceItem('a', Decimal('10.00'), quantity=2), InvoiceItem('b', Decimal('5.50'))),
            status='pending',
            due_date=timezone.now(),
        )

        record = async_to_sync(store.create_invoice)(request)

        assert Invoice.objects.get(id=record.id).amount == Decimal('25.50')


@pytest.mark.django_db
class TestScheduleFollowUp:

    def _request(self, consultation, invoice_id=None, period='2w'):
        return FollowUpRequest(
            patient_id=consultation.patient_id,
            consultation_id=str(consultation.id),
            template_id='tpl-wm-2w',
            period=period,
            payment_status='pending',
            invoice_id=invoice_id,
        )

    def test_follow_up_and_reminder(self, store, mock_reminder_task):
        consultation = ConsultationFactory()
        invoice = InvoiceFactory(consultation=consultation)
        before = timezone.now()

        record = async_to_sync(store.schedule_follow_up)(self._request(consultation, str(invoice.id)))

        follow_up = FollowUp.objects.get(id=record.id)
        assert follow_up.invoice_id == invoice.id
        assert follow_up.payment_status == 'pending'
        assert follow_up.status == 'scheduled'
        assert timedelta(days=14) <= follow_up.scheduled_date - before < timedelta(days=14, minutes=1)

        reminder = ScheduledNotification.objects.get(follow_up=follow_up)
        assert reminder.status == 'pending'
        assert reminder.scheduled_date == follow_up.scheduled_date - timedelta(days=2)
        mock_reminder_task.apply_async.assert_called_once_with(
            args=[str(reminder.id)], eta=reminder.scheduled_date,
        )

    def test_without_invoice(self, store):
        consultation = ConsultationFactory()
        record = async_to_sync(store.schedule_follow_up)(self._request(consultation))
        assert FollowUp.objects.get(id=record.id).invoice is None

    def test_reminder_failure_keeps_follow_up(self, store, mock_reminder_task):
        mock_reminder_task.apply_async.side_effect = ConnectionError('broker unreachable')
        consultation = ConsultationFactory()

        record = async_to_sync(store.schedule_follow_up)(self._request(consultation))

        assert FollowUp.objects.filter(id=record.id).exists()
