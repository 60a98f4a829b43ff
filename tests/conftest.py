"""
Shared fixtures for all tests.

factory-boy factories and draft builders live here so both unit/ and
integration/ can import them.
"""
import pytest
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import factory
from django.test import Client
from django.utils import timezone

from consultations.draft import ClinicalNotes, ConsultationDraft, FollowUpChoice
from consultations.medications.types import MedicationCategory, MedicationLineItem
from consultations.models import (
    Consultation,
    FollowUp,
    Invoice,
    PatientContact,
    ScheduledNotification,
)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class ConsultationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Consultation

    patient_id = factory.Sequence(lambda n: f'patient-{n}')
    provider_id = 'provider-1'
    service_id = '1'
    service_name = 'Weight Management'
    notes = factory.LazyFunction(lambda: {'hpi': 'Weight gain over 2 years'})
    medications = factory.LazyFunction(list)


class InvoiceFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Invoice

    consultation = factory.SubFactory(ConsultationFactory)
    patient_id = factory.SelfAttribute('consultation.patient_id')
    amount = Decimal('49.99')
    due_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=7))


class FollowUpFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = FollowUp

    consultation = factory.SubFactory(ConsultationFactory)
    patient_id = factory.SelfAttribute('consultation.patient_id')
    template_id = 'tpl-wm-2w'
    period = '2w'
    scheduled_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=14))


class ScheduledNotificationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ScheduledNotification

    follow_up = factory.SubFactory(FollowUpFactory)
    patient_id = factory.SelfAttribute('follow_up.patient_id')
    scheduled_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=12))


class PatientContactFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PatientContact

    patient_id = factory.Sequence(lambda n: f'patient-{n}')
    email = 'alice@example.com'
    phone = '+15550001111'
    notification_channels = factory.LazyFunction(lambda: ['portal', 'email', 'sms'])


# ---------------------------------------------------------------------------
# Draft builders
# ---------------------------------------------------------------------------

def semaglutide_item(**overrides):
    values = dict(
        id='semaglutide',
        name='Semaglutide',
        dosage='0.25mg',
        frequency='wkly',
        approach='Escalation',
        instructions=('• Inject SC once wkly.', '• Rotate sites.'),
        category=MedicationCategory.WEIGHT_MANAGEMENT,
    )
    values.update(overrides)
    return MedicationLineItem(**values)


def sildenafil_item(**overrides):
    values = dict(
        id='sildenafil',
        name='Sildenafil',
        dosage='50mg',
        frequency='PRN',
        approach='PRN',
        instructions=('• Take 30-60 min pre-activity.',),
        category=MedicationCategory.ED,
    )
    values.update(overrides)
    return MedicationLineItem(**values)


def make_draft(**overrides):
    """A draft that passes validation and the interaction gate."""
    values = dict(
        patient_id='patient-1',
        provider_id='provider-1',
        service_id='1',
        service_name='Weight Management',
        notes=ClinicalNotes(hpi='Weight gain over 2 years', contraindications='None reported'),
        medications=(semaglutide_item(),),
        follow_up=FollowUpChoice(period='4w', display_text='4 weeks', template_id='tpl-wm-4w'),
        created_at=timezone.now(),
        updated_at=timezone.now(),
    )
    values.update(overrides)
    return ConsultationDraft(**values)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def mock_reminder_task():
    """Follow-up reminders never reach a real broker in tests."""
    with patch('consultations.tasks.deliver_scheduled_notification') as task:
        yield task


@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def sample_consultation_payload():
    """Minimal valid payload for POST /api/consultations/."""
    return {
        'patient_id': 'patient-42',
        'provider_id': 'provider-7',
        'service_id': '1',
        'service_name': 'Weight Management',
        'notes': {
            'hpi': 'BMI 34, struggling with weight for 5 years.',
            'pmh': 'Hypertension',
            'contraindications': 'No known contra-indications...',
            'assessmentPlan': 'Start GLP-1 therapy',
        },
        'medication_order': {
            'medications': [
                {
                    'id': 'semaglutide',
                    'name': 'Semaglutide',
                    'dosage': '0.25mg',
                    'frequency': 'wkly',
                    'approach': 'Escalation',
                    'instructions': ['• Inject SC once wkly.'],
                    'category': 'wm',
                },
            ],
        },
        'follow_up': {'period': '4w', 'display_text': '4 weeks', 'template_id': 'tpl-wm-4w'},
        'resources': ['res-1'],
    }
