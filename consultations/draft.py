"""
ConsultationDraft — the one structure validation, interaction checks and the
submission orchestrator understand.

The draft is a frozen snapshot: the orchestrator never reaches back into the
selection engine or the service panel.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from django.utils import timezone

from .medications.selection import MedicationSelectionEngine
from .medications.types import MedicationLineItem
from .service_panel import ServicePanel

DEFAULT_CONTRAINDICATIONS = 'No known contra-indications...'
DEFAULT_FOLLOW_UP_PERIOD = '2w'
DEFAULT_FOLLOW_UP_TEXT = '2 weeks'


@dataclass(frozen=True)
class ClinicalNotes:
    hpi: str = ''
    pmh: str = ''
    contraindications: str = DEFAULT_CONTRAINDICATIONS
    assessment_plan: str = ''
    patient_history: str = ''

    def to_dict(self) -> dict:
        return {
            'hpi': self.hpi,
            'pmh': self.pmh,
            'contraindications': self.contraindications,
            'assessmentPlan': self.assessment_plan,
            'patientHistory': self.patient_history,
        }


@dataclass(frozen=True)
class FollowUpChoice:
    period: str | None = DEFAULT_FOLLOW_UP_PERIOD
    display_text: str = DEFAULT_FOLLOW_UP_TEXT
    template_id: str | None = None

    def to_dict(self) -> dict:
        return {
            'period': self.period,
            'display_text': self.display_text,
            'template_id': self.template_id,
        }


@dataclass(frozen=True)
class ConsultationDraft:
    patient_id: str | None
    provider_id: str | None
    notes: ClinicalNotes = field(default_factory=ClinicalNotes)
    medications: tuple[MedicationLineItem, ...] = ()
    follow_up: FollowUpChoice = field(default_factory=FollowUpChoice)
    service_id: str | None = None
    service_name: str | None = None
    resources: tuple[str, ...] = ()
    status: str = 'completed'
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Wire shape handed to the persistence service."""
        return {
            'patient_id': self.patient_id,
            'provider_id': self.provider_id,
            'service_id': self.service_id,
            'service_name': self.service_name,
            'status': self.status,
            'notes': self.notes.to_dict(),
            'medication_order': {
                'medications': [item.to_dict() for item in self.medications],
            },
            'follow_up': self.follow_up.to_dict(),
            'resources': list(self.resources),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


def assemble_draft(
    patient_id,
    provider_id,
    engine: MedicationSelectionEngine,
    services: ServicePanel,
    notes: ClinicalNotes | None = None,
    follow_up: FollowUpChoice | None = None,
    resources=(),
    clock: Callable[[], datetime] | None = None,
) -> ConsultationDraft:
    """Snapshot the selection engine and clinical fields into a ConsultationDraft."""
    now = (clock or timezone.now)()
    primary = services.primary_service()

    return ConsultationDraft(
        patient_id=str(patient_id) if patient_id else None,
        provider_id=str(provider_id) if provider_id else None,
        service_id=primary.id if primary else None,
        service_name=primary.name if primary else None,
        notes=notes or ClinicalNotes(),
        medications=tuple(engine.formatted_selections()),
        follow_up=follow_up or FollowUpChoice(),
        resources=tuple(str(r) for r in resources),
        created_at=now,
        updated_at=now,
    )
