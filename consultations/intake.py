"""
DraftPayloadAdapter — consultation submit payload (JSON) → ConsultationDraft.

The payload is what the consultation notes screen posts:

{
  "patient_id":   "p-1",
  "provider_id":  "dr-1",
  "service_id":   "1",
  "service_name": "Weight Management",
  "notes": { "hpi": "...", "pmh": "...", "contraindications": "...",
             "assessmentPlan": "...", "patientHistory": "..." },
  "medication_order": { "medications": [
      { "id": "semaglutide", "name": "Semaglutide", "dosage": "0.25mg",
        "frequency": "wkly", "approach": "Escalation",
        "instructions": ["• Inject SC once wkly."], "category": "wm" } ] },
  "follow_up": { "period": "2w", "display_text": "2 weeks", "template_id": "tpl-1" },
  "resources": ["r1"]
}

Both camelCase and snake_case keys are accepted. Only malformed bodies are
rejected here; missing fields are reported by the validation engine so the
clinician sees every problem at once.
"""

import json
from typing import Any

from django.utils import timezone

from .draft import DEFAULT_CONTRAINDICATIONS, ClinicalNotes, ConsultationDraft, FollowUpChoice
from .exceptions import ValidationError
from .medications.types import MedicationCategory, MedicationLineItem


def _text(data: dict, *keys: str, default: str = '') -> str:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return str(value).strip()
    return default


def _optional(data: dict, *keys: str) -> str | None:
    value = _text(data, *keys)
    return value or None


class DraftPayloadAdapter:

    def __init__(self, raw_body: bytes | str | dict):
        self._raw_body = raw_body
        self._parsed: dict[str, Any] = {}

    def parse(self) -> dict[str, Any]:
        if isinstance(self._raw_body, dict):
            raw = self._raw_body
        else:
            try:
                raw = json.loads(self._raw_body or b'{}')
            except (TypeError, ValueError) as exc:
                raise ValidationError(
                    message='Request body is not valid JSON.',
                    code='MALFORMED_PAYLOAD',
                    detail={'error': str(exc)},
                )
        if not isinstance(raw, dict):
            raise ValidationError(message='Request body must be a JSON object.', code='MALFORMED_PAYLOAD')
        self._parsed = raw
        return raw

    def _medications(self) -> tuple[MedicationLineItem, ...]:
        order = self._parsed.get('medication_order') or {}
        raw_items = order.get('medications') if isinstance(order, dict) else None
        if raw_items is None:
            raw_items = self._parsed.get('medications') or []
        if not isinstance(raw_items, list):
            raise ValidationError(
                message='medication_order.medications must be a list.',
                code='MALFORMED_PAYLOAD',
            )

        items = []
        for index, med in enumerate(raw_items):
            if not isinstance(med, dict):
                raise ValidationError(
                    message=f"Medication #{index} must be an object.",
                    code='MALFORMED_PAYLOAD',
                    detail={'index': index},
                )
            instructions = med.get('instructions') or ()
            if isinstance(instructions, str):
                instructions = instructions.splitlines()
            name = _text(med, 'name')
            items.append(MedicationLineItem(
                id=_text(med, 'id') or name.lower(),
                name=name,
                dosage=_optional(med, 'dosage'),
                frequency=_optional(med, 'frequency'),
                approach=_optional(med, 'approach'),
                instructions=tuple(str(line) for line in instructions),
                category=MedicationCategory.parse(med.get('category')),
            ))
        return tuple(items)

    def _section(self, *keys: str) -> dict:
        """Nested object such as notes / follow_up. Absent → {}."""
        for key in keys:
            value = self._parsed.get(key)
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ValidationError(
                    message=f"{key} must be an object.",
                    code='MALFORMED_PAYLOAD',
                    detail={'field': key},
                )
            return value
        return {}

    def _resources(self) -> tuple[str, ...]:
        resources = self._parsed.get('resources') or []
        if not isinstance(resources, list):
            raise ValidationError(
                message='resources must be a list.',
                code='MALFORMED_PAYLOAD',
                detail={'field': 'resources'},
            )
        return tuple(str(r) for r in resources)

    def transform(self) -> ConsultationDraft:
        raw = self._parsed
        notes = self._section('notes')
        follow_up = self._section('follow_up', 'followUp')
        now = timezone.now()

        return ConsultationDraft(
            patient_id=_optional(raw, 'patient_id', 'patientId'),
            provider_id=_optional(raw, 'provider_id', 'providerId'),
            service_id=_optional(raw, 'service_id', 'serviceId'),
            service_name=_optional(raw, 'service_name', 'serviceName'),
            status=_text(raw, 'status', default='completed') or 'completed',
            notes=ClinicalNotes(
                hpi=_text(notes, 'hpi'),
                pmh=_text(notes, 'pmh'),
                contraindications=_text(notes, 'contraindications', default=DEFAULT_CONTRAINDICATIONS),
                assessment_plan=_text(notes, 'assessmentPlan', 'assessment_plan'),
                patient_history=_text(notes, 'patientHistory', 'patient_history'),
            ),
            medications=self._medications(),
            follow_up=FollowUpChoice(
                period=_optional(follow_up, 'period'),
                display_text=_text(follow_up, 'display_text', 'displayText'),
                template_id=_optional(follow_up, 'template_id', 'templateId'),
            ),
            resources=self._resources(),
            created_at=now,
            updated_at=now,
        )

    def process(self) -> ConsultationDraft:
        """parse → transform."""
        self.parse()
        return self.transform()
