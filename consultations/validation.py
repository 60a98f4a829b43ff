"""
Structural validation of a ConsultationDraft.

Pure function over the draft: every rule runs so the clinician sees all
problems in one pass. Keys are stable so the UI can pin each message to a field.
"""

from dataclasses import dataclass, field

from .draft import ConsultationDraft


@dataclass(frozen=True)
class ValidationResult:
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def medication_error_key(index: int, attribute: str) -> str:
    return f"medication_{index}_{attribute}"


def validate(draft: ConsultationDraft) -> ValidationResult:
    errors: dict[str, str] = {}

    if not draft.patient_id:
        errors['patient'] = 'Patient ID is required'
    if not draft.provider_id:
        errors['provider'] = 'Provider ID is required'
    if not (draft.notes.hpi or '').strip():
        errors['hpi'] = 'History of Present Illness is required'
    if not draft.medications:
        errors['medications'] = 'At least one medication must be selected'

    for index, medication in enumerate(draft.medications):
        if not medication.dosage:
            errors[medication_error_key(index, 'dosage')] = f"Dosage required for {medication.name}"
        if not medication.frequency:
            errors[medication_error_key(index, 'frequency')] = f"Frequency required for {medication.name}"
        if not medication.approach:
            errors[medication_error_key(index, 'approach')] = f"Approach required for {medication.name}"

    if not draft.follow_up.period:
        errors['followUp'] = 'Follow-up period is required'

    return ValidationResult(errors=errors)
