"""
Response serializers — domain objects → JSON-able dicts.

Output formatting only; request parsing lives in consultations/intake.py.
"""

from .medications.types import CATEGORY_LABELS


def serialize_submission_created(result):
    """Serialize a successful submission for the 201 response."""
    body = result.to_dict()
    body['message'] = 'Consultation submitted successfully.'
    if result.warnings:
        body['message'] = 'Consultation submitted with warnings.'
    return body


def serialize_findings(findings):
    return {
        'blocking': any(finding.is_blocking for finding in findings),
        'findings': [finding.to_dict() for finding in findings],
    }


def serialize_catalog_entry(entry):
    return {
        'id': entry.id,
        'name': entry.name,
        'brandName': entry.brand_name,
        'category': entry.category.value,
        'frequency': entry.frequency,
        'dosageOptions': [{'value': o.value, 'label': o.label} for o in entry.dosage_options],
        'supportedApproaches': list(entry.supported_approaches),
        'defaultApproach': entry.default_approach,
        'defaultDosage': entry.default_dosage,
        'instructions': list(entry.instructions),
        'isPatientPreference': entry.is_patient_preference,
    }


def serialize_catalog(catalog):
    """Catalog grouped by category, in catalog order."""
    return {
        'categories': [
            {
                'category': category.value,
                'name': CATEGORY_LABELS[category],
                'medications': [serialize_catalog_entry(entry) for entry in entries],
            }
            for category, entries in catalog.by_category().items()
        ],
    }
