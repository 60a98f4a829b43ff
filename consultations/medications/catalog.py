"""
Medication catalog.

build_catalog() is the only way to get a catalog: it merges DEFAULT_CATALOG with
caller overrides and returns an immutable Catalog. Adding a custom medication
returns a new Catalog instead of mutating the shared defaults.

Override / custom input may be a MedicationCatalogEntry or a plain dict using
either the UI's camelCase keys (dosageOptions, supportedApproaches, ...) or
snake_case keys.
"""

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator

from ..exceptions import ValidationError
from .types import DosageOption, MedicationCatalogEntry, MedicationCategory

CUSTOM_DEFAULT_APPROACH = 'Maint.'
CUSTOM_DEFAULT_DOSAGE = '10mg'

_WHITESPACE_RE = re.compile(r'\s+')


DEFAULT_CATALOG: Mapping[str, MedicationCatalogEntry] = MappingProxyType({
    'semaglutide': MedicationCatalogEntry(
        id='semaglutide',
        name='Semaglutide',
        brand_name='Wegovy',
        category=MedicationCategory.WEIGHT_MANAGEMENT,
        frequency='wkly',
        dosage_options=(
            DosageOption('0.25mg', '0.25'),
            DosageOption('0.5mg', '0.5'),
            DosageOption('1mg', '1.0'),
            DosageOption('1.7mg', '1.7'),
            DosageOption('2.4mg', '2.4mg'),
        ),
        instructions=('• Inject SC once wkly.', '• Rotate sites.'),
        supported_approaches=('Maint.', 'Escalation'),
        default_approach='Escalation',
        default_dosage='0.25mg',
    ),
    'metformin': MedicationCatalogEntry(
        id='metformin',
        name='Metformin',
        category=MedicationCategory.WEIGHT_MANAGEMENT,
        frequency='daily',
        dosage_options=(
            DosageOption('500mg', '500'),
            DosageOption('850mg', '850'),
            DosageOption('1g', '1g'),
        ),
        instructions=('• Take with food.',),
        supported_approaches=('Maint.',),
        default_approach='Maint.',
        default_dosage='500mg',
    ),
    'sildenafil': MedicationCatalogEntry(
        id='sildenafil',
        name='Sildenafil',
        brand_name='Viagra',
        category=MedicationCategory.ED,
        frequency='PRN',
        dosage_options=(
            DosageOption('25mg', '25'),
            DosageOption('50mg', '50'),
            DosageOption('100mg', '100mg'),
        ),
        instructions=('• Take 30-60 min pre-activity.',),
        supported_approaches=('PRN',),
        default_approach='PRN',
        default_dosage='50mg',
    ),
})


class Catalog(Mapping):
    """Read-only id → MedicationCatalogEntry mapping that preserves insertion order."""

    def __init__(self, entries: Mapping[str, MedicationCatalogEntry]):
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, medication_id: str) -> MedicationCatalogEntry:
        return self._entries[medication_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Catalog({list(self._entries)!r})"

    def with_entry(self, entry: MedicationCatalogEntry) -> 'Catalog':
        merged = dict(self._entries)
        merged[entry.id] = entry
        return Catalog(merged)

    def by_category(self) -> dict[MedicationCategory, list[MedicationCatalogEntry]]:
        grouped: dict[MedicationCategory, list[MedicationCatalogEntry]] = {}
        for entry in self._entries.values():
            grouped.setdefault(entry.category, []).append(entry)
        return grouped


def slugify_medication_id(name: str) -> str:
    return _WHITESPACE_RE.sub('_', name.strip().lower())


def _pick(data: Mapping[str, Any], *keys: str, default=None):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _dosage_options(raw) -> tuple[DosageOption, ...]:
    options = []
    for item in raw or ():
        if isinstance(item, DosageOption):
            options.append(item)
        elif isinstance(item, Mapping):
            value = str(item.get('value') or '').strip()
            if value:
                options.append(DosageOption(value=value, label=str(item.get('label') or value)))
        elif item:
            options.append(DosageOption(value=str(item), label=str(item)))
    return tuple(options)


def _approaches(raw) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    return tuple(str(approach) for approach in raw)


def _lines(raw) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(raw.splitlines())
    return tuple(str(line) for line in raw)


def entry_from_dict(medication_id: str, data: Mapping[str, Any]) -> MedicationCatalogEntry:
    """Build a catalog entry from a UI-shaped dict."""
    name = (_pick(data, 'name') or '').strip()
    if not name:
        raise ValidationError(
            message='Medication name is required.',
            code='MEDICATION_NAME_REQUIRED',
            detail={'medication_id': medication_id},
        )

    return MedicationCatalogEntry(
        id=medication_id,
        name=name,
        brand_name=_pick(data, 'brand_name', 'brandName'),
        category=MedicationCategory.parse(_pick(data, 'category')),
        frequency=_pick(data, 'frequency', default=''),
        dosage_options=_dosage_options(_pick(data, 'dosage_options', 'dosageOptions')),
        supported_approaches=_approaches(_pick(data, 'supported_approaches', 'supportedApproaches')),
        default_approach=_pick(data, 'default_approach', 'defaultApproach'),
        default_dosage=_pick(data, 'default_dosage', 'defaultDosage'),
        instructions=_lines(_pick(data, 'instructions')),
        is_patient_preference=bool(_pick(data, 'is_patient_preference', 'isPatientPreference', default=False)),
    )


def build_catalog(overrides=None) -> Catalog:
    """
    Merge DEFAULT_CATALOG with caller overrides and return an immutable Catalog.

    Override entries win by id. Values may be MedicationCatalogEntry instances
    or dicts (see entry_from_dict).
    """
    merged: dict[str, MedicationCatalogEntry] = dict(DEFAULT_CATALOG)
    for medication_id, value in (overrides or {}).items():
        if isinstance(value, MedicationCatalogEntry):
            merged[medication_id] = value
        else:
            merged[medication_id] = entry_from_dict(medication_id, value)
    return Catalog(merged)


def custom_entry(data) -> MedicationCatalogEntry:
    """
    Synthesize a custom catalog entry from free-form input.

    id falls back to the slugified name. Approach and dosage defaults are always
    populated so later approach validation never sees an empty list.
    """
    if isinstance(data, MedicationCatalogEntry):
        data = {
            'id': data.id,
            'name': data.name,
            'brand_name': data.brand_name,
            'category': data.category,
            'frequency': data.frequency,
            'dosage_options': data.dosage_options,
            'supported_approaches': data.supported_approaches or None,
            'default_approach': data.default_approach,
            'default_dosage': data.default_dosage,
            'instructions': data.instructions,
            'is_patient_preference': data.is_patient_preference,
        }

    name = (_pick(data, 'name') or '').strip()
    medication_id = _pick(data, 'id') or (slugify_medication_id(name) if name else '')
    entry = entry_from_dict(medication_id, data)

    supported = entry.supported_approaches or (CUSTOM_DEFAULT_APPROACH,)
    default_dosage = entry.default_dosage or (
        entry.dosage_options[0].value if entry.dosage_options else CUSTOM_DEFAULT_DOSAGE
    )
    return MedicationCatalogEntry(
        id=entry.id,
        name=entry.name,
        brand_name=entry.brand_name,
        category=entry.category,
        frequency=entry.frequency,
        dosage_options=entry.dosage_options,
        supported_approaches=supported,
        default_approach=entry.default_approach or CUSTOM_DEFAULT_APPROACH,
        default_dosage=default_dosage,
        instructions=entry.instructions,
        is_patient_preference=entry.is_patient_preference,
    )
