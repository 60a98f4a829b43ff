"""
Medication dataclasses shared by the catalog, the selection engine and the draft assembler.

Catalog entries are frozen: a session may add entries but never edits or deletes one.
Selections are mutable and live only while the medication is chosen.
"""

from dataclasses import dataclass, field
from enum import Enum


class MedicationCategory(str, Enum):
    WEIGHT_MANAGEMENT = 'wm'
    ED = 'ed'
    PRIMARY_CARE = 'pc'
    MENTAL_HEALTH = 'mh'
    OTHER = 'other'

    @classmethod
    def parse(cls, value) -> 'MedicationCategory':
        """Accept enum members, short codes ('wm') or long names ('weight-management')."""
        if isinstance(value, cls):
            return value
        raw = (value or '').strip().lower()
        for member in cls:
            if raw in (member.value, member.name.lower(), member.name.lower().replace('_', '-')):
                return member
        return cls.OTHER


CATEGORY_LABELS = {
    MedicationCategory.WEIGHT_MANAGEMENT: 'Weight Management',
    MedicationCategory.ED: 'ED',
    MedicationCategory.PRIMARY_CARE: 'Primary Care',
    MedicationCategory.MENTAL_HEALTH: 'Mental Health',
    MedicationCategory.OTHER: 'Other',
}


@dataclass(frozen=True)
class DosageOption:
    value: str    # stored on the selection, e.g. "0.25mg"
    label: str    # shown to the clinician, e.g. "0.25"


@dataclass(frozen=True)
class MedicationCatalogEntry:
    id: str
    name: str
    category: MedicationCategory
    frequency: str
    dosage_options: tuple[DosageOption, ...] = ()
    supported_approaches: tuple[str, ...] = ()
    default_approach: str | None = None
    default_dosage: str | None = None
    instructions: tuple[str, ...] = ()
    brand_name: str | None = None
    is_patient_preference: bool = False

    @property
    def dosage_values(self) -> tuple[str, ...]:
        return tuple(option.value for option in self.dosage_options)

    def seed_dosage(self) -> str | None:
        if self.default_dosage:
            return self.default_dosage
        return self.dosage_options[0].value if self.dosage_options else None

    def seed_approach(self) -> str | None:
        if self.default_approach:
            return self.default_approach
        return self.supported_approaches[0] if self.supported_approaches else None


@dataclass
class MedicationSelection:
    """Live configuration of a chosen medication. Exists only while selected."""

    dosage: str | None
    frequency: str | None
    approach: str | None
    instructions: list[str] = field(default_factory=list)
    is_patient_preference: bool = False


@dataclass(frozen=True)
class MedicationLineItem:
    """Flattened catalog metadata + live selection, as it travels inside a draft."""

    id: str
    name: str
    dosage: str | None
    frequency: str | None
    approach: str | None
    instructions: tuple[str, ...] = ()
    category: MedicationCategory = MedicationCategory.OTHER

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'dosage': self.dosage,
            'frequency': self.frequency,
            'approach': self.approach,
            'instructions': list(self.instructions),
            'category': self.category.value,
        }
