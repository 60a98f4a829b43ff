from .catalog import DEFAULT_CATALOG, Catalog, build_catalog, custom_entry
from .selection import MedicationSelectionEngine
from .types import (
    DosageOption,
    MedicationCatalogEntry,
    MedicationCategory,
    MedicationLineItem,
    MedicationSelection,
)

__all__ = [
    'DEFAULT_CATALOG',
    'Catalog',
    'DosageOption',
    'MedicationCatalogEntry',
    'MedicationCategory',
    'MedicationLineItem',
    'MedicationSelection',
    'MedicationSelectionEngine',
    'build_catalog',
    'custom_entry',
]
