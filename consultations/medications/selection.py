"""
MedicationSelectionEngine — per-consultation medication state.

Single source of truth for what reaches the draft assembler. A selection record
exists only while the medication is chosen; toggling off deletes it. No I/O.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from .catalog import Catalog, build_catalog, custom_entry
from .types import MedicationCategory, MedicationLineItem, MedicationSelection

logger = logging.getLogger(__name__)

PREFERRED_PRODUCT_SUFFIX = '_product'


class MedicationSelectionEngine:

    def __init__(self, catalog: Catalog | None = None):
        self._catalog = catalog if catalog is not None else build_catalog()
        # dict keeps insertion order == selection order
        self._selections: dict[str, MedicationSelection] = {}

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selections)

    # ── selection ──────────────────────────────────────────────────────────

    def toggle(self, medication_id: str) -> bool:
        """Select with catalog defaults, or drop the selection. Returns the new selected state."""
        entry = self._catalog.get(medication_id)
        if entry is None:
            logger.error("Medication %s not found in catalog", medication_id)
            return False

        if medication_id in self._selections:
            del self._selections[medication_id]
            logger.debug("Deselected %s", medication_id)
            return False

        self._selections[medication_id] = MedicationSelection(
            dosage=entry.seed_dosage(),
            frequency=entry.frequency,
            approach=entry.seed_approach(),
            instructions=list(entry.instructions),
            is_patient_preference=entry.is_patient_preference,
        )
        logger.debug("Selected %s", medication_id)
        return True

    def set_dosage(self, medication_id: str, dosage: str) -> None:
        selection = self._selections.get(medication_id)
        if selection is None:
            return
        selection.dosage = dosage

    def set_frequency(self, medication_id: str, frequency: str) -> None:
        selection = self._selections.get(medication_id)
        if selection is None:
            return
        selection.frequency = frequency

    def set_approach(self, medication_id: str, approach: str) -> None:
        selection = self._selections.get(medication_id)
        if selection is None:
            return
        entry = self._catalog[medication_id]
        if approach not in entry.supported_approaches:
            logger.error("Approach %s not supported for %s", approach, medication_id)
            return
        selection.approach = approach

    def set_instructions(self, medication_id: str, instructions: str | list[str]) -> None:
        selection = self._selections.get(medication_id)
        if selection is None:
            return
        if isinstance(instructions, str):
            selection.instructions = instructions.splitlines()
        else:
            selection.instructions = list(instructions)

    def add_custom_medication(self, data) -> str:
        """Insert a custom entry into the catalog and select it. Returns its id."""
        entry = custom_entry(data)
        self._catalog = self._catalog.with_entry(entry)
        # a re-added id starts over from the new entry's defaults
        self._selections.pop(entry.id, None)
        self.toggle(entry.id)
        logger.info("Added custom medication %s (%s)", entry.name, entry.id)
        return entry.id

    def preselect_preferences(self, form_submissions) -> list[str]:
        """
        Pre-select medications the patient asked for on their intake forms.

        Only the latest submission per form category counts. Its
        preferred_product_id ("semaglutide_product") maps to a catalog id.
        """
        latest: dict = {}
        for submission in form_submissions or ():
            category_id = submission.get('category_id')
            submitted_at = _as_datetime(submission.get('submitted_at'))
            current = latest.get(category_id)
            if current is None or submitted_at > _as_datetime(current.get('submitted_at')):
                latest[category_id] = submission

        preselected = []
        for submission in latest.values():
            product_id = submission.get('preferred_product_id')
            if not product_id:
                continue
            medication_id = product_id.replace(PREFERRED_PRODUCT_SUFFIX, '')
            if medication_id in self._catalog and not self.is_selected(medication_id):
                self.toggle(medication_id)
                self._selections[medication_id].is_patient_preference = True
                preselected.append(medication_id)
                logger.info(
                    "Pre-selected %s based on patient preference",
                    self._catalog[medication_id].name,
                )
        return preselected

    # ── read accessors ─────────────────────────────────────────────────────

    def is_selected(self, medication_id: str) -> bool:
        return medication_id in self._selections

    def config_of(self, medication_id: str) -> MedicationSelection | None:
        selection = self._selections.get(medication_id)
        if selection is None:
            return None
        return replace(selection, instructions=list(selection.instructions))

    def formatted_selections(self) -> list[MedicationLineItem]:
        items = []
        for medication_id, selection in self._selections.items():
            entry = self._catalog[medication_id]
            items.append(MedicationLineItem(
                id=medication_id,
                name=entry.name,
                dosage=selection.dosage,
                frequency=selection.frequency,
                approach=selection.approach,
                instructions=tuple(selection.instructions or entry.instructions),
                category=entry.category,
            ))
        return items

    def medications_by_category(self) -> dict[MedicationCategory, list[dict]]:
        """Catalog grouped by category, each entry annotated with its live selection."""
        grouped: dict[MedicationCategory, list[dict]] = {}
        for category, entries in self._catalog.by_category().items():
            grouped[category] = [
                {'entry': entry, 'selection': self.config_of(entry.id)}
                for entry in entries
            ]
        return grouped


def _as_datetime(value) -> datetime:
    if not value:
        return datetime.min
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
