"""
Unit tests for the medication catalog.

Covers:
1. build_catalog() defaults and overrides (entries and dicts)
2. immutability: overrides / custom entries never leak into DEFAULT_CATALOG
3. custom_entry() id derivation and defaults
4. by_category() grouping
"""
import pytest

from consultations.exceptions import ValidationError
from consultations.medications.catalog import DEFAULT_CATALOG, build_catalog, custom_entry
from consultations.medications.selection import MedicationSelectionEngine
from consultations.medications.types import DosageOption, MedicationCatalogEntry, MedicationCategory


class TestBuildCatalog:

    def test_defaults_present(self):
        catalog = build_catalog()
        assert list(catalog) == ['semaglutide', 'metformin', 'sildenafil']
        assert catalog['sildenafil'].brand_name == 'Viagra'

    def test_dict_override_with_camel_case_keys(self):
        catalog = build_catalog({
            'bupropion': {
                'name': 'Bupropion',
                'category': 'mh',
                'frequency': 'daily',
                'dosageOptions': [{'value': '150mg', 'label': '150'}],
                'supportedApproaches': ['Maint.'],
                'instructions': '• Take in the morning.\n• Avoid alcohol.',
            },
        })

        entry = catalog['bupropion']
        assert entry.category is MedicationCategory.MENTAL_HEALTH
        assert entry.dosage_options == (DosageOption('150mg', '150'),)
        assert entry.instructions == ('• Take in the morning.', '• Avoid alcohol.')
        assert len(catalog) == 4

    def test_single_approach_string_kept_whole(self):
        catalog = build_catalog({'bupropion': {'name': 'Bupropion', 'supportedApproaches': 'Maint.'}})
        assert catalog['bupropion'].supported_approaches == ('Maint.',)

        engine = MedicationSelectionEngine(catalog)
        engine.toggle('bupropion')
        engine.set_approach('bupropion', 'Maint.')
        assert engine.config_of('bupropion').approach == 'Maint.'

    def test_override_replaces_default_by_id(self):
        replacement = MedicationCatalogEntry(
            id='metformin',
            name='Metformin XR',
            category=MedicationCategory.PRIMARY_CARE,
            frequency='daily',
        )
        catalog = build_catalog({'metformin': replacement})
        assert catalog['metformin'].name == 'Metformin XR'
        assert DEFAULT_CATALOG['metformin'].name == 'Metformin'

    def test_catalog_is_read_only(self):
        catalog = build_catalog()
        with pytest.raises(TypeError):
            catalog['foo'] = catalog['metformin']

    def test_with_entry_returns_new_catalog(self):
        catalog = build_catalog()
        extended = catalog.with_entry(custom_entry({'name': 'Foo'}))
        assert 'foo' in extended
        assert 'foo' not in catalog
        assert 'foo' not in build_catalog()

    def test_override_without_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_catalog({'mystery': {'frequency': 'daily'}})
        assert exc_info.value.code == 'MEDICATION_NAME_REQUIRED'

    def test_by_category_groups_in_catalog_order(self):
        grouped = build_catalog().by_category()
        assert [e.id for e in grouped[MedicationCategory.WEIGHT_MANAGEMENT]] == ['semaglutide', 'metformin']
        assert [e.id for e in grouped[MedicationCategory.ED]] == ['sildenafil']


class TestCustomEntry:

    def test_id_is_slugified_name(self):
        entry = custom_entry({'name': 'Vitamin  D3 Plus'})
        assert entry.id == 'vitamin_d3_plus'

    def test_explicit_id_wins(self):
        entry = custom_entry({'id': 'vit-d', 'name': 'Vitamin D'})
        assert entry.id == 'vit-d'

    def test_approach_defaults(self):
        entry = custom_entry({'name': 'Foo'})
        assert entry.supported_approaches == ('Maint.',)
        assert entry.default_approach == 'Maint.'
        assert entry.category is MedicationCategory.OTHER

    def test_dosage_falls_back_to_first_option_then_10mg(self):
        with_options = custom_entry({'name': 'Foo', 'dosage_options': [{'value': '5mg', 'label': '5'}]})
        without_options = custom_entry({'name': 'Bar'})
        assert with_options.default_dosage == '5mg'
        assert without_options.default_dosage == '10mg'

    def test_supplied_approaches_kept(self):
        entry = custom_entry({'name': 'Foo', 'supportedApproaches': ['PRN'], 'defaultApproach': 'PRN'})
        assert entry.supported_approaches == ('PRN',)
        assert entry.default_approach == 'PRN'

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            custom_entry({'frequency': 'daily'})
