"""
Unit tests for the reference electrode catalog and survey parameters

Validates the ASTM C876 threshold CSV, caching, catalog lookups and the
parameter model built on top of them.
"""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from data.csv_loaders import ElectrodeReference, clear_caches, load_electrodes_from_csv
from data.electrode_catalog import DEFAULT_ELECTRODE, get_electrode, list_electrodes, supported_electrodes
from core.schemas import AttachedPhoto, InspectionInfo, SurveyParameters


class TestElectrodeCSVLoader:
    """Test astm_c876_electrodes.csv loader"""

    def test_load_returns_dict(self):
        electrodes = load_electrodes_from_csv()
        assert isinstance(electrodes, dict)
        assert len(electrodes) == 3

    def test_entries_are_dataclasses(self):
        for ref in load_electrodes_from_csv().values():
            assert isinstance(ref, ElectrodeReference)

    def test_thresholds_ordered(self):
        for ref in load_electrodes_from_csv().values():
            assert ref.severe_threshold_mV < ref.low_threshold_mV

    def test_caching(self):
        clear_caches()
        electrodes1 = load_electrodes_from_csv()
        electrodes2 = load_electrodes_from_csv()
        assert electrodes1 is electrodes2

    def test_cache_clear(self):
        electrodes1 = load_electrodes_from_csv()
        clear_caches()
        electrodes2 = load_electrodes_from_csv()
        assert electrodes1 is not electrodes2
        assert electrodes1 == electrodes2


class TestElectrodeCatalog:
    """Catalog lookups"""

    def test_default_is_cse(self):
        assert DEFAULT_ELECTRODE == "CSE"

    def test_catalog_order(self):
        assert supported_electrodes() == ["CSE", "SCE", "AgAgCl"]
        assert [e.name for e in list_electrodes()] == ["CSE", "SCE", "AgAgCl"]

    @pytest.mark.parametrize("name,severe,low", [
        ("CSE", -350.0, -200.0),
        ("SCE", -260.0, -110.0),
        ("AgAgCl", -305.0, -155.0),
    ])
    def test_threshold_pairs(self, name, severe, low):
        ref = get_electrode(name)
        assert ref.severe_threshold_mV == severe
        assert ref.low_threshold_mV == low

    def test_unknown_electrode(self):
        with pytest.raises(ValueError, match="Electrode 'XYZ' not supported"):
            get_electrode("XYZ")


class TestSurveyParameters:
    """Parameter defaults and validation"""

    def test_defaults(self):
        params = SurveyParameters()
        assert params.electrode == "CSE"
        assert params.cover_depth_mm == 30
        assert params.resistivity_kohm_cm is None
        assert params.severe_threshold_mV == -350.0
        assert params.low_threshold_mV == -200.0
        assert params.colorscale == "Jet"

    def test_inverted_thresholds_rejected(self):
        with pytest.raises(ValidationError, match="must be below"):
            SurveyParameters(severe_threshold_mV=-200, low_threshold_mV=-350)

    def test_equal_thresholds_rejected(self):
        with pytest.raises(ValidationError):
            SurveyParameters(severe_threshold_mV=-250, low_threshold_mV=-250)

    @pytest.mark.parametrize("field", ["severe_threshold_mV", "low_threshold_mV"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_threshold_rejected(self, field, value):
        with pytest.raises(ValidationError):
            SurveyParameters(**{field: value})

    def test_unknown_electrode_rejected(self):
        with pytest.raises(ValidationError, match="not supported"):
            SurveyParameters(electrode="Hg")

    def test_unknown_colorscale_rejected(self):
        with pytest.raises(ValidationError, match="Colorscale"):
            SurveyParameters(colorscale="Rainbow")

    def test_non_positive_cover_rejected(self):
        with pytest.raises(ValidationError):
            SurveyParameters(cover_depth_mm=0)

    def test_for_electrode_uses_catalog_thresholds(self):
        params = SurveyParameters.for_electrode("SCE", cover_depth_mm=50)
        assert params.electrode == "SCE"
        assert params.severe_threshold_mV == -260.0
        assert params.low_threshold_mV == -110.0
        assert params.cover_depth_mm == 50

    def test_with_electrode_resets_thresholds(self):
        params = SurveyParameters(severe_threshold_mV=-400, low_threshold_mV=-100, cover_depth_mm=45)
        switched = params.with_electrode("AgAgCl")

        assert switched.severe_threshold_mV == -305.0
        assert switched.low_threshold_mV == -155.0
        assert switched.cover_depth_mm == 45
        assert params.severe_threshold_mV == -400  # original unchanged

    def test_frozen(self):
        params = SurveyParameters()
        with pytest.raises(ValidationError):
            params.cover_depth_mm = 80


class TestInspectionMetadata:
    """Inspection info and photo attachments"""

    def test_inspection_all_optional(self):
        info = InspectionInfo()
        assert info.location is None

    def test_inspection_strips_whitespace(self):
        info = InspectionInfo(location="  Bridge P3  ")
        assert info.location == "Bridge P3"

    def test_photo_description_defaults_empty(self):
        photo = AttachedPhoto(id="p1", name="north face.jpg")
        assert photo.description == ""
