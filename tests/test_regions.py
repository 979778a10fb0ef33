"""
Tests for the face region catalog
"""

import pytest

from face_picking.config import RegionConfig
from face_picking.errors import RegionCatalogError
from face_picking.landmarks import FACE_LANDMARK_COUNT
from face_picking.regions import DEFAULT_REGION_TABLE, RegionCatalog


class TestDefaultCatalog:
    def test_contains_all_regions_in_order(self):
        catalog = RegionCatalog()
        assert catalog.names == (
            "CHEEK_INNER",
            "NOSE",
            "MOUTH",
            "CHIN_CENTER",
            "FOREHEAD_CENTER",
            "NECK",
            "EAR_LEFT",
            "EAR_RIGHT",
        )
        assert len(catalog) == 8

    def test_thresholds(self):
        catalog = RegionCatalog()
        assert catalog.get("NOSE").threshold == 0.07
        assert catalog.get("FOREHEAD_CENTER").threshold == 0.1
        assert catalog.get("CHEEK_INNER").threshold == 0.08
        assert catalog.get("UNKNOWN") is None

    def test_duplicate_indices_collapse(self):
        # 176 appears twice in the neck contour
        neck = RegionCatalog().get("NECK")
        assert 176 in neck.indices
        assert len(neck.sorted_indices) == len(set(neck.sorted_indices))

    def test_max_index_within_topology(self):
        catalog = RegionCatalog()
        assert catalog.max_index == 454
        assert catalog.max_index < FACE_LANDMARK_COUNT

    def test_regions_are_immutable(self):
        region = RegionCatalog().regions()[0]
        with pytest.raises(AttributeError):
            region.threshold = 1.0
        assert isinstance(region.indices, frozenset)


class TestCatalogValidation:
    @pytest.mark.parametrize("threshold", [0, -0.01])
    def test_rejects_non_positive_threshold(self, threshold):
        with pytest.raises(RegionCatalogError, match="threshold"):
            RegionCatalog([("NOSE", [4], threshold)])

    def test_rejects_empty_indices(self):
        with pytest.raises(RegionCatalogError, match="no landmark indices"):
            RegionCatalog([("NOSE", [], 0.07)])

    @pytest.mark.parametrize("index", [-1, FACE_LANDMARK_COUNT, 10000])
    def test_rejects_out_of_range_index(self, index):
        with pytest.raises(RegionCatalogError, match="outside"):
            RegionCatalog([("NOSE", [4, index], 0.07)])

    def test_respects_custom_topology_size(self):
        with pytest.raises(RegionCatalogError):
            RegionCatalog([("NOSE", [4, 6], 0.07)], face_landmark_count=5)
        assert RegionCatalog([("NOSE", [4, 6], 0.07)], face_landmark_count=7).max_index == 6

    def test_rejects_duplicate_names(self):
        with pytest.raises(RegionCatalogError, match="more than once"):
            RegionCatalog([("NOSE", [4], 0.07), ("NOSE", [6], 0.07)])

    def test_rejects_empty_table(self):
        with pytest.raises(RegionCatalogError):
            RegionCatalog([])

    def test_catalog_error_is_value_error(self):
        with pytest.raises(ValueError):
            RegionCatalog([("NOSE", [4], 0)])


def test_from_config_matches_default_table():
    configs = [RegionConfig(name=n, indices=list(i), threshold=t) for n, i, t in DEFAULT_REGION_TABLE]
    catalog = RegionCatalog.from_config(configs)
    assert catalog.regions() == RegionCatalog().regions()


def test_from_config_validates():
    with pytest.raises(RegionCatalogError):
        RegionCatalog.from_config([RegionConfig(name="NOSE", indices=[4], threshold=0.0)])
