import numpy as np
import pytest
from osgeo import osr

from seiscube.base._errors import AxisNotFoundError, BadRequestError
from seiscube.layout import (
    AxisDescriptor,
    DoubleLayout,
    KnownMetadata,
    SURVEY_TOLERANCE,
    MemoryLayout,
    _same_crs,
)


class TestMemoryLayout:
    def test_structure(self, layout_a):
        assert layout_a.dimensionality() == 3
        assert [layout_a.dimension_name(i) for i in range(3)] == [
            "Sample",
            "Crossline",
            "Inline",
        ]
        assert layout_a.axis_descriptor(2) == AxisDescriptor(0, 100, 101, "Inline", "unitless")

    def test_metadata_string(self, layout_a):
        assert layout_a.metadata_string(*KnownMetadata.INPUT_FILE_NAME) == "a.vds"

    def test_missing_metadata_string_is_empty(self):
        """Absent provenance is not an error."""
        layout = MemoryLayout([AxisDescriptor(0, 1, 2, "Inline")])
        assert layout.metadata_string(*KnownMetadata.CRS_WKT) == ""
        assert layout.metadata_string("Unknown", "Key") == ""

    def test_metadata_vector(self, layout_a):
        assert layout_a.metadata_vector(*KnownMetadata.ORIGIN) == (2.0, 0.0)
        assert layout_a.metadata_vector(*KnownMetadata.INPUT_FILE_NAME) is None
        assert layout_a.metadata_vector("Unknown", "Key") is None

    def test_survey_coordinate_system_defaults(self):
        layout = MemoryLayout(
            [AxisDescriptor(0, 1, 2, "Inline")],
            {KnownMetadata.ORIGIN: (10, 20)},
        )
        assert layout.survey_coordinate_system() == (
            (10.0, 20.0),
            (1.0, 0.0),
            (0.0, 1.0),
        )

    def test_ijk_transform(self, layout_a):
        ijk = layout_a.ijk_transform()
        # inline 0 + 4, crossline 1 + 3, sample 0 + 2 * 5
        world = ijk.index_to_world((4, 3, 5))
        np.testing.assert_allclose(world, [2 + 3 * 4, 2 * 4, 10])

    def test_ijk_transform_requires_named_axes(self):
        layout = MemoryLayout(
            [AxisDescriptor(0, 1, 2, "Inline"), AxisDescriptor(0, 1, 2, "Crossline")]
        )
        with pytest.raises(AxisNotFoundError):
            layout.ijk_transform()


class TestSameCrs:
    def test_identical_strings(self):
        assert _same_crs("", "")
        assert _same_crs("utmXX", "utmXX")

    def test_one_missing(self):
        assert not _same_crs("EPSG:4326", "")

    def test_unparsable_strings_differ(self):
        assert not _same_crs("utmXX", "utmYY")

    def test_equivalent_definitions(self):
        sr = osr.SpatialReference()
        sr.ImportFromEPSG(4326)
        assert _same_crs("EPSG:4326", sr.ExportToWkt())

    def test_different_definitions(self):
        assert not _same_crs("EPSG:4326", "EPSG:23031")


class TestDoubleLayout:
    def test_view(self, layout_a, layout_b):
        layout = DoubleLayout(layout_a, layout_b)
        assert layout.dimensionality() == 3
        assert layout.dimension_name(0) == "Sample"
        assert layout.layout_a is layout_a
        assert layout.layout_b is layout_b

    def test_dimensionality_mismatch(self, layout_a):
        flat = MemoryLayout(
            [AxisDescriptor(0, 1, 2, "Crossline"), AxisDescriptor(0, 1, 2, "Inline")]
        )
        with pytest.raises(BadRequestError, match="Different number of dimensions"):
            DoubleLayout(layout_a, flat)

    def test_crs_mismatch(self, layout_factory):
        with pytest.raises(BadRequestError, match="CRS"):
            DoubleLayout(layout_factory(crs="utmXX"), layout_factory(crs="utmYY"))

    def test_missing_crs_on_one_side(self, layout_factory):
        with pytest.raises(BadRequestError, match="CRS"):
            DoubleLayout(layout_factory(), layout_factory(crs=None))

    @pytest.mark.parametrize(
        "kwargs,name",
        [
            ({"origin": (2.0, 1.0)}, "origin"),
            ({"inline_spacing": (3.0, 0.5)}, "inline spacing"),
            ({"crossline_spacing": (0.0, 4.0)}, "crossline spacing"),
        ],
    )
    def test_survey_mismatch(self, layout_factory, kwargs, name):
        with pytest.raises(BadRequestError, match=name):
            DoubleLayout(layout_factory(), layout_factory(**kwargs))

    def test_projected_origins_metres_apart(self, layout_factory):
        """Origins a few metres apart at UTM northings are different surveys."""
        layout_a = layout_factory(origin=(431000.0, 6348000.0))
        layout_b = layout_factory(origin=(431000.0, 6348005.0))
        with pytest.raises(BadRequestError, match="origin"):
            DoubleLayout(layout_a, layout_b)

    def test_projected_origins_within_tolerance(self, layout_factory):
        layout_a = layout_factory(origin=(431000.0, 6348000.0))
        layout_b = layout_factory(origin=(431000.0, 6348000.0 + SURVEY_TOLERANCE / 10))
        assert DoubleLayout(layout_a, layout_b).dimensionality() == 3
