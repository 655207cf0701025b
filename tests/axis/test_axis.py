import copy
from dataclasses import FrozenInstanceError

import pytest

from seiscube.axis import (
    AXIS_ALIASES,
    Axis,
    Direction,
    KnownAxisNames,
    make_axis,
    resolve_dimension,
)
from seiscube.base._errors import AxisNotFoundError, BadRequestError, UnsupportedCubeError
from seiscube.layout import AxisDescriptor, MemoryLayout


class TestAxis:
    def test_stepsize(self):
        """Step size is the extent divided by the number of intervals."""
        axis = Axis(min=10, max=20, nsamples=6, name="Crossline", unit="unitless", dimension=1)
        assert axis.stepsize == 2.0

    def test_stepsize_single_sample(self):
        """A single-sample axis has no step; 0.0 is returned instead of dividing by zero."""
        axis = Axis(min=5, max=5, nsamples=1, name="Inline", unit="unitless", dimension=2)
        assert axis.stepsize == 0.0

    def test_is_immutable(self):
        axis = Axis(0, 10, 11, "Inline", "unitless", 0)
        with pytest.raises(FrozenInstanceError):
            axis.nsamples = 3

    def test_copy_is_equal(self):
        axis = Axis(0, 10, 11, "Inline", "unitless", 0)
        assert copy.copy(axis) == axis
        assert copy.deepcopy(axis) == axis

    def test_index_annotation_conversion(self):
        axis = Axis(100, 200, 51, "Depth", "m", 0)
        assert axis.index_to_annotation(0) == 100
        assert axis.index_to_annotation(50) == 200
        assert axis.annotation_to_index(150) == 25
        assert axis.annotation_to_index(axis.index_to_annotation(7)) == pytest.approx(7)

    def test_contains(self):
        axis = Axis(100, 200, 51, "Depth", "m", 0)
        assert axis.contains(100)
        assert axis.contains(200)
        assert not axis.contains(99.5)

    def test_to_dict(self):
        axis = Axis(4, 1000, 250, "Sample", "ms", 0)
        assert axis.to_dict() == {
            "annotation": "Sample",
            "min": 4,
            "max": 1000,
            "samples": 250,
            "stepsize": 4.0,
            "unit": "ms",
        }


class TestDirection:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("inline", Direction.INLINE),
            ("ILINE", Direction.INLINE),
            ("il", Direction.INLINE),
            ("crossline", Direction.CROSSLINE),
            ("Xline", Direction.CROSSLINE),
            ("sample", Direction.SAMPLE),
            ("Depth", Direction.SAMPLE),
            (" time ", Direction.SAMPLE),
        ],
    )
    def test_from_name(self, name, expected):
        assert Direction.from_name(name) is expected

    @pytest.mark.parametrize("name", ["i", "offset", "", None])
    def test_from_name_invalid(self, name):
        """Unknown direction names are the caller's mistake, not the cube's."""
        with pytest.raises(BadRequestError, match="Invalid direction"):
            Direction.from_name(name)

    def test_predicates(self):
        assert Direction.INLINE.is_iline()
        assert not Direction.INLINE.is_xline()
        assert Direction.CROSSLINE.is_xline()
        assert Direction.SAMPLE.is_sample()
        assert not Direction.SAMPLE.is_iline()

    def test_sample_aliases(self):
        assert AXIS_ALIASES[Direction.SAMPLE] == (
            KnownAxisNames.SAMPLE,
            KnownAxisNames.DEPTH,
            KnownAxisNames.TIME,
        )


@pytest.fixture
def time_layout() -> MemoryLayout:
    return MemoryLayout(
        [
            AxisDescriptor(0, 1000, 251, "Time", "ms"),
            AxisDescriptor(1, 20, 20, "Crossline", "unitless"),
            AxisDescriptor(1, 10, 10, "Inline", "unitless"),
        ]
    )


class TestResolveDimension:
    def test_found(self, time_layout):
        assert resolve_dimension(time_layout, ["Inline"]) == 2
        assert resolve_dimension(time_layout, ["Crossline"]) == 1

    def test_any_alias_matches(self, time_layout):
        assert resolve_dimension(time_layout, AXIS_ALIASES[Direction.SAMPLE]) == 0

    def test_first_matching_dimension_wins(self):
        layout = MemoryLayout(
            [
                AxisDescriptor(0, 1, 2, "Depth", "m"),
                AxisDescriptor(0, 1, 2, "Sample", "ms"),
            ]
        )
        assert resolve_dimension(layout, ["Sample", "Depth"]) == 0

    def test_not_found(self, time_layout):
        with pytest.raises(AxisNotFoundError, match="Offset, Azimuth") as error:
            resolve_dimension(time_layout, ["Offset", "Azimuth"])
        assert isinstance(error.value, UnsupportedCubeError)


def test_make_axis(time_layout):
    axis = make_axis(time_layout, 0)
    assert axis == Axis(0, 1000, 251, "Time", "ms", 0)
    assert axis.stepsize == 4.0
