"""Metadata handles over one cube or over the intersection of two cubes.

A :class:`SingleMetadataHandle` wraps the layout provider of one cube and
resolves its inline, crossline and sample axes. A
:class:`DoubleMetadataHandle` pairs two single handles, reconciles their
axes into the shared intersection grid and translates intersection-grid
indices into the index space of each cube.

Both handles validate everything in their constructor and are read-only
afterwards, so they can be shared between threads without locking.

Examples:
    ```python
    >>> from seiscube.layout import AxisDescriptor, KnownMetadata, MemoryLayout
    >>> from seiscube.metadata import BinaryOperator, DoubleMetadataHandle, SingleMetadataHandle
    >>> def cube(first_inline, filename):
    ...     return MemoryLayout(
    ...         [
    ...             AxisDescriptor(0, 20, 11, "Sample", "ms"),
    ...             AxisDescriptor(1, 10, 10, "Crossline", "unitless"),
    ...             AxisDescriptor(first_inline, first_inline + 100, 101, "Inline", "unitless"),
    ...         ],
    ...         {KnownMetadata.INPUT_FILE_NAME: filename},
    ...     )
    >>> layout_a, layout_b = cube(0, "a.vds"), cube(50, "b.vds")
    >>> a, b = SingleMetadataHandle(layout_a), SingleMetadataHandle(layout_b)
    >>> both = DoubleMetadataHandle(layout_a, layout_b, a, b, BinaryOperator.ADD)
    >>> both.iline().min, both.iline().max, both.iline().nsamples
    (50, 100, 51)
    >>> both.input_filename()
    'a.vds + b.vds'
    >>> both.offset_samples_to_match_cube_a([(0, 0, 0)]).tolist()
    [[0.0, 0.0, 50.0]]

    ```
"""

from __future__ import annotations

import json
import logging
import math
import numbers
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Tuple, Union

import numpy as np

import seiscube
from seiscube.axis import Axis, Direction, direction_aliases, make_axis, resolve_dimension
from seiscube.base._errors import (
    BadRequestError,
    UnhandledAxisError,
    UnsupportedCubeError,
)
from seiscube.bounding_box import BoundingBox
from seiscube.layout import AbstractLayout, DoubleLayout, KnownMetadata
from seiscube.transformer import (
    CoordinateTransformer,
    DoubleCoordinateTransformer,
    SingleCoordinateTransformer,
)

logger = logging.getLogger(__name__)

# Relative tolerance when comparing the step sizes of two cubes, used when
# the package config does not set `cube.stepsize_tolerance`.
STEPSIZE_TOLERANCE = 1e-9
# Absolute floor of the step-size comparison, for step sizes close to zero.
STEPSIZE_ABS_TOLERANCE = 1e-12
# Largest distance (in samples) between the intersection origin and a grid
# point of a source cube for the two grids to count as aligned.
GRID_ALIGNMENT_TOLERANCE = 1e-6
SUPPORTED_DIMENSIONALITY = 3
UNKNOWN_OPERATOR_SYMBOL = "XX"


class BinaryOperator(Enum):
    """How two cubes are combined; only rendered, never evaluated here."""

    NONE = "none"
    ADD = "addition"
    SUBTRACT = "subtraction"
    MULTIPLY = "multiplication"
    DIVIDE = "division"

    @property
    def symbol(self) -> str:
        return _OPERATOR_SYMBOLS[self]

    @classmethod
    def from_name(cls, name: str) -> "BinaryOperator":
        """Parse an operator from its name ("addition") or its symbol ("+").

        Raises:
            BadRequestError: If the name is not a known operator.
        """
        key = str(name).strip().lower()
        for operator in cls:
            if key in (operator.value, operator.symbol):
                return operator
        raise BadRequestError(f"Invalid binary operator '{name}'")


_OPERATOR_SYMBOLS = {
    BinaryOperator.NONE: "?",
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
}

_AXIS_LABELS = {
    Direction.INLINE: "inLines",
    Direction.CROSSLINE: "crossLines",
    Direction.SAMPLE: "samples",
}


class MetadataHandle(ABC):
    """Capability shared by the single- and double-cube handles."""

    @abstractmethod
    def iline(self) -> Axis:
        pass

    @abstractmethod
    def xline(self) -> Axis:
        pass

    @abstractmethod
    def sample(self) -> Axis:
        pass

    @abstractmethod
    def crs(self) -> str:
        pass

    @abstractmethod
    def input_filename(self) -> str:
        pass

    @abstractmethod
    def import_time_stamp(self) -> str:
        pass

    @abstractmethod
    def coordinate_transformer(self) -> CoordinateTransformer:
        pass

    def get_axis(self, direction: Union[Direction, str]) -> Axis:
        """Axis of a role, given as a :class:`Direction` or a direction name.

        Raises:
            BadRequestError: If a direction name is not recognized.
            UnhandledAxisError: If the direction matches none of the axes.
        """
        if isinstance(direction, str):
            direction = Direction.from_name(direction)

        if direction is Direction.INLINE:
            return self.iline()
        elif direction is Direction.CROSSLINE:
            return self.xline()
        elif direction is Direction.SAMPLE:
            return self.sample()

        raise UnhandledAxisError(f"Unhandled axis {direction!r}")

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(
            self.iline().nsamples,
            self.xline().nsamples,
            self.coordinate_transformer(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Metadata document of the cube: axes, bounding box and provenance."""
        return {
            "axis": [axis.to_dict() for axis in (self.iline(), self.xline(), self.sample())],
            "boundingBox": self.bounding_box().to_dict(),
            "crs": self.crs(),
            "inputFileName": self.input_filename(),
            "importTimeStamp": self.import_time_stamp(),
        }

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def _validate_samples(self, message: str) -> None:
        for direction in (Direction.INLINE, Direction.CROSSLINE, Direction.SAMPLE):
            nsamples = self.get_axis(direction).nsamples
            if nsamples < 2:
                raise UnsupportedCubeError(
                    f"{message} {_AXIS_LABELS[direction]}, got {nsamples}"
                )


def _dimension_validation(dimensionality: int, subject: str) -> None:
    if dimensionality != SUPPORTED_DIMENSIONALITY:
        raise UnsupportedCubeError(
            f"Unsupported {subject}, expected {SUPPORTED_DIMENSIONALITY} "
            f"dimensions, got {dimensionality}"
        )


class SingleMetadataHandle(MetadataHandle):
    """Metadata of one cube.

    The layout provider is borrowed: the caller keeps it alive for as long as
    the handle is used.

    Args:
        layout (AbstractLayout):
            Layout provider of the cube.

    Raises:
        AxisNotFoundError: If the inline, crossline or sample axis cannot be
            found by name.
        UnsupportedCubeError: If the cube is not 3-dimensional or one of its
            axes holds fewer than two samples.
    """

    def __init__(self, layout: AbstractLayout):
        self._layout = layout
        self._iline = self._make_axis(Direction.INLINE)
        self._xline = self._make_axis(Direction.CROSSLINE)
        self._sample = self._make_axis(Direction.SAMPLE)
        self._coordinate_transformer = SingleCoordinateTransformer(layout.ijk_transform())

        _dimension_validation(layout.dimensionality(), "cube")
        self._validate_samples("Unsupported cube, expect at least two")

        logger.debug(
            "Resolved axes: "
            + ", ".join(f"{a.name}[{a.min}, {a.max}]x{a.nsamples}" for a in self._axes())
        )

    def _make_axis(self, direction: Direction) -> Axis:
        dimension = resolve_dimension(self._layout, direction_aliases(direction))
        return make_axis(self._layout, dimension)

    def _axes(self) -> Tuple[Axis, Axis, Axis]:
        return self._iline, self._xline, self._sample

    def layout(self) -> AbstractLayout:
        return self._layout

    def iline(self) -> Axis:
        return self._iline

    def xline(self) -> Axis:
        return self._xline

    def sample(self) -> Axis:
        return self._sample

    def get_axis(self, direction: Union[Direction, str, int]) -> Axis:
        """Axis of a role, or the axis stored at a dimension index when given an int.

        Raises:
            UnhandledAxisError: If no axis matches.
        """
        if isinstance(direction, numbers.Integral) and not isinstance(direction, bool):
            for axis in self._axes():
                if axis.dimension == direction:
                    return axis
            raise UnhandledAxisError(f"Unhandled dimension {direction}")
        return super().get_axis(direction)

    def crs(self) -> str:
        return self._layout.metadata_string(*KnownMetadata.CRS_WKT)

    def input_filename(self) -> str:
        return self._layout.metadata_string(*KnownMetadata.INPUT_FILE_NAME)

    def import_time_stamp(self) -> str:
        return self._layout.metadata_string(*KnownMetadata.IMPORT_TIME_STAMP)

    def coordinate_transformer(self) -> SingleCoordinateTransformer:
        return self._coordinate_transformer


def stepsize_tolerance() -> float:
    """Relative step-size tolerance of the package config, :data:`STEPSIZE_TOLERANCE` if unset."""
    return seiscube.config.stepsize_tolerance(default=STEPSIZE_TOLERANCE)


def stepsizes_match(stepsize_a: float, stepsize_b: float) -> bool:
    """Compare two step sizes within the configured relative tolerance."""
    return math.isclose(
        stepsize_a,
        stepsize_b,
        rel_tol=stepsize_tolerance(),
        abs_tol=STEPSIZE_ABS_TOLERANCE,
    )


def _sample_divisor(axis: Axis) -> int:
    """Integer step used for counting intersection samples.

    The step size is truncated to an integer. Floating noise just below an
    integer (e.g. 3.9999999999) is snapped to that integer first.
    """
    stepsize = axis.stepsize
    nearest = round(stepsize)
    if stepsizes_match(stepsize, nearest):
        stepsize = nearest
    divisor = int(stepsize)
    if divisor == 0:
        raise UnsupportedCubeError(
            f"Unsupported stepsize {stepsize} in axis {axis.name}, intersecting "
            "two cubes requires a stepsize of at least 1"
        )
    return divisor


def reconcile_axis(axis_a: Axis, axis_b: Axis, dimension: int) -> Axis:
    """Intersect the same axis of two cubes.

    Args:
        axis_a (Axis):
            Axis of cube A.
        axis_b (Axis):
            Axis of cube B at the same dimension index.
        dimension (int):
            Dimension index of the resulting axis.

    Returns:
        Axis: Axis spanning the overlap of both axes, with the name and unit
        of the inputs. Its sample count may be below 2 (or negative) when the
        axes barely or do not overlap; callers reject such axes.

    Raises:
        BadRequestError: If the names, the units or the step sizes differ.
        UnsupportedCubeError: If the step size truncates to zero.

    Examples:
        ```python
        >>> from seiscube.axis import Axis
        >>> from seiscube.metadata import reconcile_axis
        >>> a = Axis(0, 100, 101, "Inline", "unitless", 2)
        >>> b = Axis(50, 150, 101, "Inline", "unitless", 2)
        >>> reconcile_axis(a, b, 2)
        Axis(min=50, max=100, nsamples=51, name='Inline', unit='unitless', dimension=2)

        ```
    """
    if axis_a.name != axis_b.name:
        raise BadRequestError(
            f"Dimension name mismatch for dimension {dimension}: "
            f"{axis_a.name} versus {axis_b.name}"
        )

    if axis_a.unit != axis_b.unit:
        raise BadRequestError(
            f"Dimension unit mismatch for axis {axis_a.name}: "
            f"{axis_a.unit} versus {axis_b.unit}"
        )

    if not stepsizes_match(axis_a.stepsize, axis_b.stepsize):
        raise BadRequestError(
            f"Stepsize mismatch in axis {axis_a.name}: "
            f"{axis_a.stepsize:.2f} versus {axis_b.stepsize:.2f}"
        )

    low = max(axis_a.min, axis_b.min)
    high = min(axis_a.max, axis_b.max)
    nsamples = 1 + math.floor((high - low) / _sample_divisor(axis_a))

    return Axis(low, high, nsamples, axis_a.name, axis_a.unit, dimension)


class DoubleMetadataHandle(MetadataHandle):
    """Metadata of the intersection of two cubes combined by a binary operator.

    The layouts and the single handles are borrowed: the caller keeps them
    alive for as long as this handle is used.

    Args:
        layout_a (AbstractLayout):
            Layout provider of cube A.
        layout_b (AbstractLayout):
            Layout provider of cube B.
        metadata_a (SingleMetadataHandle):
            Validated handle of cube A.
        metadata_b (SingleMetadataHandle):
            Validated handle of cube B.
        binary_operator (BinaryOperator):
            How the cubes are meant to be combined.

    Raises:
        BadRequestError: If the cubes are not comparable (dimension names,
            units, step sizes, CRS, survey coordinate system or grid
            alignment differ).
        UnsupportedCubeError: If the combined layout is not 3-dimensional or
            the intersection holds fewer than two samples along an axis.
    """

    def __init__(
        self,
        layout_a: AbstractLayout,
        layout_b: AbstractLayout,
        metadata_a: SingleMetadataHandle,
        metadata_b: SingleMetadataHandle,
        binary_operator: BinaryOperator,
    ):
        self._layout = DoubleLayout(layout_a, layout_b)
        self._metadata_a = metadata_a
        self._metadata_b = metadata_b
        self._binary_operator = binary_operator

        self._iline = self._make_axis(Direction.INLINE)
        self._xline = self._make_axis(Direction.CROSSLINE)
        self._sample = self._make_axis(Direction.SAMPLE)

        _dimension_validation(self._layout.dimensionality(), "cube pair")
        self._validate_samples(
            "Unsupported cube pair, expect that the intersection contains at least two"
        )

        self._offset_a = self._index_offsets(metadata_a, "A")
        self._offset_b = self._index_offsets(metadata_b, "B")

        self._coordinate_transformer = DoubleCoordinateTransformer(
            metadata_a.coordinate_transformer(),
            metadata_b.coordinate_transformer(),
            self._ijk_order(self._offset_a),
            self._ijk_order(self._offset_b),
        )

        logger.debug(
            f"Intersection grid ({self._operator_string().strip()}): "
            + ", ".join(
                f"{a.name}[{a.min}, {a.max}]x{a.nsamples}"
                for a in (self._iline, self._xline, self._sample)
            )
            + f"; offsets A {self._offset_a.tolist()}, B {self._offset_b.tolist()}"
        )

    def _make_axis(self, direction: Direction) -> Axis:
        dimension = resolve_dimension(self._layout, direction_aliases(direction))
        return reconcile_axis(
            self._metadata_a.get_axis(dimension),
            self._metadata_b.get_axis(dimension),
            dimension,
        )

    def _index_offsets(self, metadata: SingleMetadataHandle, cube: str) -> np.ndarray:
        """Intersection origin in the index space of a source cube, per dimension."""
        offsets = []
        for dimension in range(self._layout.dimensionality()):
            intersection = self._axis_at(dimension)
            source = metadata.get_axis(dimension)
            offset = (intersection.min - source.min) / source.stepsize
            if abs(offset - round(offset)) > GRID_ALIGNMENT_TOLERANCE:
                raise BadRequestError(
                    f"Grid of cube {cube} is not aligned with the intersection in "
                    f"axis {source.name}: origin {intersection.min} falls between "
                    f"samples of {source.min} + n * {source.stepsize}"
                )
            offsets.append(float(round(offset)))
        return np.array(offsets, dtype=float)

    def _axis_at(self, dimension: int) -> Axis:
        for axis in (self._iline, self._xline, self._sample):
            if axis.dimension == dimension:
                return axis
        raise UnhandledAxisError(f"Unhandled dimension {dimension}")

    def _ijk_order(self, offsets: np.ndarray) -> np.ndarray:
        return offsets[[self._iline.dimension, self._xline.dimension, self._sample.dimension]]

    @property
    def metadata_a(self) -> SingleMetadataHandle:
        return self._metadata_a

    @property
    def metadata_b(self) -> SingleMetadataHandle:
        return self._metadata_b

    @property
    def binary_operator(self) -> BinaryOperator:
        return self._binary_operator

    def iline(self) -> Axis:
        return self._iline

    def xline(self) -> Axis:
        return self._xline

    def sample(self) -> Axis:
        return self._sample

    def crs(self) -> str:
        # DoubleLayout guarantees that the CRS of A and B are the same.
        return self._metadata_a.crs()

    def input_filename(self) -> str:
        return (
            self._metadata_a.input_filename()
            + self._operator_string()
            + self._metadata_b.input_filename()
        )

    def import_time_stamp(self) -> str:
        return (
            self._metadata_a.import_time_stamp()
            + self._operator_string()
            + self._metadata_b.import_time_stamp()
        )

    def coordinate_transformer(self) -> DoubleCoordinateTransformer:
        return self._coordinate_transformer

    def _operator_string(self) -> str:
        symbol = _OPERATOR_SYMBOLS.get(self._binary_operator, UNKNOWN_OPERATOR_SYMBOL)
        return f" {symbol} "

    def index_offsets(self) -> Tuple[np.ndarray, np.ndarray]:
        """Per-dimension offsets from the intersection grid to cube A and cube B."""
        return self._offset_a.copy(), self._offset_b.copy()

    def _offset_samples(self, samples, offset: np.ndarray) -> np.ndarray:
        dimensionality = self._layout.dimensionality()
        samples = np.asarray(samples, dtype=float)
        if samples.size == 0:
            return np.empty((0, dimensionality), dtype=float)
        if samples.shape[-1] != dimensionality:
            raise ValueError(
                f"Expected index tuples of {dimensionality} values, "
                f"got shape {samples.shape}"
            )
        return samples + offset

    def offset_samples_to_match_cube_a(self, samples) -> np.ndarray:
        """Translate intersection-grid indices into cube A's index space.

        Args:
            samples (array-like):
                One index tuple, or a batch of shape (n, dimensionality), in
                the dimension order of the layouts.

        Returns:
            np.ndarray: Indices of the same shape, shifted by A's offsets.
        """
        return self._offset_samples(samples, self._offset_a)

    def offset_samples_to_match_cube_b(self, samples) -> np.ndarray:
        """Translate intersection-grid indices into cube B's index space."""
        return self._offset_samples(samples, self._offset_b)
