"""Axis descriptions and axis-role resolution.

An :class:`Axis` describes one dimension of a cube's regular sample grid. The
three roles a cube must expose (inline, crossline and sample) are found by
name, because the same role is labelled differently across datasets (a sample
axis may be called ``Sample``, ``Depth`` or ``Time``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Sequence, Tuple, Union

import seiscube
from seiscube.base._errors import AxisNotFoundError, BadRequestError

if TYPE_CHECKING:  # pragma: no cover
    from seiscube.layout import AbstractLayout

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class Axis:
    """Immutable description of one grid dimension.

    Args:
        min (float):
            Annotation value of the first sample.
        max (float):
            Annotation value of the last sample.
        nsamples (int):
            Number of samples along the axis.
        name (str):
            Dimension name as stored in the cube (e.g. "Inline", "Depth").
        unit (str):
            Unit of the annotation values (e.g. "unitless", "m", "ms").
        dimension (int):
            Index of the dimension in the cube's layout.

    Examples:
        - Step size is derived from the extent and the sample count
            ```python
            >>> from seiscube.axis import Axis
            >>> axis = Axis(min=1.0, max=5.0, nsamples=3, name="Inline", unit="unitless", dimension=2)
            >>> axis.stepsize
            2.0
            >>> axis.index_to_annotation(1)
            3.0

            ```
    """

    min: float
    max: float
    nsamples: int
    name: str
    unit: str
    dimension: int

    @property
    def stepsize(self) -> float:
        """Distance between two consecutive samples, 0.0 for single-sample axes."""
        if self.nsamples > 1:
            return (self.max - self.min) / (self.nsamples - 1)
        return 0.0

    def index_to_annotation(self, index: Number) -> float:
        """Annotation value (line number, depth, ...) at the given sample index."""
        return self.min + index * self.stepsize

    def annotation_to_index(self, value: Number) -> float:
        """Fractional sample index of an annotation value."""
        if self.stepsize == 0.0:
            return 0.0
        return (value - self.min) / self.stepsize

    def contains(self, value: Number) -> bool:
        """Check whether an annotation value lies within [min, max]."""
        return self.min <= value <= self.max

    def to_dict(self) -> Dict[str, Union[str, Number]]:
        """Render the axis the way it appears in a metadata document."""
        return {
            "annotation": self.name,
            "min": self.min,
            "max": self.max,
            "samples": self.nsamples,
            "stepsize": self.stepsize,
            "unit": self.unit,
        }


class Direction(Enum):
    """Axis role used to select an axis without referring to dimension indices.

    ``SAMPLE`` covers depth- and time-labelled axes alike.

    Examples:
        ```python
        >>> from seiscube.axis import Direction
        >>> Direction.from_name("Depth")
        <Direction.SAMPLE: 'sample'>
        >>> Direction.from_name("xline").is_xline()
        True

        ```
    """

    INLINE = "inline"
    CROSSLINE = "crossline"
    SAMPLE = "sample"

    @classmethod
    def from_name(cls, name: str) -> "Direction":
        """Parse a direction from a user supplied name (case-insensitive).

        Raises:
            BadRequestError: If the name is not a known direction.
        """
        try:
            return _DIRECTION_NAMES[name.strip().lower()]
        except (KeyError, AttributeError):
            raise BadRequestError(
                f"Invalid direction '{name}', valid options are: "
                + ", ".join(sorted(_DIRECTION_NAMES))
            ) from None

    def is_iline(self) -> bool:
        return self is Direction.INLINE

    def is_xline(self) -> bool:
        return self is Direction.CROSSLINE

    def is_sample(self) -> bool:
        return self is Direction.SAMPLE


_DIRECTION_NAMES = {
    "inline": Direction.INLINE,
    "iline": Direction.INLINE,
    "il": Direction.INLINE,
    "crossline": Direction.CROSSLINE,
    "xline": Direction.CROSSLINE,
    "xl": Direction.CROSSLINE,
    "sample": Direction.SAMPLE,
    "depth": Direction.SAMPLE,
    "time": Direction.SAMPLE,
}


class KnownAxisNames:
    """Dimension names written by seismic importers."""

    INLINE = "Inline"
    CROSSLINE = "Crossline"
    SAMPLE = "Sample"
    DEPTH = "Depth"
    TIME = "Time"


AXIS_ALIASES: Dict[Direction, tuple] = {
    Direction.INLINE: (KnownAxisNames.INLINE,),
    Direction.CROSSLINE: (KnownAxisNames.CROSSLINE,),
    Direction.SAMPLE: (KnownAxisNames.SAMPLE, KnownAxisNames.DEPTH, KnownAxisNames.TIME),
}


def direction_aliases(direction: Direction) -> Tuple[str, ...]:
    """Accepted dimension names of an axis role.

    The names listed under `cube.axes` in the package config take precedence;
    roles the config does not list fall back to :data:`AXIS_ALIASES`.
    """
    names = seiscube.config.axis_aliases().get(direction.value)
    return tuple(names) if names else AXIS_ALIASES[direction]


def resolve_dimension(layout: "AbstractLayout", names: Sequence[str]) -> int:
    """Find the dimension whose name is one of ``names``.

    Args:
        layout (AbstractLayout):
            Layout provider to scan, dimensions 0 .. dimensionality - 1.
        names (Sequence[str]):
            Accepted names for the axis role.

    Returns:
        int: Index of the first dimension carrying one of the names.

    Raises:
        AxisNotFoundError: If no dimension matches.
    """
    for dimension in range(layout.dimensionality()):
        if layout.dimension_name(dimension) in names:
            return dimension

    raise AxisNotFoundError(
        f"Requested axis not found under names {', '.join(names)} in cube"
    )


def make_axis(layout: "AbstractLayout", dimension: int) -> Axis:
    """Build the :class:`Axis` of a dimension from the layout's axis descriptor."""
    descriptor = layout.axis_descriptor(dimension)
    return Axis(
        min=descriptor.min,
        max=descriptor.max,
        nsamples=descriptor.nsamples,
        name=descriptor.name,
        unit=descriptor.unit,
        dimension=dimension,
    )
