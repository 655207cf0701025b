"""Index <-> annotation <-> world coordinate transformers.

Three coordinate systems describe a location in a cube:

- index (``ij``): sample indices along inline, crossline and sample axes,
- annotation (``ilxl``): inline number, crossline number and depth/time,
- world (``cdp``): projected x, y of the survey plus depth/time.

All methods accept a single ``(i, j, k)`` triple or any array of shape
``(..., 3)`` and return numpy arrays of the same shape.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

import numpy as np

from seiscube.axis import Axis
from seiscube.base._errors import UnsupportedCubeError

Vector2 = Tuple[float, float]

DEFAULT_ORIGIN: Vector2 = (0.0, 0.0)
DEFAULT_INLINE_SPACING: Vector2 = (1.0, 0.0)
DEFAULT_CROSSLINE_SPACING: Vector2 = (0.0, 1.0)


class IJKTransform:
    """Affine map between the sample grid of a cube and survey coordinates.

    The world position of an (inline, crossline) annotation pair is
    ``origin + inline * inline_spacing + crossline * crossline_spacing``; the
    vertical world coordinate is the sample annotation itself.

    Args:
        iline (Axis):
            Inline axis of the cube.
        xline (Axis):
            Crossline axis of the cube.
        sample (Axis):
            Sample (depth/time) axis of the cube.
        origin (Vector2):
            World x, y of annotation (0, 0).
        inline_spacing (Vector2):
            World displacement of one inline step.
        crossline_spacing (Vector2):
            World displacement of one crossline step.

    Raises:
        UnsupportedCubeError: If the spacing vectors are parallel, i.e. the
            survey plane is degenerate.

    Examples:
        ```python
        >>> from seiscube.axis import Axis
        >>> from seiscube.transformer import IJKTransform
        >>> il = Axis(10, 20, 11, "Inline", "unitless", 2)
        >>> xl = Axis(1, 5, 5, "Crossline", "unitless", 1)
        >>> s = Axis(0, 8, 5, "Sample", "ms", 0)
        >>> ijk = IJKTransform(il, xl, s, origin=(100.0, 200.0))
        >>> ijk.index_to_world((0, 0, 1)).tolist()
        [110.0, 201.0, 2.0]

        ```
    """

    def __init__(
        self,
        iline: Axis,
        xline: Axis,
        sample: Axis,
        origin: Vector2 = DEFAULT_ORIGIN,
        inline_spacing: Vector2 = DEFAULT_INLINE_SPACING,
        crossline_spacing: Vector2 = DEFAULT_CROSSLINE_SPACING,
    ):
        self.origin = np.asarray(origin, dtype=float)
        self.inline_spacing = np.asarray(inline_spacing, dtype=float)
        self.crossline_spacing = np.asarray(crossline_spacing, dtype=float)

        plane = np.column_stack([self.inline_spacing, self.crossline_spacing])
        if np.isclose(np.linalg.det(plane), 0.0):
            raise UnsupportedCubeError(
                "Unsupported survey coordinate system, inline spacing "
                f"{tuple(inline_spacing)} and crossline spacing "
                f"{tuple(crossline_spacing)} do not span a plane"
            )
        self._plane_inverse = np.linalg.inv(plane)

        self._annotation_min = np.array([iline.min, xline.min, sample.min], dtype=float)
        self._stepsize = np.array(
            [iline.stepsize, xline.stepsize, sample.stepsize], dtype=float
        )

    def index_to_annotation(self, index) -> np.ndarray:
        index = np.asarray(index, dtype=float)
        return self._annotation_min + index * self._stepsize

    def annotation_to_index(self, annotation) -> np.ndarray:
        annotation = np.asarray(annotation, dtype=float)
        return (annotation - self._annotation_min) / self._stepsize

    def annotation_to_world(self, annotation) -> np.ndarray:
        annotation = np.asarray(annotation, dtype=float)
        xy = (
            self.origin
            + annotation[..., 0:1] * self.inline_spacing
            + annotation[..., 1:2] * self.crossline_spacing
        )
        return np.concatenate([xy, annotation[..., 2:3]], axis=-1)

    def world_to_annotation(self, world) -> np.ndarray:
        world = np.asarray(world, dtype=float)
        ilxl = (world[..., 0:2] - self.origin) @ self._plane_inverse.T
        return np.concatenate([ilxl, world[..., 2:3]], axis=-1)

    def index_to_world(self, index) -> np.ndarray:
        return self.annotation_to_world(self.index_to_annotation(index))

    def world_to_index(self, world) -> np.ndarray:
        return self.annotation_to_index(self.world_to_annotation(world))


class CoordinateTransformer(ABC):
    """Capability converting between grid-index, annotation and world coordinates."""

    @abstractmethod
    def index_to_world(self, index) -> np.ndarray:
        pass

    @abstractmethod
    def world_to_index(self, world) -> np.ndarray:
        pass

    @abstractmethod
    def index_to_annotation(self, index) -> np.ndarray:
        pass

    @abstractmethod
    def annotation_to_index(self, annotation) -> np.ndarray:
        pass


class SingleCoordinateTransformer(CoordinateTransformer):
    """Transformer of one cube, delegating to the cube's :class:`IJKTransform`."""

    def __init__(self, ijk: IJKTransform):
        self._ijk = ijk

    @property
    def ijk(self) -> IJKTransform:
        return self._ijk

    def index_to_world(self, index) -> np.ndarray:
        return self._ijk.index_to_world(index)

    def world_to_index(self, world) -> np.ndarray:
        return self._ijk.world_to_index(world)

    def index_to_annotation(self, index) -> np.ndarray:
        return self._ijk.index_to_annotation(index)

    def annotation_to_index(self, annotation) -> np.ndarray:
        return self._ijk.annotation_to_index(annotation)


class DoubleCoordinateTransformer(CoordinateTransformer):
    """Transformer of the intersection grid of two cubes.

    Indices are expressed on the intersection grid. Queries are answered with
    cube A's transformer after shifting the index by A's offset, so that
    ``double.index_to_world(i) == a.index_to_world(i + offset_a)``. Both
    cubes share the same survey coordinate system, which makes the choice of
    A a convention.

    Args:
        transformer_a (SingleCoordinateTransformer):
            Transformer of cube A.
        transformer_b (SingleCoordinateTransformer):
            Transformer of cube B.
        offset_a (Sequence[float]):
            Intersection origin in cube A's index space, in (inline,
            crossline, sample) order.
        offset_b (Sequence[float]):
            Same for cube B.
    """

    def __init__(
        self,
        transformer_a: SingleCoordinateTransformer,
        transformer_b: SingleCoordinateTransformer,
        offset_a: Sequence[float] = (0.0, 0.0, 0.0),
        offset_b: Sequence[float] = (0.0, 0.0, 0.0),
    ):
        self._transformer_a = transformer_a
        self._transformer_b = transformer_b
        self._offset_a = np.asarray(offset_a, dtype=float)
        self._offset_b = np.asarray(offset_b, dtype=float)

    @property
    def transformer_a(self) -> SingleCoordinateTransformer:
        return self._transformer_a

    @property
    def transformer_b(self) -> SingleCoordinateTransformer:
        return self._transformer_b

    @property
    def offsets(self) -> Tuple[np.ndarray, np.ndarray]:
        """Intersection origin in the index space of cube A and cube B."""
        return self._offset_a.copy(), self._offset_b.copy()

    def index_to_world(self, index) -> np.ndarray:
        return self._transformer_a.index_to_world(
            np.asarray(index, dtype=float) + self._offset_a
        )

    def world_to_index(self, world) -> np.ndarray:
        return self._transformer_a.world_to_index(world) - self._offset_a

    def index_to_annotation(self, index) -> np.ndarray:
        return self._transformer_a.index_to_annotation(
            np.asarray(index, dtype=float) + self._offset_a
        )

    def annotation_to_index(self, annotation) -> np.ndarray:
        return self._transformer_a.annotation_to_index(annotation) - self._offset_a
