"""World-space footprint of a cube."""

from __future__ import annotations

from typing import Dict, List, Tuple

import numpy as np
from shapely.geometry import Polygon

from seiscube.transformer import CoordinateTransformer

Corner = Tuple[float, float]


class BoundingBox:
    """Corners of the inline/crossline plane of a cube.

    The box is a pure function of the inline and crossline sample counts and
    the coordinate transformer; every accessor recomputes its corners.
    Corners are listed in the order (first inline, first crossline),
    (last inline, first crossline), (last inline, last crossline),
    (first inline, last crossline).

    Args:
        nilines (int):
            Number of inlines.
        nxlines (int):
            Number of crosslines.
        transformer (CoordinateTransformer):
            Transformer of the cube (or of the intersection grid).

    Examples:
        ```python
        >>> from seiscube.axis import Axis
        >>> from seiscube.bounding_box import BoundingBox
        >>> from seiscube.transformer import IJKTransform, SingleCoordinateTransformer
        >>> il = Axis(1, 3, 3, "Inline", "unitless", 0)
        >>> xl = Axis(1, 2, 2, "Crossline", "unitless", 1)
        >>> s = Axis(0, 4, 5, "Sample", "ms", 2)
        >>> box = BoundingBox(3, 2, SingleCoordinateTransformer(IJKTransform(il, xl, s)))
        >>> box.index()
        [(0, 0), (2, 0), (2, 1), (0, 1)]
        >>> box.annotation()
        [(1.0, 1.0), (3.0, 1.0), (3.0, 2.0), (1.0, 2.0)]

        ```
    """

    def __init__(self, nilines: int, nxlines: int, transformer: CoordinateTransformer):
        self._nilines = nilines
        self._nxlines = nxlines
        self._transformer = transformer

    def index(self) -> List[Tuple[int, int]]:
        """Corners in index space (inline index, crossline index)."""
        last_il = self._nilines - 1
        last_xl = self._nxlines - 1
        return [(0, 0), (last_il, 0), (last_il, last_xl), (0, last_xl)]

    def _corners_ijk(self) -> np.ndarray:
        return np.array([(i, j, 0) for i, j in self.index()], dtype=float)

    def annotation(self) -> List[Corner]:
        """Corners as (inline, crossline) annotation values."""
        ilxl = self._transformer.index_to_annotation(self._corners_ijk())
        return [(float(il), float(xl)) for il, xl, _ in ilxl]

    def world(self) -> List[Corner]:
        """Corners as world (x, y) coordinates."""
        xyz = self._transformer.index_to_world(self._corners_ijk())
        return [(float(x), float(y)) for x, y, _ in xyz]

    def polygon(self) -> Polygon:
        """Footprint of the cube as a polygon in world coordinates."""
        return Polygon(self.world())

    def to_dict(self) -> Dict[str, list]:
        return {
            "cdp": [list(corner) for corner in self.world()],
            "ilxl": [list(corner) for corner in self.annotation()],
            "ij": [list(corner) for corner in self.index()],
        }
