"""Layout providers: the read-only view of a cube's structure.

A layout provider exposes the dimensionality of a cube, the descriptor of
each dimension and a small string/vector metadata store. The metadata handles
in :mod:`seiscube.metadata` only ever read from providers.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from osgeo import osr

from seiscube.axis import Direction, direction_aliases, make_axis, resolve_dimension
from seiscube.base._errors import BadRequestError
from seiscube.transformer import (
    DEFAULT_CROSSLINE_SPACING,
    DEFAULT_INLINE_SPACING,
    DEFAULT_ORIGIN,
    IJKTransform,
)

logger = logging.getLogger(__name__)

MetadataKey = Tuple[str, str]

# Largest difference (in world units) between the origin or spacing vectors of
# two cubes for them to share a survey coordinate system.
SURVEY_TOLERANCE = 1e-6


@dataclass(frozen=True)
class AxisDescriptor:
    """Structural description of one dimension as stored in a cube."""

    min: float
    max: float
    nsamples: int
    name: str
    unit: str = ""


class KnownMetadata:
    """(category, key) pairs of the well-known metadata entries."""

    CRS_WKT: MetadataKey = ("SurveyCoordinateSystem", "CRSWkt")
    ORIGIN: MetadataKey = ("SurveyCoordinateSystem", "Origin")
    INLINE_SPACING: MetadataKey = ("SurveyCoordinateSystem", "InlineSpacing")
    CROSSLINE_SPACING: MetadataKey = ("SurveyCoordinateSystem", "CrosslineSpacing")
    INPUT_FILE_NAME: MetadataKey = ("ImportInformation", "InputFileName")
    IMPORT_TIME_STAMP: MetadataKey = ("ImportInformation", "ImportTimeStamp")


class AbstractLayout(ABC):
    """Layout provider of a single cube."""

    @abstractmethod
    def dimensionality(self) -> int:
        """Number of dimensions of the cube."""
        pass

    @abstractmethod
    def dimension_name(self, dimension: int) -> str:
        """Name of the given dimension."""
        pass

    @abstractmethod
    def axis_descriptor(self, dimension: int) -> AxisDescriptor:
        """Descriptor (extent, sample count, name, unit) of the given dimension."""
        pass

    @abstractmethod
    def metadata_string(self, category: str, key: str) -> str:
        """String metadata entry, empty string when absent."""
        pass

    @abstractmethod
    def metadata_vector(self, category: str, key: str) -> Optional[Tuple[float, ...]]:
        """Numeric vector metadata entry, None when absent."""
        pass

    def survey_coordinate_system(self) -> Tuple[Tuple[float, ...], ...]:
        """Origin, inline spacing and crossline spacing of the survey plane.

        Entries missing from the metadata fall back to an identity layout:
        origin (0, 0), inline along x and crossline along y.
        """
        defaults = (
            (KnownMetadata.ORIGIN, DEFAULT_ORIGIN),
            (KnownMetadata.INLINE_SPACING, DEFAULT_INLINE_SPACING),
            (KnownMetadata.CROSSLINE_SPACING, DEFAULT_CROSSLINE_SPACING),
        )
        values = []
        for key, default in defaults:
            value = self.metadata_vector(*key)
            values.append(tuple(value) if value is not None else default)
        return tuple(values)

    def ijk_transform(self) -> IJKTransform:
        """Build the index <-> world primitive of this cube."""
        iline, xline, sample = (
            make_axis(self, resolve_dimension(self, direction_aliases(direction)))
            for direction in (Direction.INLINE, Direction.CROSSLINE, Direction.SAMPLE)
        )
        origin, inline_spacing, crossline_spacing = self.survey_coordinate_system()
        return IJKTransform(
            iline,
            xline,
            sample,
            origin=origin,
            inline_spacing=inline_spacing,
            crossline_spacing=crossline_spacing,
        )


class MemoryLayout(AbstractLayout):
    """Layout provider over plain python values.

    Args:
        axes (Sequence[AxisDescriptor]):
            One descriptor per dimension, in storage order.
        metadata (Mapping[Tuple[str, str], Any], optional):
            Metadata keyed by (category, key). Strings are returned by
            ``metadata_string``, sequences of numbers by ``metadata_vector``.

    Examples:
        ```python
        >>> from seiscube.layout import AxisDescriptor, KnownMetadata, MemoryLayout
        >>> layout = MemoryLayout(
        ...     [
        ...         AxisDescriptor(0, 100, 26, "Sample", "ms"),
        ...         AxisDescriptor(1, 10, 10, "Crossline", "unitless"),
        ...         AxisDescriptor(1, 5, 5, "Inline", "unitless"),
        ...     ],
        ...     {KnownMetadata.INPUT_FILE_NAME: "survey.sgy"},
        ... )
        >>> layout.dimension_name(2)
        'Inline'
        >>> layout.metadata_string(*KnownMetadata.INPUT_FILE_NAME)
        'survey.sgy'
        >>> layout.metadata_string(*KnownMetadata.CRS_WKT)
        ''

        ```
    """

    def __init__(
        self,
        axes: Sequence[AxisDescriptor],
        metadata: Optional[Mapping[MetadataKey, Any]] = None,
    ):
        self._axes = tuple(axes)
        self._metadata: Dict[MetadataKey, Any] = dict(metadata or {})

    def dimensionality(self) -> int:
        return len(self._axes)

    def dimension_name(self, dimension: int) -> str:
        return self._axes[dimension].name

    def axis_descriptor(self, dimension: int) -> AxisDescriptor:
        return self._axes[dimension]

    def metadata_string(self, category: str, key: str) -> str:
        value = self._metadata.get((category, key))
        return value if isinstance(value, str) else ""

    def metadata_vector(self, category: str, key: str) -> Optional[Tuple[float, ...]]:
        value = self._metadata.get((category, key))
        if value is None or isinstance(value, str):
            return None
        return tuple(float(v) for v in value)


def _same_crs(wkt_a: str, wkt_b: str) -> bool:
    """Compare two CRS definitions, textually first and then through OSR."""
    if wkt_a == wkt_b:
        return True
    if not wkt_a or not wkt_b:
        return False

    sr_a = osr.SpatialReference()
    sr_b = osr.SpatialReference()
    try:
        if sr_a.SetFromUserInput(wkt_a) != 0 or sr_b.SetFromUserInput(wkt_b) != 0:
            return False
    except RuntimeError:
        logger.debug("CRS definition could not be parsed, comparing verbatim")
        return False
    return bool(sr_a.IsSame(sr_b))


class DoubleLayout:
    """Read-only composite view over the layouts of two cubes.

    The two providers are borrowed, not copied: the caller keeps them alive
    for as long as the view is used.

    Args:
        layout_a (AbstractLayout):
            Layout of cube A.
        layout_b (AbstractLayout):
            Layout of cube B.

    Raises:
        BadRequestError: If the cubes differ in dimensionality, coordinate
            reference system or survey coordinate system.
    """

    def __init__(self, layout_a: AbstractLayout, layout_b: AbstractLayout):
        self._layout_a = layout_a
        self._layout_b = layout_b

        if layout_a.dimensionality() != layout_b.dimensionality():
            raise BadRequestError(
                "Different number of dimensions: "
                f"{layout_a.dimensionality()} versus {layout_b.dimensionality()}"
            )

        crs_a = layout_a.metadata_string(*KnownMetadata.CRS_WKT)
        crs_b = layout_b.metadata_string(*KnownMetadata.CRS_WKT)
        if not _same_crs(crs_a, crs_b):
            raise BadRequestError(
                f"Coordinate reference system (CRS) mismatch: {crs_a} versus {crs_b}"
            )

        names = ("origin", "inline spacing", "crossline spacing")
        survey_a = layout_a.survey_coordinate_system()
        survey_b = layout_b.survey_coordinate_system()
        for name, vector_a, vector_b in zip(names, survey_a, survey_b):
            if not np.allclose(vector_a, vector_b, rtol=0.0, atol=SURVEY_TOLERANCE):
                raise BadRequestError(
                    f"Survey coordinate system mismatch in {name}: "
                    f"{vector_a} versus {vector_b}"
                )

    @property
    def layout_a(self) -> AbstractLayout:
        return self._layout_a

    @property
    def layout_b(self) -> AbstractLayout:
        return self._layout_b

    def dimensionality(self) -> int:
        return self._layout_a.dimensionality()

    def dimension_name(self, dimension: int) -> str:
        return self._layout_a.dimension_name(dimension)
