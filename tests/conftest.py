from typing import Callable, Optional, Tuple

import pytest

from seiscube.layout import AxisDescriptor, KnownMetadata, MemoryLayout

Extent = Tuple[float, float, int]

CRS_WKT = "utmXX"


def make_layout(
    inline: Extent = (0, 100, 101),
    crossline: Extent = (1, 10, 10),
    sample: Extent = (0, 20, 11),
    sample_name: str = "Sample",
    sample_unit: str = "ms",
    filename: str = "a.vds",
    timestamp: str = "2023-01-01T00:00:00Z",
    crs: Optional[str] = CRS_WKT,
    origin=(2.0, 0.0),
    inline_spacing=(3.0, 0.0),
    crossline_spacing=(0.0, 2.0),
) -> MemoryLayout:
    """Cube in storage order Sample (dimension 0), Crossline (1), Inline (2)."""
    metadata = {
        KnownMetadata.INPUT_FILE_NAME: filename,
        KnownMetadata.IMPORT_TIME_STAMP: timestamp,
        KnownMetadata.ORIGIN: origin,
        KnownMetadata.INLINE_SPACING: inline_spacing,
        KnownMetadata.CROSSLINE_SPACING: crossline_spacing,
    }
    if crs is not None:
        metadata[KnownMetadata.CRS_WKT] = crs
    return MemoryLayout(
        [
            AxisDescriptor(*sample, name=sample_name, unit=sample_unit),
            AxisDescriptor(*crossline, name="Crossline", unit="unitless"),
            AxisDescriptor(*inline, name="Inline", unit="unitless"),
        ],
        metadata,
    )


@pytest.fixture(scope="session")
def layout_factory() -> Callable[..., MemoryLayout]:
    return make_layout


@pytest.fixture(scope="function")
def layout_a() -> MemoryLayout:
    """inlines 0..100, crosslines 1..10, samples 0..20 ms every 2 ms."""
    return make_layout()


@pytest.fixture(scope="function")
def layout_b() -> MemoryLayout:
    """inlines 50..150, otherwise identical to layout_a."""
    return make_layout(inline=(50, 150, 101), filename="b.vds", timestamp="2024-06-30T12:00:00Z")
