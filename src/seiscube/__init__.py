"""seiscube - geometry of seismic cubes and of their intersections."""

from importlib.metadata import PackageNotFoundError, version

from seiscube.base.config import Config

__all__ = ["axis", "layout", "gdal_layout", "transformer", "bounding_box", "metadata"]

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"

config = Config()

# documentation format
__docformat__ = "restructuredtext"
