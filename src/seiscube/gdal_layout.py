"""Layout provider backed by the GDAL multidimensional raster API.

Any GDAL multidimensional driver (netCDF, Zarr, HDF5, MEM, ...) can hold a
cube: each dimension carries an indexing variable with the annotation values
and its unit, and the well-known metadata entries are attributes of the data
array named ``"<category>.<key>"`` (e.g. ``ImportInformation.InputFileName``).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np
from osgeo import gdal, osr

from seiscube.layout import AxisDescriptor, KnownMetadata, MemoryLayout, MetadataKey

logger = logging.getLogger(__name__)

ATTRIBUTE_SEPARATOR = "."


def _attribute_name(category: str, key: str) -> str:
    return f"{category}{ATTRIBUTE_SEPARATOR}{key}"


def _read_descriptor(dim: gdal.Dimension) -> AxisDescriptor:
    size = int(dim.GetSize())
    indexing_variable = dim.GetIndexingVariable()
    if indexing_variable is None:
        return AxisDescriptor(min=0.0, max=float(size - 1), nsamples=size, name=dim.GetName())

    values = np.asarray(indexing_variable.ReadAsArray(), dtype=float)
    return AxisDescriptor(
        min=float(values[0]),
        max=float(values[-1]),
        nsamples=size,
        name=dim.GetName(),
        unit=indexing_variable.GetUnit() or "",
    )


def _read_metadata(md_arr: gdal.MDArray) -> Dict[MetadataKey, Any]:
    metadata: Dict[MetadataKey, Any] = {}
    for attr in md_arr.GetAttributes() or []:
        name = attr.GetName()
        if ATTRIBUTE_SEPARATOR not in name:
            continue
        category, key = name.split(ATTRIBUTE_SEPARATOR, 1)
        if attr.GetDataType().GetClass() == gdal.GEDTC_STRING:
            metadata[(category, key)] = attr.ReadAsString()
        else:
            metadata[(category, key)] = tuple(attr.ReadAsDoubleArray())

    if KnownMetadata.CRS_WKT not in metadata:
        srs = md_arr.GetSpatialRef()
        if srs is not None:
            metadata[KnownMetadata.CRS_WKT] = srs.ExportToWkt()
    return metadata


class MDArrayLayout(MemoryLayout):
    """Layout of a cube stored as a GDAL multidimensional array.

    Everything is read once at construction; later queries never touch GDAL.

    Args:
        md_arr (gdal.MDArray):
            The data array of the cube.
        dataset (gdal.Dataset, optional):
            Dataset owning the array, kept referenced so the array stays valid.

    Examples:
        - Build an in-memory cube and read its layout
            ```python
            >>> from seiscube.gdal_layout import MDArrayLayout, create_cube
            >>> from seiscube.layout import AxisDescriptor
            >>> ds = create_cube([
            ...     AxisDescriptor(1, 5, 5, "Inline", "unitless"),
            ...     AxisDescriptor(10, 20, 6, "Crossline", "unitless"),
            ...     AxisDescriptor(0, 40, 11, "Depth", "m"),
            ... ])
            >>> layout = MDArrayLayout.from_dataset(ds)
            >>> layout.axis_descriptor(2)
            AxisDescriptor(min=0.0, max=40.0, nsamples=11, name='Depth', unit='m')

            ```
    """

    def __init__(self, md_arr: gdal.MDArray, dataset: Optional[gdal.Dataset] = None):
        self._dataset = dataset
        self._md_arr = md_arr
        axes = [_read_descriptor(dim) for dim in md_arr.GetDimensions()]
        super().__init__(axes, _read_metadata(md_arr))
        logger.debug(
            f"Read layout of {md_arr.GetFullName()}: "
            + ", ".join(f"{a.name}[{a.nsamples}]" for a in axes)
        )

    @classmethod
    def from_dataset(cls, dataset: gdal.Dataset, variable: str = "data") -> "MDArrayLayout":
        """Layout of the named array in the root group of a multidimensional dataset."""
        md_arr = dataset.GetRootGroup().OpenMDArray(variable)
        if md_arr is None:
            raise ValueError(f"Variable '{variable}' not found in dataset")
        return cls(md_arr, dataset)

    @classmethod
    def open(cls, path: str, variable: str = "data") -> "MDArrayLayout":
        """Open a file with a multidimensional driver and read the layout of ``variable``."""
        dataset = gdal.OpenEx(path, gdal.OF_MULTIDIM_RASTER | gdal.OF_READONLY)
        return cls.from_dataset(dataset, variable)


def create_cube(
    axes: Sequence[AxisDescriptor],
    metadata: Optional[Mapping[MetadataKey, Any]] = None,
    variable_name: str = "data",
    epsg: Optional[int] = None,
    driver_type: str = "MEM",
    path: str = "cube",
) -> gdal.Dataset:
    """Create a multidimensional dataset holding an empty cube.

    Args:
        axes (Sequence[AxisDescriptor]):
            Dimensions of the cube in storage order. Each one becomes a
            dimension with an indexing variable of ``nsamples`` evenly spaced
            values between ``min`` and ``max``.
        metadata (Mapping[Tuple[str, str], Any], optional):
            Metadata written as attributes of the data array. Strings become
            string attributes, sequences become float64 vectors.
        variable_name (str):
            Name of the data array. Default is "data".
        epsg (int, optional):
            EPSG code of the spatial reference attached to the data array.
        driver_type (str):
            GDAL multidimensional driver. Default is "MEM".
        path (str):
            Output path (dataset name for the MEM driver).

    Returns:
        gdal.Dataset: The created dataset.
    """
    float64 = gdal.ExtendedDataType.Create(gdal.GDT_Float64)
    src = gdal.GetDriverByName(driver_type).CreateMultiDimensional(path)
    rg = src.GetRootGroup()

    dims = []
    for descriptor in axes:
        dim = rg.CreateDimension(descriptor.name, None, None, descriptor.nsamples)
        values = rg.CreateMDArray(descriptor.name, [dim], float64)
        values.Write(np.linspace(descriptor.min, descriptor.max, descriptor.nsamples))
        if descriptor.unit:
            values.SetUnit(descriptor.unit)
        dim.SetIndexingVariable(values)
        dims.append(dim)

    md_arr = rg.CreateMDArray(
        variable_name, dims, gdal.ExtendedDataType.Create(gdal.GDT_Float32)
    )

    for (category, key), value in (metadata or {}).items():
        name = _attribute_name(category, key)
        if isinstance(value, str):
            attr = md_arr.CreateAttribute(name, [], gdal.ExtendedDataType.CreateString())
            attr.WriteString(value)
        else:
            vector = [float(v) for v in value]
            attr = md_arr.CreateAttribute(name, [len(vector)], float64)
            attr.WriteDoubleArray(vector)

    if epsg is not None:
        sr = osr.SpatialReference()
        sr.ImportFromEPSG(epsg)
        md_arr.SetSpatialRef(sr)

    return src
