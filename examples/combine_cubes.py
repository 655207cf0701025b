"""Intersect two cubes and translate intersection indices into each cube.

Builds two in-memory cubes that overlap along the inline axis, wraps them in
metadata handles and prints the intersection grid, the index offsets and the
world footprint of the overlap.
"""
#%% links
from seiscube.gdal_layout import MDArrayLayout, create_cube
from seiscube.layout import AxisDescriptor, KnownMetadata
from seiscube.metadata import BinaryOperator, DoubleMetadataHandle, SingleMetadataHandle

#%% inputs
survey = {
    KnownMetadata.ORIGIN: (431000.0, 6348000.0),
    KnownMetadata.INLINE_SPACING: (0.0, 25.0),
    KnownMetadata.CROSSLINE_SPACING: (12.5, 0.0),
}
axes_a = [
    AxisDescriptor(0, 4000, 1001, "Depth", "m"),
    AxisDescriptor(1000, 1400, 401, "Crossline", "unitless"),
    AxisDescriptor(2000, 2500, 501, "Inline", "unitless"),
]
axes_b = [
    AxisDescriptor(1000, 3000, 501, "Depth", "m"),
    AxisDescriptor(1200, 1600, 401, "Crossline", "unitless"),
    AxisDescriptor(2100, 2300, 201, "Inline", "unitless"),
]
#%% create the cubes (any GDAL multidimensional file works with MDArrayLayout.open)
ds_a = create_cube(axes_a, {**survey, KnownMetadata.INPUT_FILE_NAME: "base.nc"}, epsg=23031)
ds_b = create_cube(axes_b, {**survey, KnownMetadata.INPUT_FILE_NAME: "monitor.nc"}, epsg=23031)
layout_a = MDArrayLayout.from_dataset(ds_a)
layout_b = MDArrayLayout.from_dataset(ds_b)

#%% single cube metadata
cube_a = SingleMetadataHandle(layout_a)
cube_b = SingleMetadataHandle(layout_b)
print(cube_a.iline(), cube_a.xline(), cube_a.sample(), sep="\n")
print(cube_a.bounding_box().world())

#%% intersection of the two cubes
difference = DoubleMetadataHandle(
    layout_a, layout_b, cube_a, cube_b, BinaryOperator.SUBTRACT
)
print(difference.input_filename())
print(difference.iline(), difference.xline(), difference.sample(), sep="\n")

offset_a, offset_b = difference.index_offsets()
print(f"offsets into cube A: {offset_a}, into cube B: {offset_b}")

#%% translate intersection indices (dimension order: Depth, Crossline, Inline)
samples = [(0, 0, 0), (10, 20, 30)]
print(difference.offset_samples_to_match_cube_a(samples))
print(difference.offset_samples_to_match_cube_b(samples))

#%% footprint of the overlap
print(difference.bounding_box().polygon().wkt)
print(difference.to_json(indent=2))
