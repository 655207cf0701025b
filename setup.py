from setuptools import find_packages, setup

with open("README.md") as f:
    LONG_DESCRIPTION = f.read()

dependencies = [
    "numpy>=1.24",
    "GDAL>=3.6",
    "shapely>=2.0",
    "PyYAML>=6.0",
    "colorama>=0.4.6",
]

setup(
    name="seiscube",
    version="0.1.0",
    description="Geometry of seismic cubes and of the intersection of two cubes",
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    install_requires=dependencies,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-cov",
        ],
    },
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"seiscube.base": ["config.yaml"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: GIS",
    ],
)
