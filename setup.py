from setuptools import setup, find_packages

setup(
    name="coarse-resample",
    version="0.1.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=[
        "numpy>=1.21.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",
        "xarray>=0.20.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["resample=coarse_resample.cli:main"],
    },
    author="Your Name",
    description="Block-aggregation resampling of fine-resolution EO rasters onto a coarse lattice",
    python_requires=">=3.8",
)
