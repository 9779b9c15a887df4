#!/usr/bin/env python

from pathlib import Path

from setuptools import find_packages, setup

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="alkalipy",
    version="0.1.0",
    license="MIT",
    packages=find_packages("src"),
    package_dir={"": "src"},
    package_data={"alkalipy": ["data/*.json"]},
    keywords="simulation density-matrix lindblad hyperfine alkali",
    python_requires=">=3.10",
    install_requires=["numpy", "scipy", "scikit-learn", "pint", "sympy"],
    extras_require={
        "test": ["pytest"],
        "examples": ["matplotlib"],
        "docs": ["sphinx", "sphinx_rtd_theme"],
    },
    include_package_data=True,
    long_description=long_description,
    long_description_content_type="text/markdown",
)

# Build with:
# python setup.py sdist
#
# Local install with:
# pip install -e .
#
# Run the tests with:
# python -m unittest discover tests
