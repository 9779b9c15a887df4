"""Alkalipy package root."""

import logging
from importlib.metadata import PackageNotFoundError, version

from . import fine_structure, liouville, shared, simulation, utils
from .fine_structure import FineStructure
from .shared import Q_, ureg
from .simulation import (
    DensityMatrix,
    InvalidArgumentError,
    InvalidDimensionError,
    Method,
    NumericalError,
)

try:
    __version__ = version("alkalipy")
except PackageNotFoundError:
    # Handle cases where the package is not installed or metadata is missing
    __version__ = "unknown"

logging.getLogger(__name__).addHandler(logging.NullHandler())
