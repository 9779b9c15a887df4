#! /usr/bin/env python
"""Shared objects."""
import json
from pathlib import Path
from types import SimpleNamespace

from pint import UnitRegistry


class Constant(float):
    """Physical constant.

    Extends float with the `Constant.details` member.

    >>> mu = Constant({"value": 1.5, "unit": "MHz/G", "description": "test"})
    >>> mu * 2
    3.0
    >>> mu.details.unit
    'MHz/G'
    """

    details: SimpleNamespace
    """Details (unit, description) of the constant."""

    def __new__(cls, details: dict):  # noqa D102
        details = dict(details)
        obj = super().__new__(cls, details.pop("value"))
        obj.details = SimpleNamespace(**details)
        return obj

    @staticmethod
    def fromjson(json_file: Path) -> SimpleNamespace:
        """Read all constants from the JSON file.

        Args:
            json_file (Path): JSON file mapping names to a dictionary
                with at least a ``"value"`` key.

        Returns:
            SimpleNamespace: A namespace containing all constants.
        """
        with open(json_file, encoding="utf-8") as f:
            data = json.load(f)
        return SimpleNamespace(**{k: Constant(v) for k, v in data.items()})


DATA_DIR = Path(__file__).parent / "data"
constants = Constant.fromjson(DATA_DIR / "constants.json")

ureg = UnitRegistry()
Q_ = ureg.Quantity
