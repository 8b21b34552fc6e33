"""Unit-tagged measurement values.

Every area or distance the toolkit returns is a Quantity: a scalar that always
travels with its unit, so converting square metres to acres can never leave a
value labelled with the wrong unit.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from spatialkit.config import CONSTANTS
from spatialkit.errors import IncompatibleUnitError


class Dimension(StrEnum):
    LENGTH = "length"
    AREA = "area"


class Unit(StrEnum):
    """Supported measurement units."""

    METRE = "m"
    KILOMETRE = "km"
    MILE = "mi"
    FOOT = "ft"
    SQUARE_METRE = "m2"
    SQUARE_KILOMETRE = "km2"
    HECTARE = "ha"
    ACRE = "acre"

    @property
    def dimension(self) -> Dimension:
        return _FACTORS[self][0]

    @property
    def factor(self) -> float:
        """Size of one of this unit in metres (length) or square metres (area)."""
        return _FACTORS[self][1]

    @property
    def suffix(self) -> str:
        """Column-name friendly label, e.g. ``area_acre``."""
        return self.value


_FACTORS: dict[Unit, tuple[Dimension, float]] = {
    Unit.METRE: (Dimension.LENGTH, 1.0),
    Unit.KILOMETRE: (Dimension.LENGTH, CONSTANTS.METRES_PER_KILOMETRE),
    Unit.MILE: (Dimension.LENGTH, CONSTANTS.METRES_PER_MILE),
    Unit.FOOT: (Dimension.LENGTH, CONSTANTS.METRES_PER_FOOT),
    Unit.SQUARE_METRE: (Dimension.AREA, 1.0),
    Unit.SQUARE_KILOMETRE: (Dimension.AREA, CONSTANTS.SQUARE_METRES_PER_SQUARE_KILOMETRE),
    Unit.HECTARE: (Dimension.AREA, CONSTANTS.SQUARE_METRES_PER_HECTARE),
    Unit.ACRE: (Dimension.AREA, CONSTANTS.SQUARE_METRES_PER_ACRE),
}


def conversion_factor(source: Unit, target: Unit) -> float:
    """Multiplier taking a value in ``source`` units to ``target`` units.

    Raises:
        IncompatibleUnitError: If the units measure different dimensions
    """
    source = Unit(source)
    target = Unit(target)
    if source.dimension != target.dimension:
        msg = (
            f"Cannot convert {source.value} ({source.dimension}) "
            f"to {target.value} ({target.dimension})"
        )
        raise IncompatibleUnitError(msg)
    return source.factor / target.factor


class Quantity(BaseModel):
    """A scalar paired with its unit.

    Attributes:
        value: Magnitude in ``unit``
        unit: Unit of the magnitude
    """

    model_config = ConfigDict(frozen=True)

    value: float = Field(description="Magnitude")
    unit: Unit = Field(description="Unit of the magnitude")

    def to(self, unit: Unit | str) -> "Quantity":
        """Return the same quantity expressed in another unit."""
        target = Unit(unit)
        if target == self.unit:
            return self
        return Quantity(value=self.value * conversion_factor(self.unit, target), unit=target)

    @property
    def dimension(self) -> Dimension:
        return self.unit.dimension

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:g} {self.unit.value}"


def convert(quantity: Quantity, unit: Unit | str) -> Quantity:
    """Convert a quantity to another unit of the same dimension."""
    return quantity.to(unit)
