"""Float-based units with automatic SI conversion and type safety.

UnitFloat combines Python's float with unit family checking. The value is
stored in SI units (seconds for durations) while the class remembers the scale
it was created in, which is what the timer uses for display.

Classes:
    UnitFloat: Base class for all float-based units with automatic SI conversion.

Example:
    >>> class Second(UnitFloat):
    ...     IS_FAMILY_ROOT = True
    ...     SCALE_TO_SI = 1.0
    ...     SYMBOL = "s"
    ...
    >>> class Millisecond(Second):
    ...     SCALE_TO_SI = 1e-3
    ...     SYMBOL = "ms"
    ...
    >>> wait = Millisecond(250)
    >>> print(wait)  # "250 ms"
    >>> print(float(wait))  # 0.25 (seconds)
"""

from __future__ import annotations

from typing import ClassVar

from .unit_base import Unit

Number = int | float


class UnitFloat(float, Unit):
    """Float that carries its unit and only mixes with its own family.

    Attributes:
        SCALE_TO_SI (ClassVar[float]): Conversion factor to SI units.
        SYMBOL (ClassVar[str]): Unit symbol for display purposes.
        IS_FAMILY_ROOT (ClassVar[bool]): Indicates if this class is a root unit.
    """

    SCALE_TO_SI: ClassVar[float] = 1.0
    IS_FAMILY_ROOT: ClassVar[bool] = True

    def __new__(cls, value: Number):
        """Create a new instance from a value in the unit's native scale.

        Args:
            value: Numeric value in the unit's native scale.

        Returns:
            UnitFloat: New instance with value stored in SI units.
        """
        si_val = float(value) * cls.SCALE_TO_SI
        return float.__new__(cls, si_val)

    @classmethod
    def from_si(cls, si_value: float) -> UnitFloat:
        """Create instance directly from SI unit value.

        Args:
            si_value: Value already in SI units.

        Returns:
            UnitFloat: New instance with the SI value.
        """
        return float.__new__(cls, si_value)

    def to(self, unit_type: type[UnitFloat]) -> float:
        """Convert to another unit of the same family.

        Args:
            unit_type: Target unit type to convert to.

        Returns:
            float: Value in the target unit's scale.
        """
        self._check_same_root(unit_type)
        return float(self) / unit_type.SCALE_TO_SI

    def as_unit(self, unit_type: type[UnitFloat]) -> UnitFloat:
        """Convert to another unit while preserving type information.

        Args:
            unit_type: Target unit type to convert to.

        Returns:
            UnitFloat: New instance of the target unit type.
        """
        self._check_same_root(unit_type)
        return unit_type.from_si(float(self))

    # -------------------------------- Arithmetic Operations --------------------------------
    def __add__(self, other: UnitFloat) -> UnitFloat:
        """Add two units of the same family.

        Raises:
            TypeError: If units are not from the same family.
        """
        self._check_same_root(type(other))
        return type(self).from_si(float(self) + float(other))

    def __radd__(self, other: UnitFloat) -> UnitFloat:
        return self.__add__(other)

    def __sub__(self, other: UnitFloat) -> UnitFloat:
        """Subtract two units of the same family."""
        self._check_same_root(type(other))
        return type(self).from_si(float(self) - float(other))

    def __rsub__(self, other: UnitFloat) -> UnitFloat:
        self._check_same_root(type(other))
        return type(self).from_si(float(other) - float(self))

    def __mul__(self, k: Number) -> UnitFloat:
        """Multiply unit by scalar value.

        Raises:
            TypeError: If k is not a numeric type.
        """
        if isinstance(k, Number) and not isinstance(k, Unit):
            return type(self).from_si(float(self) * float(k))
        raise TypeError(f"cannot multiply {type(self).__name__} by {type(k).__name__}")

    def __rmul__(self, k: Number) -> UnitFloat:
        return self.__mul__(k)

    def __truediv__(self, k: Number) -> UnitFloat:
        """Divide unit by scalar value.

        Raises:
            TypeError: If k is not a numeric type.
        """
        if isinstance(k, Number) and not isinstance(k, Unit):
            return type(self).from_si(float(self) / float(k))
        raise TypeError(f"cannot divide {type(self).__name__} by {type(k).__name__}")

    def __lt__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) < float(other)

    def __le__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) <= float(other)

    def __gt__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) > float(other)

    def __ge__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) >= float(other)

    def __eq__(self, other: object) -> bool:
        """Equality between units of the same family.

        Values from another family (or plain numbers) are never equal.
        """
        if getattr(type(other), "ROOT", None) is not self.ROOT:
            return False
        return float(self) == float(other)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return float.__hash__(self)

    def __bool__(self) -> bool:
        return float(self) != 0.0

    def __str__(self) -> str:
        """Return value and symbol in the unit's native scale (e.g., "500 ms")."""
        return f"{self.to(type(self)):.12g} {type(self).SYMBOL}".strip()

    def __repr__(self) -> str:
        """Return native value with its SI equivalent (e.g., "500 ms (= 0.5 s)")."""
        return f"{self.to(type(self)):.12g} {type(self).SYMBOL} (= {float(self):g} {self.ROOT.SYMBOL})"
