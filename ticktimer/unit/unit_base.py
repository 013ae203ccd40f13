"""Unit family foundation for typed durations.

This module provides the Unit class that every duration type derives from.
Each unit class belongs to a "family" identified by its ROOT class, which is
assigned automatically when the class is created. Values from the same family
can be combined and compared; mixing families is rejected at runtime.

Key Concepts:
- ROOT Class: Each unit family has a root class that defines the family
- IS_FAMILY_ROOT: Boolean flag marking the base unit of each family
- Automatic Assignment: ROOT classes are determined automatically via MRO

Classes:
    Unit: Base class for all unit types with family management.

Example:
    >>> class Second(Unit):
    ...     IS_FAMILY_ROOT = True  # ROOT for every time unit
    >>> class Millisecond(Second):
    ...     pass  # Automatically gets ROOT = Second
    >>> Millisecond.ROOT is Second
    True
"""

from __future__ import annotations

from typing import ClassVar

Number = int | float


class Unit:
    """Base class for all unit types.

    Attributes:
        ROOT (ClassVar[type[Unit]]): Root class defining the unit family.
        SYMBOL (ClassVar[str]): Unit symbol for display purposes.
        IS_FAMILY_ROOT (ClassVar[bool]): Indicates if this class is a root unit.
    """

    __slots__ = ()

    ROOT: ClassVar[type[Unit]]
    SYMBOL: ClassVar[str] = ""
    IS_FAMILY_ROOT: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs):
        """Set the ROOT class of a new unit class.

        The first ancestor (or the class itself) flagged with
        IS_FAMILY_ROOT=True becomes the ROOT; a class with no flagged ancestor
        is its own ROOT.
        """
        super().__init_subclass__(**kwargs)
        if "ROOT" in cls.__dict__ and cls.ROOT is not None:
            return

        if cls.__dict__.get("IS_FAMILY_ROOT", False):
            cls.ROOT = cls
            return

        for base in cls.mro()[1:]:
            if base.__dict__.get("IS_FAMILY_ROOT", False):
                cls.ROOT = base
                return

        cls.ROOT = cls

    @classmethod
    def _check_same_root(cls, unit_type: type):
        """Check that ``unit_type`` belongs to the same unit family.

        Args:
            unit_type: The other type to check compatibility with. Plain
                numbers and unrelated classes have no ROOT and are rejected.

        Raises:
            TypeError: If the types belong to different families.
        """
        other_root = getattr(unit_type, "ROOT", None)
        if cls.ROOT is not other_root:
            msg = f"incompatible units: {cls.ROOT.__name__} and {unit_type.__name__}"
            raise TypeError(msg)
