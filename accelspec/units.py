"""
Acceleration unit handling.

All computations in accelspec run in m/s^2. The helpers below move a record
into and out of that canonical unit without touching the caller's data.
"""

import enum
import logging
from typing import Sequence, Union

import numpy as np

from .exceptions import InvalidInputError

log = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

G_STANDARD = 9.80665   # standard gravity (m/s^2)
GAL_TO_MPS2 = 0.01     # 1 gal = 1 cm/s^2
M_TO_CM = 100.0


class AccelerationUnit(enum.Enum):
    """Supported acceleration units.

    ``UNKNOWN`` is what an unrecognised label resolves to in lenient mode; it
    behaves exactly like ``MPS2`` (identity conversion).
    """
    MPS2 = 'm/s2'
    GAL = 'gal'
    G = 'g'
    UNKNOWN = 'unknown'


_ALIASES = {
    'm/s2': AccelerationUnit.MPS2,
    'm/s²': AccelerationUnit.MPS2,
    'm/s^2': AccelerationUnit.MPS2,
    'mps2': AccelerationUnit.MPS2,
    'gal': AccelerationUnit.GAL,
    'cm/s2': AccelerationUnit.GAL,
    'cm/s²': AccelerationUnit.GAL,
    'cm/s^2': AccelerationUnit.GAL,
    'galorcmpers2': AccelerationUnit.GAL,
    'g': AccelerationUnit.G,
    'unknown': AccelerationUnit.UNKNOWN,
}

_FACTORS = {
    AccelerationUnit.MPS2: 1.0,
    AccelerationUnit.GAL: GAL_TO_MPS2,
    AccelerationUnit.G: G_STANDARD,
    AccelerationUnit.UNKNOWN: 1.0,
}

UnitLike = Union[AccelerationUnit, str, None]


# =============================================================================
# PUBLIC API
# =============================================================================

def parse_unit(unit: UnitLike, strict: bool = False) -> AccelerationUnit:
    """Resolves a unit label (or enum member) to an ``AccelerationUnit``.

    Parameters
    ----------
    unit : AccelerationUnit, str or None
        Enum member or label such as ``'gal'``, ``'m/s²'`` or ``'g'``.
        Labels are matched case-insensitively. ``None`` means m/s^2.
    strict : bool, optional
        If True an unrecognised label raises ``InvalidInputError``.
        Default is False: the label resolves to ``UNKNOWN`` (treated as SI)
        and a warning is logged.

    Returns
    -------
    AccelerationUnit
    """
    if unit is None:
        return AccelerationUnit.MPS2
    if isinstance(unit, AccelerationUnit):
        return unit
    key = str(unit).strip()
    resolved = _ALIASES.get(key.lower())
    if resolved is not None:
        return resolved
    if strict:
        raise InvalidInputError(f"Unrecognised acceleration unit: {unit!r}")
    log.warning("Unrecognised acceleration unit %r; treating samples as m/s^2.", unit)
    return AccelerationUnit.UNKNOWN


def conversion_factor(unit: UnitLike) -> float:
    """Multiplier taking a value in ``unit`` to m/s^2."""
    return _FACTORS[parse_unit(unit)]


def to_si(samples: Sequence[float], unit: UnitLike) -> np.ndarray:
    """Converts an acceleration record to m/s^2.

    Always returns a new float64 array; ``samples`` is left untouched.
    """
    unit = parse_unit(unit)
    data = np.array(samples, dtype=float)
    if unit is AccelerationUnit.GAL:
        return data / 100.0
    if unit is AccelerationUnit.G:
        return data * G_STANDARD
    return data


def from_si(samples: Sequence[float], unit: UnitLike) -> np.ndarray:
    """Converts an acceleration record from m/s^2 back to ``unit``."""
    unit = parse_unit(unit)
    data = np.array(samples, dtype=float)
    if unit is AccelerationUnit.GAL:
        return data * 100.0
    if unit is AccelerationUnit.G:
        return data / G_STANDARD
    return data


def velocity_to_cm(velocity: Sequence[float]) -> np.ndarray:
    # m/s -> cm/s
    return np.array(velocity, dtype=float) * M_TO_CM


def displacement_to_cm(displacement: Sequence[float]) -> np.ndarray:
    # m -> cm
    return np.array(displacement, dtype=float) * M_TO_CM
