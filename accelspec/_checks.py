"""Input validation shared by the computation modules."""

from typing import Sequence

import numpy as np

from .exceptions import InvalidInputError


def as_record(samples: Sequence[float], min_length: int = 2, name: str = 'samples') -> np.ndarray:
    """Copies ``samples`` into a finite 1-D float64 array of at least ``min_length`` points."""
    try:
        data = np.array(samples, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a sequence of numbers: {exc}") from exc
    if data.ndim != 1:
        raise InvalidInputError(f"{name} must be one-dimensional, got shape {data.shape}.")
    if data.size < min_length:
        raise InvalidInputError(
            f"{name} needs at least {min_length} point(s), got {data.size}.")
    if not np.all(np.isfinite(data)):
        raise InvalidInputError(f"{name} contains NaN or infinite values.")
    return data


def check_sampling_rate(sampling_rate: float) -> float:
    try:
        fs = float(sampling_rate)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid sampling rate: {sampling_rate!r}") from exc
    if not np.isfinite(fs) or fs <= 0:
        raise InvalidInputError(f"Sampling rate must be positive, got {sampling_rate!r}.")
    return fs
