"""
Elastic response spectra of single-degree-of-freedom oscillators.

For every natural period of a log-spaced grid and every damping ratio, the
relative-motion equation

    u'' + 2*h*wn*u' + wn^2*u = -ag(t)

is stepped through the whole record with the Newmark-beta method
(beta = 1/4, gamma = 1/2, constant average acceleration, unconditionally
stable). The peak absolute acceleration, relative velocity and relative
displacement are the spectral ordinates Sa, Sv and Sd.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from numba import jit

from ._checks import as_record, check_sampling_rate
from .exceptions import InvalidInputError
from .units import UnitLike, to_si

log = logging.getLogger(__name__)

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_PERIOD_MIN = 0.02       # s
DEFAULT_PERIOD_MAX = 10.0       # s
DEFAULT_PERIOD_DIVISIONS = 200  # -> 201 periods
DEFAULT_DAMPINGS = (0.02, 0.03, 0.05)

NEWMARK_BETA = 0.25
NEWMARK_GAMMA = 0.5

_CONFIG_KEYS = {
    'periodMin': 'period_min',
    'periodMax': 'period_max',
    'periodDivisions': 'period_divisions',
    'dampings': 'dampings',
}


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ResponseSpectrumConfig:
    """Period grid and damping ratios of a response spectrum run.

    Attributes
    ----------
    period_min : float
        Shortest natural period (s). Default 0.02.
    period_max : float
        Longest natural period (s). Default 10.0.
    period_divisions : int
        Number of geometric intervals; the grid has ``period_divisions + 1``
        points. Default 200.
    dampings : Tuple[float, ...]
        Damping ratios in [0, 1), kept in the given order.
        Default (0.02, 0.03, 0.05).
    """
    period_min: float = DEFAULT_PERIOD_MIN
    period_max: float = DEFAULT_PERIOD_MAX
    period_divisions: int = DEFAULT_PERIOD_DIVISIONS
    dampings: Tuple[float, ...] = DEFAULT_DAMPINGS

    def __post_init__(self):
        # accept lists/arrays for dampings but keep the instance hashable
        try:
            object.__setattr__(self, 'period_min', float(self.period_min))
            object.__setattr__(self, 'period_max', float(self.period_max))
            divisions = float(self.period_divisions)
            if divisions.is_integer():
                object.__setattr__(self, 'period_divisions', int(divisions))
            object.__setattr__(self, 'dampings', tuple(float(h) for h in self.dampings))
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Malformed response spectrum option: {exc}") from exc

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> 'ResponseSpectrumConfig':
        """Builds a config from a partial mapping; missing keys keep their defaults.

        Both the camelCase keys of the request envelope (``periodMin``) and
        the attribute names (``period_min``) are accepted.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        kwargs = {}
        valid = {f.name for f in fields(cls)}
        for key, value in options.items():
            name = _CONFIG_KEYS.get(key, key)
            if name not in valid:
                raise InvalidInputError(f"Unknown response spectrum option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def validate(self) -> 'ResponseSpectrumConfig':
        """Raises ``InvalidInputError`` if the period range or dampings are unusable."""
        if not (np.isfinite(self.period_min) and self.period_min > 0):
            raise InvalidInputError(f"period_min must be positive, got {self.period_min}.")
        if not (np.isfinite(self.period_max) and self.period_max > self.period_min):
            raise InvalidInputError(
                f"period_max ({self.period_max}) must exceed period_min ({self.period_min}).")
        if not (float(self.period_divisions).is_integer() and self.period_divisions >= 1):
            raise InvalidInputError(
                f"period_divisions must be an integer >= 1, got {self.period_divisions}.")
        if len(self.dampings) == 0:
            raise InvalidInputError("At least one damping ratio is required.")
        for h in self.dampings:
            if not 0 <= h < 1:
                raise InvalidInputError(f"Damping ratios must lie in [0, 1), got {h}.")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'periodMin': self.period_min,
            'periodMax': self.period_max,
            'periodDivisions': int(self.period_divisions),
            'dampings': list(self.dampings),
        }


@dataclass
class ResponseSpectrumResult:
    """Peak SDOF responses over a period grid, one row per damping ratio.

    `acceleration`, `velocity` and `displacement` have shape
    ``(len(dampings), len(periods))`` and hold absolute acceleration (m/s^2),
    relative velocity (m/s) and relative displacement (m).
    """
    periods: np.ndarray
    dampings: Tuple[float, ...]
    acceleration: np.ndarray
    velocity: np.ndarray
    displacement: np.ndarray
    config: ResponseSpectrumConfig = field(default_factory=ResponseSpectrumConfig)

    @property
    def pseudo_velocity(self) -> np.ndarray:
        """PSV = wn * Sd (m/s)."""
        return (2 * np.pi / self.periods) * self.displacement

    @property
    def pseudo_acceleration(self) -> np.ndarray:
        """PSA = wn^2 * Sd (m/s^2)."""
        return (2 * np.pi / self.periods) ** 2 * self.displacement

    def spectrum_for(self, damping: float) -> Dict[str, np.ndarray]:
        """Sa, Sv and Sd rows of one damping ratio."""
        matches = [k for k, h in enumerate(self.dampings) if np.isclose(h, damping)]
        if not matches:
            raise KeyError(f"Damping {damping} not in {self.dampings}")
        k = matches[0]
        return {
            'periods': self.periods,
            'Sa': self.acceleration[k],
            'Sv': self.velocity[k],
            'Sd': self.displacement[k],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain-list form with the keys of the request/response envelope."""
        return {
            'periods': self.periods.tolist(),
            'dampings': list(self.dampings),
            'acceleration': self.acceleration.tolist(),
            'velocity': self.velocity.tolist(),
            'displacement': self.displacement.tolist(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any],
                  config: Optional[ResponseSpectrumConfig] = None) -> 'ResponseSpectrumResult':
        return cls(
            periods=np.asarray(data['periods'], dtype=float),
            dampings=tuple(float(h) for h in data['dampings']),
            acceleration=np.asarray(data['acceleration'], dtype=float),
            velocity=np.asarray(data['velocity'], dtype=float),
            displacement=np.asarray(data['displacement'], dtype=float),
            config=config if config is not None else ResponseSpectrumConfig(),
        )


# =============================================================================
# PUBLIC API
# =============================================================================

def generate_log_periods(
    period_min: float = DEFAULT_PERIOD_MIN,
    period_max: float = DEFAULT_PERIOD_MAX,
    divisions: int = DEFAULT_PERIOD_DIVISIONS) -> np.ndarray:
    """Geometric period grid ``period_min * ratio**i``, ``i = 0..divisions``.

    Parameters
    ----------
    period_min : float, optional
        First period (s). Must be > 0.
    period_max : float, optional
        Last period (s). Must be > `period_min`.
    divisions : int, optional
        Number of intervals, >= 1.

    Returns
    -------
    np.ndarray
        Strictly increasing array of ``divisions + 1`` periods (s), with
        ``ratio = (period_max / period_min) ** (1 / divisions)``.
    """
    ResponseSpectrumConfig(period_min, period_max, divisions).validate()
    divisions = int(divisions)
    ratio = (period_max / period_min) ** (1.0 / divisions)
    return period_min * ratio ** np.arange(divisions + 1, dtype=float)


def compute_response_spectrum(
    samples: Sequence[float],
    sampling_rate: float,
    unit: UnitLike = 'm/s2',
    config: Optional[Any] = None) -> ResponseSpectrumResult:
    """Sa, Sv and Sd spectra of an acceleration record.

    Parameters
    ----------
    samples : Sequence[float]
        Ground acceleration record in `unit`; at least two samples.
    sampling_rate : float
        Sampling frequency (Hz).
    unit : str or AccelerationUnit, optional
        Unit of `samples` ('m/s2', 'gal', 'g'). Default is m/s^2.
    config : ResponseSpectrumConfig or mapping, optional
        Period grid and damping ratios. Partial mappings are merged over the
        defaults. Default is ``ResponseSpectrumConfig()``.

    Returns
    -------
    ResponseSpectrumResult
        Spectra in SI units, one row per damping in configuration order.

    Raises
    ------
    InvalidInputError
        Raised before any time stepping for short/non-finite records, a
        non-positive sampling rate or an invalid configuration.

    Notes
    -----
    The oscillator starts at rest with relative acceleration ``-ag[0]``.
    Periods much shorter than ``dt`` stay stable under the average
    acceleration scheme but lose high-frequency fidelity; choose
    `period_min` accordingly.
    """
    fs = check_sampling_rate(sampling_rate)
    record = as_record(samples)
    cfg = ResponseSpectrumConfig.from_mapping(config).validate()

    periods = generate_log_periods(cfg.period_min, cfg.period_max, cfg.period_divisions)
    ag = np.ascontiguousarray(to_si(record, unit))
    dt = 1 / fs

    log.info("Response spectrum: %d samples, dt=%.4g s, %d periods x %d dampings.",
             ag.size, dt, periods.size, len(cfg.dampings))

    nd = len(cfg.dampings)
    SA = np.zeros((nd, periods.size))
    SV = np.zeros((nd, periods.size))
    SD = np.zeros((nd, periods.size))
    for k, h in enumerate(cfg.dampings):
        SA[k], SV[k], SD[k] = _newmark_spectrum(periods, ag, h, dt)
        log.debug("Damping %.3f done: max Sa=%.4e m/s^2", h, SA[k].max())

    return ResponseSpectrumResult(
        periods=periods,
        dampings=cfg.dampings,
        acceleration=SA,
        velocity=SV,
        displacement=SD,
        config=cfg,
    )


def sdof_peak_response(
    ag: Sequence[float],
    dt: float,
    period: float,
    damping: float) -> Tuple[float, float, float]:
    """Peak (Sa, Sv, Sd) of one oscillator under ground acceleration `ag` (m/s^2)."""
    if period <= 0:
        raise InvalidInputError(f"Natural period must be positive, got {period}.")
    if dt <= 0:
        raise InvalidInputError(f"Time step must be positive, got {dt}.")
    if not 0 <= damping < 1:
        raise InvalidInputError(f"Damping ratio must lie in [0, 1), got {damping}.")
    data = np.ascontiguousarray(as_record(ag, name='ag'))
    sa, sv, sd = _newmark_spectrum(np.array([float(period)]), data, float(damping), float(dt))
    return float(sa[0]), float(sv[0]), float(sd[0])


# =============================================================================
# INTERNAL (HELPER) FUNCTIONS
# =============================================================================

@jit(nopython=True, cache=True)
def _newmark_spectrum(T: np.ndarray, ag: np.ndarray, zeta: float, dt: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Newmark-beta time stepping for every period in `T` at one damping.

    Parameters
    ----------
    T : np.ndarray
        Natural periods (s), all > 0.
    ag : np.ndarray
        Ground acceleration (m/s^2).
    zeta : float
        Damping ratio.
    dt : float
        Time step (s).

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        - SA: peak |u'' + ag| (absolute acceleration).
        - SV: peak |u'| (relative velocity).
        - SD: peak |u| (relative displacement).
    """
    beta = NEWMARK_BETA
    gamma = NEWMARK_GAMMA
    a0 = 1.0 / (beta * dt * dt)
    a1 = gamma / (beta * dt)
    a2 = 1.0 / (beta * dt)
    a3 = 1.0 / (2.0 * beta) - 1.0
    a4 = gamma / beta - 1.0
    a5 = dt * (gamma / (2.0 * beta) - 1.0)

    nper = T.shape[0]
    n = ag.shape[0]
    SA = np.zeros(nper)
    SV = np.zeros(nper)
    SD = np.zeros(nper)

    for kk in range(nper):
        wn = 2.0 * np.pi / T[kk]
        k_stiff = wn * wn          # k/m
        c_damp = 2.0 * zeta * wn   # c/m
        k_hat = k_stiff + a0 + a1 * c_damp

        d = 0.0
        v = 0.0
        a = -ag[0]
        max_a = 0.0
        max_v = 0.0
        max_d = 0.0

        for i in range(n - 1):
            p_hat = (-ag[i + 1]
                     + a0 * d + a2 * v + a3 * a
                     + c_damp * (a1 * d + a4 * v + a5 * a))
            d_next = p_hat / k_hat
            a_next = a0 * (d_next - d) - a2 * v - a3 * a
            v_next = v + dt * ((1.0 - gamma) * a + gamma * a_next)

            d = d_next
            v = v_next
            a = a_next

            abs_a = abs(a + ag[i + 1])
            if abs_a > max_a:
                max_a = abs_a
            if abs(v) > max_v:
                max_v = abs(v)
            if abs(d) > max_d:
                max_d = abs(d)

        SA[kk] = max_a
        SV[kk] = max_v
        SD[kk] = max_d

    return SA, SV, SD
