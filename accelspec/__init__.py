"""
accelspec: seismic analysis of ground-acceleration records.

Given a uniformly sampled acceleration time series, the package derives the
quantities used in seismic assessment:

1.  Unit normalization (m/s^2, gal, g) to SI.
2.  Velocity and displacement histories by baseline-corrected trapezoidal
    integration.
3.  Fourier amplitude and power spectra (windowed, zero-padded radix-2 FFT)
    and the dominant frequency.
4.  Elastic response spectra (Sa, Sv, Sd) of SDOF oscillators over a
    log-spaced period grid and several damping ratios, by Newmark-beta time
    stepping [1]_.
5.  Descriptive statistics of the raw record.

The response spectrum sweep can be sent to a worker process through
``ResponseSpectrumOffloader``, with an in-process fallback.

---
Quick Start
---

.. code-block:: python

    import numpy as np
    from accelspec import analyze_record, ResponseSpectrumConfig

    fs = 100.0
    t = np.arange(0, 20, 1 / fs)
    acc = 150 * np.sin(2 * np.pi * 2.0 * t) * np.exp(-0.2 * t)   # gal

    results = analyze_record(acc, fs, unit='gal',
                             config=ResponseSpectrumConfig(dampings=(0.05,)))

    print(results['peak'])                       # dominant frequency
    rs = results['response_spectrum']
    print(rs.periods[rs.acceleration[0].argmax()])   # period of max Sa

"""

__copyright__ = "Copyright 2025, accelspec developers"
__license__ = "MIT"
__version__ = "0.1.0"

# =============================================================================
# IMPORTS
# =============================================================================
from .analysis import analyze_record
from .exceptions import (
    AccelSpecError,
    ComputationCancelledError,
    ComputationFailureError,
    InvalidInputError,
)
from .integration import compute_velocity_and_displacement, integrate, remove_baseline, time_vector
from .offload import ResponseSpectrumOffloader, SpectrumJob, run_request
from .response import (
    DEFAULT_DAMPINGS,
    DEFAULT_PERIOD_DIVISIONS,
    DEFAULT_PERIOD_MAX,
    DEFAULT_PERIOD_MIN,
    ResponseSpectrumConfig,
    ResponseSpectrumResult,
    compute_response_spectrum,
    generate_log_periods,
    sdof_peak_response,
)
from .spectral import (
    WINDOW_TYPES,
    amplitude_spectrum,
    apply_window,
    fft_transform,
    find_peak_frequency,
    next_power_of_two,
    power_spectrum,
    zero_pad,
)
from .statistics import compute_all, format_number
from .units import (
    G_STANDARD,
    AccelerationUnit,
    conversion_factor,
    displacement_to_cm,
    from_si,
    parse_unit,
    to_si,
    velocity_to_cm,
)

__all__ = [
    'AccelSpecError', 'AccelerationUnit', 'ComputationCancelledError',
    'ComputationFailureError', 'DEFAULT_DAMPINGS', 'DEFAULT_PERIOD_DIVISIONS',
    'DEFAULT_PERIOD_MAX', 'DEFAULT_PERIOD_MIN', 'G_STANDARD', 'InvalidInputError',
    'ResponseSpectrumConfig', 'ResponseSpectrumOffloader', 'ResponseSpectrumResult',
    'SpectrumJob', 'WINDOW_TYPES', 'amplitude_spectrum', 'analyze_record',
    'apply_window', 'compute_all', 'compute_response_spectrum',
    'compute_velocity_and_displacement', 'conversion_factor', 'displacement_to_cm',
    'fft_transform', 'find_peak_frequency', 'format_number', 'from_si',
    'generate_log_periods', 'integrate', 'next_power_of_two', 'parse_unit',
    'power_spectrum', 'remove_baseline', 'run_request', 'sdof_peak_response',
    'time_vector', 'to_si', 'velocity_to_cm', 'zero_pad',
]


# =============================================================================
# MODULE METADATA & REFERENCES
# =============================================================================

"""
REFERENCES:

[1] Newmark, N. M. (1959). A method of computation for structural dynamics.
    Journal of the Engineering Mechanics Division, ASCE, 85(3), 67-94.

[2] Cooley, J. W., & Tukey, J. W. (1965). An algorithm for the machine
    calculation of complex Fourier series. Mathematics of Computation,
    19(90), 297-301.

[3] Chopra, A. K. Dynamics of Structures: Theory and Applications to
    Earthquake Engineering. Pearson. (Chapter 6, response spectra.)
"""
