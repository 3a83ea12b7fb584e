"""
One-call analysis of an acceleration record.

Runs the full chain on a clean in-memory record: velocity/displacement
histories, Fourier amplitude and power spectra with the dominant
frequency, descriptive statistics and the SDOF response spectra.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from ._checks import as_record, check_sampling_rate
from .integration import compute_velocity_and_displacement
from .offload import ResponseSpectrumOffloader
from .response import ResponseSpectrumConfig, compute_response_spectrum
from .spectral import DEFAULT_WINDOW, amplitude_spectrum, find_peak_frequency
from .statistics import compute_all
from .units import UnitLike, parse_unit

log = logging.getLogger(__name__)


def analyze_record(
    samples: Sequence[float],
    sampling_rate: float,
    unit: UnitLike = 'm/s2',
    config: Optional[Any] = None,
    window: str = DEFAULT_WINDOW,
    response_spectrum: bool = True,
    offloader: Optional[ResponseSpectrumOffloader] = None) -> Dict[str, Any]:
    """Full analysis of one acceleration record.

    Parameters
    ----------
    samples : Sequence[float]
        Acceleration record in `unit`; at least two samples.
    sampling_rate : float
        Sampling frequency (Hz).
    unit : str or AccelerationUnit, optional
        Unit of `samples`. Default is m/s^2.
    config : ResponseSpectrumConfig or mapping, optional
        Response spectrum period grid and dampings. Default config if None.
    window : str, optional
        Window for the Fourier spectra. Default is 'hanning'.
    response_spectrum : bool, optional
        Compute the SDOF response spectra. Default is True.
    offloader : ResponseSpectrumOffloader, optional
        If given, the response spectra are computed through it (worker with
        in-process fallback); otherwise in-process.

    Returns
    -------
    Dict[str, Any]
        - 'unit' (AccelerationUnit): Resolved input unit.
        - 'velocity' (np.ndarray): Velocity history (m/s).
        - 'displacement' (np.ndarray): Displacement history (m).
        - 'frequencies' (np.ndarray): Frequency axis of the spectra (Hz).
        - 'amplitudes' (np.ndarray): Fourier amplitudes (input unit).
        - 'powers' (np.ndarray): Squared amplitudes.
        - 'peak' (dict): Dominant frequency, see `find_peak_frequency`.
        - 'statistics' (dict): `compute_all` of the raw samples (input unit).
        - 'response_spectrum' (ResponseSpectrumResult or None): SI spectra.
    """
    fs = check_sampling_rate(sampling_rate)
    record = as_record(samples)
    resolved_unit = parse_unit(unit)
    cfg = ResponseSpectrumConfig.from_mapping(config).validate()
    log.info("Analyzing record: %d samples at %.4g Hz (%s).", record.size, fs, resolved_unit.value)

    # dispatch the expensive sweep first so it overlaps the cheap stages
    job = None
    if response_spectrum and offloader is not None:
        job = offloader.submit(record, fs, resolved_unit, cfg)

    histories = compute_velocity_and_displacement(record, fs, resolved_unit)
    spectrum = amplitude_spectrum(record, fs, window=window)
    powers = spectrum['amplitudes'] ** 2
    peak = find_peak_frequency(spectrum['frequencies'], spectrum['amplitudes'])
    statistics = compute_all(record, fs)

    rs = None
    if response_spectrum:
        if job is not None:
            rs = job.result()
        else:
            rs = compute_response_spectrum(record, fs, resolved_unit, cfg)

    log.info("Analysis finished. Peak frequency %.3f Hz.", peak['frequency'])
    return {
        'unit': resolved_unit,
        'velocity': histories['velocity'],
        'displacement': histories['displacement'],
        'frequencies': spectrum['frequencies'],
        'amplitudes': spectrum['amplitudes'],
        'powers': powers,
        'peak': peak,
        'statistics': statistics,
        'response_spectrum': rs,
    }
