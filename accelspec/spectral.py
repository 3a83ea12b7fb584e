"""
Fourier amplitude and power spectra of a uniformly sampled record.

Pipeline: window -> zero-pad to the next power of two -> in-place radix-2
Cooley-Tukey FFT -> single-sided magnitude up to the Nyquist bin.
"""

import logging
from typing import Any, Dict, Sequence

import numpy as np
from numba import jit

from ._checks import as_record, check_sampling_rate
from .exceptions import InvalidInputError

log = logging.getLogger(__name__)

WINDOW_TYPES = ('hanning', 'hamming', 'blackman', 'rectangular')
DEFAULT_WINDOW = 'hanning'
DEFAULT_MIN_PEAK_FREQUENCY = 0.1  # Hz, keeps DC leakage out of the peak search

NO_PEAK = {'frequency': 0.0, 'amplitude': 0.0, 'index': -1}


# =============================================================================
# PUBLIC API
# =============================================================================

def next_power_of_two(n: int) -> int:
    """Smallest power of two >= `n` (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def apply_window(x: Sequence[float], window: str = DEFAULT_WINDOW) -> np.ndarray:
    """Multiplies `x` elementwise by a tapering window.

    Parameters
    ----------
    x : Sequence[float]
        Input series. Not modified.
    window : str, optional
        One of 'hanning' (default), 'hamming', 'blackman' or 'rectangular'.
        Unrecognised names fall back to 'rectangular'.

    Returns
    -------
    np.ndarray
        Windowed copy of `x`.

    Notes
    -----
    The windows are evaluated over ``i = 0..n-1`` with ``n-1`` in the
    denominator (symmetric form), e.g. Hanning ``0.5*(1 - cos(2*pi*i/(n-1)))``.
    A single-sample series is returned with weight 1.
    """
    data = np.array(x, dtype=float)
    n = data.size
    name = (window or 'rectangular').lower()
    if name not in WINDOW_TYPES:
        log.warning("Unknown window type %r; using rectangular window.", window)
        name = 'rectangular'
    if name == 'rectangular' or n < 2:
        return data

    phase = 2 * np.pi * np.arange(n) / (n - 1)
    if name == 'hanning':
        w = 0.5 * (1 - np.cos(phase))
    elif name == 'hamming':
        w = 0.54 - 0.46 * np.cos(phase)
    else:
        w = 0.42 - 0.5 * np.cos(phase) + 0.08 * np.cos(2 * phase)
    return data * w


def zero_pad(x: Sequence[float]) -> np.ndarray:
    """Appends trailing zeros up to the next power of two length."""
    data = np.array(x, dtype=float)
    n_fft = next_power_of_two(data.size)
    if n_fft == data.size:
        return data
    return np.pad(data, (0, n_fft - data.size))


def fft_transform(real: np.ndarray, imag: np.ndarray) -> None:
    """In-place radix-2 FFT of the complex sequence ``real + 1j*imag``.

    Both arrays must be float64 numpy arrays of the same power-of-two length;
    they are overwritten with the transform (``exp(-2j*pi*k*n/N)`` kernel,
    no scaling).
    """
    if not (isinstance(real, np.ndarray) and isinstance(imag, np.ndarray)):
        raise InvalidInputError("fft_transform works in place on numpy arrays.")
    if real.dtype != np.float64 or imag.dtype != np.float64:
        raise InvalidInputError("fft_transform requires float64 arrays.")
    n = real.size
    if imag.size != n:
        raise InvalidInputError(f"real/imag length mismatch ({n} vs {imag.size}).")
    if n & (n - 1):
        raise InvalidInputError(f"FFT length must be a power of two, got {n}.")
    _radix2_fft(real, imag)


def amplitude_spectrum(
    x: Sequence[float],
    sampling_rate: float,
    window: str = DEFAULT_WINDOW,
    normalize: bool = True) -> Dict[str, np.ndarray]:
    """Single-sided Fourier amplitude spectrum.

    Parameters
    ----------
    x : Sequence[float]
        Time series (any unit); at least two samples.
    sampling_rate : float
        Sampling frequency (Hz).
    window : str, optional
        Window applied before the transform. Default is 'hanning'.
    normalize : bool, optional
        Scale DC and Nyquist bins by 1/N and every other bin by 2/N, so a
        unit sine reads as amplitude 1. Default is True.

    Returns
    -------
    Dict[str, np.ndarray]
        - 'frequencies' (np.ndarray): ``k * fs / N`` for ``k = 0..N/2`` (Hz).
        - 'amplitudes' (np.ndarray): ``|X[k]|``, same length.
        N is the zero-padded length.
    """
    fs = check_sampling_rate(sampling_rate)
    data = as_record(x)

    real = np.ascontiguousarray(zero_pad(apply_window(data, window)))
    imag = np.zeros_like(real)
    n_fft = real.size
    _radix2_fft(real, imag)

    half = n_fft // 2
    amplitudes = np.sqrt(real[:half + 1] ** 2 + imag[:half + 1] ** 2)
    if normalize:
        amplitudes[1:half] *= 2.0 / n_fft
        amplitudes[0] /= n_fft
        amplitudes[half] /= n_fft
    frequencies = np.arange(half + 1) * (fs / n_fft)

    log.debug("FFT: %d samples padded to %d, df=%.5f Hz", data.size, n_fft, fs / n_fft)
    return {'frequencies': frequencies, 'amplitudes': amplitudes}


def power_spectrum(
    x: Sequence[float],
    sampling_rate: float,
    window: str = DEFAULT_WINDOW,
    normalize: bool = True) -> Dict[str, np.ndarray]:
    """Elementwise square of `amplitude_spectrum` on the same frequency axis."""
    spec = amplitude_spectrum(x, sampling_rate, window=window, normalize=normalize)
    return {'frequencies': spec['frequencies'], 'powers': spec['amplitudes'] ** 2}


def find_peak_frequency(
    frequencies: Sequence[float],
    amplitudes: Sequence[float],
    min_freq: float = DEFAULT_MIN_PEAK_FREQUENCY) -> Dict[str, Any]:
    """Locates the largest amplitude at or above `min_freq`.

    Parameters
    ----------
    frequencies : Sequence[float]
        Frequency axis (Hz).
    amplitudes : Sequence[float]
        Spectrum ordinates aligned with `frequencies`.
    min_freq : float, optional
        Bins below this frequency are ignored. Default is 0.1 Hz.

    Returns
    -------
    Dict[str, Any]
        'frequency', 'amplitude' and 'index' of the peak. Ties go to the
        lowest frequency. If no bin qualifies the result is
        ``{'frequency': 0.0, 'amplitude': 0.0, 'index': -1}``.
    """
    freqs = np.asarray(frequencies, dtype=float)
    amps = np.asarray(amplitudes, dtype=float)
    if freqs.shape != amps.shape:
        raise InvalidInputError(
            f"frequencies and amplitudes differ in shape ({freqs.shape} vs {amps.shape}).")

    candidates = np.flatnonzero(freqs >= min_freq)
    if candidates.size == 0:
        log.debug("No spectral bin at or above %.3f Hz.", min_freq)
        return dict(NO_PEAK)

    # argmax returns the first occurrence, i.e. the lowest qualifying bin
    k = int(candidates[np.argmax(amps[candidates])])
    return {'frequency': float(freqs[k]), 'amplitude': float(amps[k]), 'index': k}


# =============================================================================
# INTERNAL (HELPER) FUNCTIONS
# =============================================================================

@jit(nopython=True, cache=True)
def _radix2_fft(real: np.ndarray, imag: np.ndarray) -> None:
    """Iterative Cooley-Tukey kernel. Length must be a power of two.

    Bit-reversal reordering first, then log2(N) butterfly stages. Twiddle
    factors are advanced by complex rotation so only one cos/sin pair is
    evaluated per stage.
    """
    n = real.shape[0]
    if n <= 1:
        return

    # Bit-reversal permutation
    j = 0
    for i in range(n):
        if i < j:
            tmp = real[i]; real[i] = real[j]; real[j] = tmp
            tmp = imag[i]; imag[i] = imag[j]; imag[j] = tmp
        m = n >> 1
        while m >= 1 and j >= m:
            j -= m
            m >>= 1
        j += m

    # Butterflies
    mmax = 1
    while mmax < n:
        theta = -np.pi / mmax
        wpr = np.cos(theta)
        wpi = np.sin(theta)
        wr = 1.0
        wi = 0.0
        step = mmax << 1
        for m in range(mmax):
            for i in range(m, n, step):
                k = i + mmax
                tr = wr * real[k] - wi * imag[k]
                ti = wr * imag[k] + wi * real[k]
                real[k] = real[i] - tr
                imag[k] = imag[i] - ti
                real[i] += tr
                imag[i] += ti
            wtemp = wr
            wr = wr * wpr - wi * wpi
            wi = wi * wpr + wtemp * wpi
        mmax = step
