"""
Example 1: Full Analysis of a Synthetic Acceleration Record

Builds an enveloped, band-limited record in gal and runs the complete chain:
velocity/displacement histories, Fourier spectrum and dominant frequency,
descriptive statistics and 2/3/5 % damped response spectra. Spectra are
written to a text file (period, Sa, Sv, Sd per damping).

"""

import logging

import numpy as np

from accelspec import analyze_record, format_number

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
log = logging.getLogger()

# =============================================================================
# 1. CONFIGURATION & INPUTS
# =============================================================================

fs = 100.0                  # sampling rate (Hz)
duration = 40.0             # record length (s)
units_label = 'gal'
output_file = 'Example1_response_spectra.txt'

rng = np.random.default_rng(2024)
t = np.arange(0, duration, 1 / fs)
envelope = (t / 5.0) ** 2 * np.exp(-(t - 5.0) / 4.0)           # Saragoni-Hart style shape
envelope = envelope / envelope.max()
noise = rng.normal(size=t.size)
band = np.convolve(noise, np.ones(5) / 5, mode='same')         # mild low-pass
acc = 200.0 * envelope * band / np.abs(band).max()             # gal

# =============================================================================
# 2. ANALYSIS
# =============================================================================

results = analyze_record(acc, fs, unit=units_label)

stats = results['statistics']
log.info("PGA: %s %s, RMS: %s %s", format_number(max(stats['max'], -stats['min'])),
         units_label, format_number(stats['rms']), units_label)
log.info("Dominant frequency: %.2f Hz", results['peak']['frequency'])
log.info("PGV: %.4f m/s, PGD: %.4f m",
         np.max(np.abs(results['velocity'])), np.max(np.abs(results['displacement'])))

# =============================================================================
# 3. SAVE RESPONSE SPECTRA
# =============================================================================

rs = results['response_spectrum']
columns = [rs.periods]
header = ['T[s]']
for k, h in enumerate(rs.dampings):
    columns += [rs.acceleration[k], rs.velocity[k], rs.displacement[k]]
    header += [f'Sa_{h:.2f}[m/s2]', f'Sv_{h:.2f}[m/s]', f'Sd_{h:.2f}[m]']

np.savetxt(output_file, np.column_stack(columns), header=' '.join(header), fmt='%.6e')
log.info("Response spectra saved to %s", output_file)
