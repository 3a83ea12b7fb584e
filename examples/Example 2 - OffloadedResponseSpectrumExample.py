"""
Example 2: Response Spectra Computed in a Worker Process

Submits a response spectrum job to a worker, replaces it with a new request
(the first job is cancelled and its result discarded), then waits for the
second one. The offloaded result is compared with an in-process run to show
both paths give identical spectra.

"""

import logging
import time

import numpy as np

from accelspec import (ComputationCancelledError, ResponseSpectrumConfig,
                       ResponseSpectrumOffloader, compute_response_spectrum)

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
log = logging.getLogger()


def main():
    # --- Configuration ---
    fs = 200.0
    t = np.arange(0, 60, 1 / fs)
    acc = 0.3 * np.sin(2 * np.pi * 1.5 * t) * np.exp(-0.1 * t)   # g
    config = ResponseSpectrumConfig(period_min=0.05, period_max=5.0,
                                    period_divisions=100, dampings=(0.02, 0.05))

    with ResponseSpectrumOffloader() as offloader:
        first = offloader.submit(acc, fs, 'g', config)
        # A new analysis replaces the pending one
        second = offloader.submit(acc * 0.5, fs, 'g', config)

        try:
            first.result()
        except ComputationCancelledError:
            log.info("First job cancelled as expected.")

        tic = time.perf_counter()
        offloaded = second.result()
        log.info("Offloaded job finished in %.2f s", time.perf_counter() - tic)

    in_process = compute_response_spectrum(acc * 0.5, fs, 'g', config)
    same = np.array_equal(offloaded.acceleration, in_process.acceleration)
    log.info("Offloaded and in-process spectra identical: %s", same)

    k = offloaded.dampings.index(0.05)
    ipk = np.argmax(offloaded.acceleration[k])
    log.info("5%% damped Sa peak: %.3f m/s2 at T=%.3f s",
             offloaded.acceleration[k, ipk], offloaded.periods[ipk])


if __name__ == '__main__':
    main()
