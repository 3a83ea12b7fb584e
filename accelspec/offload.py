"""
Running the response spectrum sweep off the caller's thread.

``ResponseSpectrumOffloader`` is a caller-owned session handle around a
single-worker ``concurrent.futures`` executor. It keeps at most one job in
flight: submitting a new one cancels the previous job, whose result is then
discarded. Requests and replies use plain dict envelopes so they cross a
process boundary unchanged::

    request: {'samples', 'samplingRate', 'unit', 'config'}
    reply:   {'ok': True, 'result': {...}} or {'ok': False, 'error': '...'}

Whenever the worker is unavailable or fails, the job is computed again
in-process, once. Both paths run the same compiled kernel, so identical
inputs give identical spectra.
"""

import logging
from concurrent import futures
from concurrent.futures import CancelledError, Executor, Future, ProcessPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ._checks import as_record, check_sampling_rate
from .exceptions import ComputationCancelledError, ComputationFailureError
from .response import ResponseSpectrumConfig, ResponseSpectrumResult, compute_response_spectrum
from .units import UnitLike, parse_unit

log = logging.getLogger(__name__)

ExecutorFactory = Callable[[], Executor]

# seconds to wait for a terminated worker to exit
_TERMINATE_TIMEOUT = 5.0


def _default_executor() -> Executor:
    return ProcessPoolExecutor(max_workers=1)


# =============================================================================
# WORKER SIDE
# =============================================================================

def run_request(request: Mapping[str, Any]) -> Dict[str, Any]:
    """Worker entry point: computes one request envelope, never raises.

    Parameters
    ----------
    request : Mapping[str, Any]
        ``{'samples', 'samplingRate', 'unit', 'config'}``; 'unit' and
        'config' may be omitted.

    Returns
    -------
    Dict[str, Any]
        ``{'ok': True, 'result': ResponseSpectrumResult.to_dict()}`` or
        ``{'ok': False, 'error': message}``.
    """
    try:
        result = compute_response_spectrum(
            request['samples'],
            request['samplingRate'],
            request.get('unit'),
            request.get('config'),
        )
    except Exception as exc:  # reported back through the envelope
        return {'ok': False, 'error': f"{type(exc).__name__}: {exc}"}
    return {'ok': True, 'result': result.to_dict()}


# =============================================================================
# CALLER SIDE
# =============================================================================

class SpectrumJob:
    """Handle on one submitted response spectrum computation.

    ``result()`` blocks until the spectrum is available. A job without a
    future (no worker) is computed in-process on the first ``result()`` call.
    """

    def __init__(self, request: Dict[str, Any], config: ResponseSpectrumConfig,
                 future: Optional[Future] = None):
        self._request = request
        self._config = config
        self._future = future
        self._result: Optional[ResponseSpectrumResult] = None
        self._cancelled = False

    @property
    def request(self) -> Dict[str, Any]:
        return self._request

    @property
    def offloaded(self) -> bool:
        return self._future is not None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def running(self) -> bool:
        return self._future is not None and self._future.running()

    def done(self) -> bool:
        if self._cancelled or self._result is not None:
            return True
        return self._future is not None and self._future.done()

    def cancel(self) -> None:
        """Marks the job cancelled; any result it later produces is dropped.

        A job whose result was already delivered stays as it is.
        """
        if self._result is not None:
            return
        self._cancelled = True
        if self._future is not None:
            self._future.cancel()

    def result(self, timeout: Optional[float] = None) -> ResponseSpectrumResult:
        """Waits for the spectrum.

        Parameters
        ----------
        timeout : float, optional
            Seconds to wait for the worker. ``TimeoutError`` propagates and
            leaves the job pending; call ``cancel()`` to discard it.

        Raises
        ------
        ComputationCancelledError
            The job was cancelled before its result was delivered.
        ComputationFailureError
            Both the worker and the in-process retry failed.
        """
        if self._cancelled:
            raise ComputationCancelledError("Response spectrum job was cancelled.")
        if self._result is not None:
            return self._result

        if self._future is None:
            result = self._compute_in_process()
        else:
            result = self._collect_from_worker(timeout)

        if self._cancelled:
            raise ComputationCancelledError("Response spectrum job was cancelled.")
        self._result = result
        return result

    def _collect_from_worker(self, timeout: Optional[float]) -> ResponseSpectrumResult:
        try:
            reply = self._future.result(timeout)
        except CancelledError as exc:
            raise ComputationCancelledError("Response spectrum job was cancelled.") from exc
        except futures.TimeoutError:
            raise
        except Exception as exc:
            log.warning("Offloaded response spectrum failed (%s); retrying in-process.", exc)
            return self._compute_in_process()

        if not reply.get('ok'):
            log.warning("Worker reported failure: %s; retrying in-process.", reply.get('error'))
            return self._compute_in_process()
        return ResponseSpectrumResult.from_dict(reply['result'], config=self._config)

    def _compute_in_process(self) -> ResponseSpectrumResult:
        request = self._request
        try:
            return compute_response_spectrum(
                request['samples'], request['samplingRate'], request['unit'], self._config)
        except Exception as exc:
            raise ComputationFailureError(f"Response spectrum computation failed: {exc}") from exc


class ResponseSpectrumOffloader:
    """Session object dispatching response spectrum runs to a worker.

    Parameters
    ----------
    executor_factory : callable, optional
        Zero-argument callable returning a ``concurrent.futures.Executor``.
        Default is a single-process ``ProcessPoolExecutor``.
    use_worker : bool, optional
        If False every job runs in-process. Default is True.

    Examples
    --------
    >>> with ResponseSpectrumOffloader() as offloader:      # doctest: +SKIP
    ...     job = offloader.submit(acc, 100.0, 'gal')
    ...     spectra = job.result()
    """

    def __init__(self, executor_factory: Optional[ExecutorFactory] = None,
                 use_worker: bool = True):
        self._executor_factory = executor_factory or _default_executor
        self._use_worker = use_worker
        self._executor: Optional[Executor] = None
        self._job: Optional[SpectrumJob] = None

    @property
    def current_job(self) -> Optional[SpectrumJob]:
        return self._job

    def submit(self, samples: Sequence[float], sampling_rate: float,
               unit: UnitLike = 'm/s2', config: Optional[Any] = None) -> SpectrumJob:
        """Validates inputs, cancels the in-flight job and dispatches a new one.

        Raises ``InvalidInputError`` immediately for bad inputs; nothing is
        cancelled or dispatched in that case.
        """
        fs = check_sampling_rate(sampling_rate)
        record = as_record(samples)
        cfg = ResponseSpectrumConfig.from_mapping(config).validate()
        request = {
            'samples': record,
            'samplingRate': fs,
            'unit': parse_unit(unit).value,
            'config': cfg.to_dict(),
        }

        self.cancel()

        future = None
        executor = self._get_executor()
        if executor is not None:
            try:
                future = executor.submit(run_request, request)
            except RuntimeError as exc:
                # shut down or broken pool
                log.warning("Could not dispatch to worker (%s); computing in-process.", exc)
                self._discard_executor()

        job = SpectrumJob(request, cfg, future)
        self._job = job
        log.info("Submitted response spectrum job (%d samples, %s).",
                 record.size, 'offloaded' if future is not None else 'in-process')
        return job

    def compute(self, samples: Sequence[float], sampling_rate: float,
                unit: UnitLike = 'm/s2', config: Optional[Any] = None,
                timeout: Optional[float] = None) -> ResponseSpectrumResult:
        """Blocking ``submit(...).result()``."""
        return self.submit(samples, sampling_rate, unit, config).result(timeout)

    def cancel(self) -> None:
        """Cancels the in-flight job, tearing the worker down if it already started."""
        job = self._job
        self._job = None
        if job is None:
            return
        was_running = job.running()
        job.cancel()
        if was_running:
            log.info("Terminating worker with a running response spectrum job.")
            self._discard_executor()

    def close(self) -> None:
        self.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> 'ResponseSpectrumOffloader':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get_executor(self) -> Optional[Executor]:
        if not self._use_worker:
            return None
        if self._executor is None:
            try:
                self._executor = self._executor_factory()
            except (OSError, NotImplementedError, ImportError) as exc:
                log.warning("Worker unavailable (%s); response spectra will run in-process.", exc)
                self._use_worker = False
                return None
        return self._executor

    def _discard_executor(self) -> None:
        """Shuts the executor down and terminates its worker processes.

        ``shutdown`` alone lets a running task finish, so the workers are
        terminated explicitly (``kill`` if that fails). Handles are taken
        before ``shutdown`` clears them.
        """
        executor = self._executor
        self._executor = None
        if executor is None:
            return
        processes = list((getattr(executor, '_processes', None) or {}).values())
        executor.shutdown(wait=False, cancel_futures=True)
        for process in processes:
            try:
                process.terminate()
            except OSError as exc:
                log.warning("Could not terminate worker %s (%s); killing it.", process.pid, exc)
                process.kill()
        for process in processes:
            process.join(_TERMINATE_TIMEOUT)
