"""
Resilience decorators for calls to external exchange rate APIs.

retry() and CircuitBreaker are independent; providers compose them so that
the breaker guards every single attempt and retry drives the attempts:

    call = retry(count=3)(breaker(send))
"""

import logging
import random
import threading
import time
from functools import wraps

from apps.exchange.domain.exceptions import UpstreamError, UpstreamUnavailable

logger = logging.getLogger(__name__)


def retry(count=3, exceptions=(UpstreamError,), base_delay=2, max_jitter=0.1, sleep=time.sleep):
    """
    Retry with exponential backoff plus random jitter.

    :param count: number of retries after the first attempt
    :param exceptions: tuple of exceptions that trigger a retry
    :param base_delay: delay before retry N is base_delay ** N seconds
    :param max_jitter: upper bound of the random seconds added to each delay
    :param sleep: callable used to wait, injectable for tests
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except exceptions as ex:
                    attempt += 1
                    if attempt > count:
                        raise
                    delay = base_delay ** attempt + random.uniform(0, max_jitter)
                    logger.warning(
                        "Retry %d/%d for %s in %.3fs after: %s", attempt, count, getattr(fn, "__name__", fn), delay, ex
                    )
                    sleep(delay)

        return wrapper

    return decorator


class CircuitBreaker:
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold=5, reset_timeout=30, exceptions=(UpstreamError,),
                 clock=time.monotonic, name="circuit"):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.exceptions = exceptions
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._state = self.CLOSED
        self._failures = 0
        self._opened_at = None

    @property
    def state(self) -> str:
        with self._lock:
            if self._state == self.OPEN and self._clock() - self._opened_at >= self.reset_timeout:
                return self.HALF_OPEN
            return self._state

    @property
    def failure_count(self) -> int:
        return self._failures

    def __call__(self, fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            self._before_call()
            try:
                result = fn(*args, **kwargs)
            except self.exceptions:
                self._on_failure()
                raise
            except BaseException:
                self._on_ignored()
                raise
            self._on_success()
            return result

        return wrapper

    def reset(self) -> None:
        with self._lock:
            self._state = self.CLOSED
            self._failures = 0
            self._opened_at = None

    def _before_call(self) -> None:
        with self._lock:
            if self._state == self.CLOSED:
                return
            remaining = self.reset_timeout - (self._clock() - self._opened_at)
            if self._state == self.OPEN and remaining <= 0:
                self._state = self.HALF_OPEN
                logger.info("Circuit %s half-open, probing upstream", self.name)
                return
            # open, or a half-open probe is already in flight
            raise UpstreamUnavailable(
                f"{self.name} is temporarily unavailable (circuit open, retry in {max(remaining, 0):.0f}s)"
            )

    def _on_success(self) -> None:
        with self._lock:
            if self._state != self.CLOSED:
                logger.info("Circuit %s closed", self.name)
            self._state = self.CLOSED
            self._failures = 0
            self._opened_at = None

    def _on_ignored(self) -> None:
        # any other error or interrupt during a probe: back to open, next call probes again
        with self._lock:
            if self._state == self.HALF_OPEN:
                self._state = self.OPEN

    def _on_failure(self) -> None:
        with self._lock:
            self._failures += 1
            if self._state == self.HALF_OPEN or self._failures >= self.failure_threshold:
                self._state = self.OPEN
                self._opened_at = self._clock()
                logger.warning(
                    "Circuit %s opened after %d consecutive failures for %ss",
                    self.name, self._failures, self.reset_timeout
                )
