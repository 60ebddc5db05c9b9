"""
Cooperative cancellation for a running acquisition.

A CancellationToken is a single flag. It is set from a signal handler (or
any other thread) and polled by the acquisition loop once per line. The
handler does nothing but set the flag, so it is safe to run at any point
of the main thread's execution.

Example
-------
>>> token = CancellationToken()
>>> with token.handle_signals():
...     session = ScanSession(port_config, scan_config, cancel_token=token)
...     session.run(recorder)
"""

import signal
from contextlib import contextmanager
from typing import Iterator, Sequence


class CancellationToken:
    """Flag requesting that an acquisition stop at the next line boundary."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        """Request cancellation. Performs no I/O."""
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def reset(self) -> None:
        self._cancelled = False

    def _on_signal(self, signum, frame) -> None:
        self._cancelled = True

    @contextmanager
    def handle_signals(
        self,
        signals: Sequence[int] = (signal.SIGINT,)
    ) -> Iterator['CancellationToken']:
        """
        Route *signals* to this token while the block runs.

        Previous handlers are restored on exit. Must be used from the
        main thread, as required by the signal module.
        """
        previous = {}
        try:
            for signum in signals:
                previous[signum] = signal.signal(signum, self._on_signal)
            yield self
        finally:
            for signum, handler in previous.items():
                # None: the previous handler was not installed from Python
                signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
