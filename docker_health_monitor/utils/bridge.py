"""Run coroutines to completion from synchronous code."""

import asyncio
import logging
import threading
from typing import Awaitable, Optional, TypeVar


T = TypeVar('T')


class AsyncBridge:
    """
    Dedicated event loop thread for synchronous callers.

    prometheus_client invokes collectors synchronously, possibly from a thread
    that already runs an event loop. Coroutines submitted here are driven by
    the bridge's own loop, so the caller can block on the result without
    waiting on itself.
    """

    def __init__(self, name: str = "async-bridge", logger: logging.Logger = None):
        """
        Start the bridge thread.

        Args:
            name: Thread name
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self._loop = asyncio.new_event_loop()
        self._started = threading.Event()
        self._thread = threading.Thread(target=self._run_loop, name=name, daemon=True)
        self._thread.start()
        self._started.wait()
        self.logger.debug(f"Started event loop thread {name}")

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.call_soon(self._started.set)
        try:
            self._loop.run_forever()
        finally:
            self._loop.run_until_complete(self._loop.shutdown_default_executor())
            self._loop.close()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._loop.is_closed()

    def run(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        """
        Block the calling thread until the coroutine finishes.

        Args:
            coro: Coroutine to execute on the bridge loop
            timeout: Optional timeout in seconds

        Returns:
            Result of the coroutine

        Raises:
            RuntimeError: If called from the bridge thread or after close()
            concurrent.futures.TimeoutError: If timeout expires
            Exception: Whatever the coroutine raised
        """
        if threading.current_thread() is self._thread:
            coro.close()
            raise RuntimeError("AsyncBridge.run() called from its own event loop thread")

        if not self.is_running:
            coro.close()
            raise RuntimeError("AsyncBridge is closed")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout)
        except BaseException:
            future.cancel()
            raise

    def close(self) -> None:
        """Stop the loop and wait for the thread to exit."""
        if not self._thread.is_alive():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self.logger.debug("Stopped event loop thread")
