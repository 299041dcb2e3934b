"""
OperationPoller — drives a submit-then-poll job to a terminal state.

    PENDING ──check──▶ PENDING (wait `interval`, check again)
            ──check──▶ COMPLETED | FAILED  → on_terminal(result), stop

A check that itself fails transiently (network, 5xx, garbage body) is not a
job failure: wait `error_backoff` and check again. There is no deadline here;
callers that want one wrap the coroutine in asyncio.wait_for().

The sleep function is injectable so tests can run the state machine without
waiting on the wall clock.
"""

import asyncio
import inspect
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from .. import config
from ..base import ProviderAdapter
from ..exceptions import AuthenticationError, TransientProviderError
from .models import GenerationResult, GenerationStatus

logger = logging.getLogger(__name__)

ResultCallback = Callable[[GenerationResult], Union[None, Awaitable[None]]]
SleepFunc = Callable[[float], Awaitable[None]]


async def _call(callback: Optional[ResultCallback], result: GenerationResult):
    if callback is None:
        return
    outcome = callback(result)
    if inspect.isawaitable(outcome):
        await outcome


class OperationPoller:
    def __init__(
        self,
        interval: Optional[float] = None,
        error_backoff: Optional[float] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.interval = config.POLL_INTERVAL if interval is None else interval
        self.error_backoff = config.POLL_ERROR_BACKOFF if error_backoff is None else error_backoff
        self._sleep = sleep

    async def watch(self, handle: str, adapter: ProviderAdapter) -> AsyncIterator[GenerationResult]:
        """
        Yield every status result for `handle`, ending with the terminal one.
        The first check happens immediately; later checks are `interval` apart.
        """
        checks = 0
        while True:
            checks += 1
            try:
                result = await adapter.check_status(handle)
            except AuthenticationError as e:
                logger.warning(f"{adapter.tag} Status check rejected for {handle}: {e.message}")
                yield adapter.failed(e.message, handle=handle)
                return
            except TransientProviderError as e:
                logger.warning(
                    f"{adapter.tag} Status check #{checks} for {handle} errored: {e.message} "
                    f"- retrying in {self.error_backoff:.0f}s"
                )
                await self._sleep(self.error_backoff)
                continue

            yield result
            if result.status != GenerationStatus.PENDING:
                logger.info(f"{adapter.tag} Operation {handle} → {result.status.value} after {checks} check(s)")
                return

            logger.info(f"{adapter.tag} Poll #{checks} for {handle}: PENDING ({result.progress or 0}%)")
            await self._sleep(self.interval)

    async def poll(
        self,
        handle: str,
        adapter: ProviderAdapter,
        on_terminal: Optional[ResultCallback] = None,
        on_update: Optional[ResultCallback] = None,
    ) -> GenerationResult:
        """
        Poll until COMPLETED or FAILED.

        Args:
            handle:      Operation handle returned by adapter.submit().
            adapter:     The asynchronous adapter that owns the operation.
            on_terminal: Called exactly once with the terminal result.
            on_update:   Called with each PENDING result.

        Returns:
            The terminal GenerationResult.
        """
        async for result in self.watch(handle, adapter):
            if result.status == GenerationStatus.PENDING:
                await _call(on_update, result)
                continue
            await _call(on_terminal, result)
            return result
        raise RuntimeError(f"status stream for {handle} ended without a terminal result")


async def poll(
    handle: str,
    adapter: ProviderAdapter,
    interval: float,
    on_terminal: ResultCallback,
    sleep: SleepFunc = asyncio.sleep,
) -> GenerationResult:
    """Functional form of OperationPoller.poll()."""
    poller = OperationPoller(interval=interval, sleep=sleep)
    return await poller.poll(handle, adapter, on_terminal)
