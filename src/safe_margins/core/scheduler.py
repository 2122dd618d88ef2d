# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
Fixed-interval scheduling of coroutines.

The callback is executed once immediately and then on every multiple of the
interval. At most one execution is in flight at a time; if the previous one is
still running when the next interval elapses, that invocation is skipped.
"""

import asyncio
from logging import getLogger
from typing import Awaitable, Callable, Self

LOG = getLogger(__name__)


class PeriodicTask:
    """Runs ``callback`` every ``interval`` seconds until stopped."""

    def __init__(
        self: Self,
        callback: Callable[[], Awaitable[None]],
        interval: float,
        name: str = "tick",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Interval must be larger than 0, got {interval}")

        self.__callback = callback
        self.__interval = interval
        self.__name = name
        self.__in_flight: asyncio.Task | None = None
        self.__stop_event = asyncio.Event()

        self.executed: int = 0
        self.skipped: int = 0
        self.failed: int = 0

    @property
    def in_flight(self: Self) -> bool:
        """True if an execution is currently running."""
        return self.__in_flight is not None and not self.__in_flight.done()

    async def run(self: Self) -> None:
        """Schedule the callback until :meth:`stop` is called."""
        loop = asyncio.get_running_loop()
        next_run = loop.time()

        LOG.info("Scheduling %s every %s seconds.", self.__name, self.__interval)
        while not self.__stop_event.is_set():
            if self.in_flight:
                self.skipped += 1
                LOG.warning(
                    "Previous %s is still running, skipping this interval.",
                    self.__name,
                )
            else:
                self.__in_flight = asyncio.create_task(self.__execute())

            # Anchored to the first run, so slow ticks don't shift the schedule.
            next_run += self.__interval
            try:
                await asyncio.wait_for(
                    self.__stop_event.wait(),
                    timeout=max(0.0, next_run - loop.time()),
                )
            except TimeoutError:
                continue

    async def stop(self: Self) -> None:
        """Stop scheduling and wait for the in-flight execution to finish."""
        self.__stop_event.set()
        if self.__in_flight is not None:
            await asyncio.gather(self.__in_flight, return_exceptions=True)

    async def __execute(self: Self) -> None:
        try:
            await self.__callback()
        except Exception as exc:  # noqa: BLE001 # pylint: disable=broad-exception-caught
            self.failed += 1
            LOG.error("Exception during %s.", self.__name, exc_info=exc)
        finally:
            self.executed += 1
