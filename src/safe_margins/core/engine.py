# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
import signal
from importlib.metadata import PackageNotFoundError, version
from logging import ERROR, INFO, getLogger
from typing import Self

from safe_margins.core.event_bus import Event, EventBus
from safe_margins.core.scheduler import PeriodicTask
from safe_margins.core.state_machine import StateMachine, States
from safe_margins.interfaces import IExchangeRESTService, IPriceFeed
from safe_margins.models.configuration import BotConfigDTO, NotificationConfigDTO
from safe_margins.services.notification_service import NotificationService
from safe_margins.strategies.safe_margins import SafeMarginsStrategy

LOG = getLogger(__name__)


def _package_version() -> str:
    try:
        return version("safe-margins")
    except PackageNotFoundError:
        return "unknown"


class BotEngine:
    """
    Orchestrates the bot's components: checks the credentials and the
    exchange, then runs the strategy on a fixed interval until a shutdown is
    requested.
    """

    def __init__(
        self: Self,
        bot_config: BotConfigDTO,
        notification_config: NotificationConfigDTO,
    ) -> None:
        LOG.info("Initiate the safe-margins instance (v%s)", _package_version())
        LOG.debug(
            "Config: %s",
            bot_config.model_dump(exclude={"api_public_key", "api_secret_key"}),
        )

        self.__config = bot_config
        self.__event_bus = EventBus()
        self.__state_machine = StateMachine()

        self.__rest_api = self.__exchange_factory()
        self.__price_feed = self.__price_feed_factory()

        # == Application services ==============================================
        ##
        self.__notification_service = NotificationService(
            notification_config,
            bot_config=self.__config,
        )
        self.__strategy = SafeMarginsStrategy(
            config=self.__config,
            rest_api=self.__rest_api,
            price_feed=self.__price_feed,
            event_bus=self.__event_bus,
        )
        self.__scheduler = PeriodicTask(
            self.__strategy.tick,
            interval=self.__config.interval,
            name="safe margin tick",
        )

        self.__notification_service.subscribe(self.__event_bus)

    @property
    def state_machine(self: Self) -> StateMachine:
        return self.__state_machine

    def __exchange_factory(self: Self) -> IExchangeRESTService:
        """Create the exchange service based on the configuration."""
        if self.__config.exchange == "Kraken":
            from safe_margins.adapters.exchanges.kraken import (  # noqa: PLC0415 # pylint: disable=import-outside-toplevel
                KrakenExchangeRESTServiceAdapter,
            )

            return KrakenExchangeRESTServiceAdapter(
                api_public_key=self.__config.api_public_key,
                api_secret_key=self.__config.api_secret_key,
            )
        raise ValueError(f"Unsupported exchange: {self.__config.exchange}")

    def __price_feed_factory(self: Self) -> IPriceFeed:
        from safe_margins.adapters.price_feed import (  # noqa: PLC0415 # pylint: disable=import-outside-toplevel
            HTTPPriceFeedAdapter,
        )

        return HTTPPriceFeedAdapter(
            url_template=self.__config.price_feed_url,
            key=self.__config.price_feed_key,
        )

    async def run(self: Self) -> int:
        """
        Start the bot and block until it is shut down.

        Returns the exit status: 0 for a requested shutdown, 1 if the bot
        could not start or stopped due to an error.
        """
        if not self.__config.api_public_key or not self.__config.api_secret_key:
            LOG.error("You need to set your API key and secret to run the bot!")
            return 1

        LOG.info("Starting safe-margins...")

        # ======================================================================
        # Handle the shutdown signals
        #
        # A controlled shutdown is initiated by sending a SIGINT or SIGTERM
        # signal to the process. The running tick is awaited before exiting.
        ##
        def _signal_handler() -> None:
            LOG.warning("Initiate a controlled shutdown of the algorithm...")
            self.__state_machine.transition_to(States.SHUTDOWN_REQUESTED)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

        try:
            # ==================================================================
            # Try to connect to the exchange API, validate credentials and API
            # key permissions.
            ##
            try:
                await asyncio.to_thread(self.__rest_api.check_exchange_status)
                await asyncio.to_thread(
                    self.__rest_api.check_api_key_permissions,
                    base_currency=self.__config.base_currency,
                    quote_currency=self.__config.quote_currency,
                )
            except Exception as exc:  # noqa: BLE001 # pylint: disable=broad-exception-caught
                LOG.debug("Exception during initialization", exc_info=exc)
                self.__state_machine.transition_to(States.ERROR)
                return await self.terminate(f"Initialization failed: {exc}")

            if self.__state_machine.state == States.SHUTDOWN_REQUESTED:
                return await self.terminate(
                    "The algorithm was shut down during initialization!",
                    exception=False,
                )

            self.__state_machine.transition_to(States.RUNNING)
            self.__event_bus.publish(Event(type="bot_started"))

            # ==================================================================
            # Run the strategy until shutdown
            ##
            scheduler_task = asyncio.create_task(self.__scheduler.run())
            shutdown_task = asyncio.create_task(
                self.__state_machine.wait_for_shutdown(),
            )
            await asyncio.wait(
                [scheduler_task, shutdown_task],
                return_when=asyncio.FIRST_COMPLETED,
            )
            shutdown_task.cancel()
            await self.__scheduler.stop()

            if scheduler_task.done() and (exc := scheduler_task.exception()):
                LOG.error("The scheduler stopped unexpectedly.", exc_info=exc)
                self.__state_machine.transition_to(States.ERROR)
            else:
                await scheduler_task
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

        if self.__state_machine.state == States.SHUTDOWN_REQUESTED:
            return await self.terminate(
                "The algorithm was shut down successfully!",
                exception=False,
            )
        return await self.terminate("The algorithm was shut down due to an error!")

    async def terminate(
        self: Self,
        reason: str = "",
        *,
        exception: bool = True,
    ) -> int:
        """
        Notify about the termination of the bot and return the exit status.
        """
        LOG.log(ERROR if exception else INFO, reason)
        self.__event_bus.publish(
            Event(type="bot_terminated", data={"reason": reason}),
        )
        return int(exception)
