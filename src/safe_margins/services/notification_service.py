# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Self

from safe_margins.core.event_bus import Event, EventBus
from safe_margins.interfaces import INotificationChannel
from safe_margins.models.configuration import BotConfigDTO, NotificationConfigDTO

LOG = getLogger(__name__)

#: Message templates per event type. Besides the event's data, the templates
#: can use the bot's name, symbol, base_currency and quote_currency.
MESSAGES: dict[str, str] = {
    "bot_started": "✅ {name} is starting on {symbol}!",
    "order_placed": "✅ {name}: Placed {side} order of {volume} {base_currency}"
    " @ {price} {quote_currency} ({txid})",
    "cancellation_failed": "⚠️ {name}: Failed to cancel {count} order(s) on"
    " {symbol}: {txids}",
    "bot_terminated": "{name} terminated.\nReason: {reason}",
}


class NotificationService:
    """
    Turns the bot's events into messages and sends them through the
    notification channels.

    Channels are created from the notification config unless passed
    explicitly.
    """

    def __init__(
        self: Self,
        config: NotificationConfigDTO,
        bot_config: BotConfigDTO,
        channels: list[INotificationChannel] | None = None,
    ) -> None:
        self.__channels: list[INotificationChannel] = (
            self.__channels_from_config(config) if channels is None else channels
        )
        self.__context = {
            "name": bot_config.name,
            "symbol": bot_config.symbol,
            "base_currency": bot_config.base_currency,
            "quote_currency": bot_config.quote_currency,
        }

    @staticmethod
    def __channels_from_config(
        config: NotificationConfigDTO,
    ) -> list[INotificationChannel]:
        channels: list[INotificationChannel] = []
        if config.telegram.enabled:
            from safe_margins.adapters.notification import (  # noqa: PLC0415 # pylint: disable=import-outside-toplevel
                TelegramNotificationChannelAdapter,
            )

            channels.append(
                TelegramNotificationChannelAdapter(
                    bot_token=config.telegram.token,
                    chat_id=config.telegram.chat_id,
                ),
            )
        return channels

    def subscribe(self: Self, event_bus: EventBus) -> None:
        """Subscribe to all events that result in a notification."""
        for event_type in MESSAGES:
            event_bus.subscribe(event_type, self.on_event)

    def on_event(self: Self, event: Event) -> None:
        self.notify(MESSAGES[event.type].format(**self.__context, **event.data))

    def notify(self: Self, message: str) -> bool:
        """
        Send a message through all channels. Returns True if at least one
        channel delivered it.
        """
        LOG.info("Sending notification: %s", message)
        results = [channel.send(message) for channel in self.__channels]
        return any(results)
