# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
Safe margin limit order strategy

Every tick cancels the open orders of the market and places one limit sell
order above and one limit buy order below an external reference price. The
distance to the reference price is given by the price variation, the order
sizes by the volume percentage of the available balances.

Example: With a reference price of 10000 USD for BTC/USD and a price variation
of 20%, the sell order is placed at 12000 USD and the buy order at 8000 USD.
Having 0.01 BTC and 30 USD available with a volume percentage of 10%, the
sell volume is 0.001 BTC and the buy volume 30 * 0.1 / 10000 = 0.0003 BTC,
since buying is limited by what the quote balance can afford.
"""

import asyncio
import math
from logging import getLogger
from typing import Self

from safe_margins.core.event_bus import Event, EventBus
from safe_margins.exceptions import InvalidPriceError
from safe_margins.interfaces import IExchangeRESTService, IPriceFeed
from safe_margins.models.configuration import BotConfigDTO
from safe_margins.models.domain import CancellationReport, MarginQuote, OrderIntent
from safe_margins.models.exchange import CreateOrderResponseSchema

LOG = getLogger(__name__)


def calculate_margin_quote(
    reference_price: float,
    price_variation: float,
    volume_percentage: float,
    base_available: float,
    quote_available: float,
) -> MarginQuote:
    """
    Computes the buy and sell orders around ``reference_price``.

    Raises InvalidPriceError if the reference price is not a finite positive
    number or if the price variation leaves no positive order price, e.g. a
    variation of 1 or more would put the buy order at 0 or below. Raises
    ValueError if the volume percentage is not within [0, 1].
    """
    if not math.isfinite(reference_price) or reference_price <= 0:
        raise InvalidPriceError(
            f"Reference price must be a finite positive number, got {reference_price}",
        )
    if not 0 <= volume_percentage <= 1:
        raise ValueError(
            f"Volume percentage must be within [0, 1], got {volume_percentage}",
        )

    sell_price = reference_price * (1 + price_variation)
    buy_price = reference_price * (1 - price_variation)
    if not (math.isfinite(price_variation) and sell_price > 0 and buy_price > 0):
        raise InvalidPriceError(
            f"Price variation {price_variation} results in a non-positive order"
            f" price (buy: {buy_price}, sell: {sell_price})",
        )

    return MarginQuote(
        reference_price=reference_price,
        sell=OrderIntent(
            side="sell",
            price=sell_price,
            volume=base_available * volume_percentage,
        ),
        buy=OrderIntent(
            side="buy",
            price=buy_price,
            volume=(quote_available * volume_percentage) / reference_price,
        ),
    )


class SafeMarginsStrategy:

    def __init__(
        self: Self,
        config: BotConfigDTO,
        rest_api: IExchangeRESTService,
        price_feed: IPriceFeed,
        event_bus: EventBus,
    ) -> None:
        self._config = config
        self._rest_api = rest_api
        self._price_feed = price_feed
        self._event_bus = event_bus

    async def tick(self: Self) -> None:
        """
        Cancels the open orders, computes the new orders from the current
        reference price and balances and places them unless in dry-run mode.

        Exceptions of the exchange or price feed are not handled here, so a
        failing tick leaves the market as far as it got.
        """
        LOG.info("Starting safe margin limit order strategy on %s", self._config.symbol)

        await self.cancel_open_orders()

        LOG.info("Fetching the reference price for %s", self._config.symbol)
        reference_price = await asyncio.to_thread(
            self._price_feed.get_price,
            self._config.base_currency,
            self._config.quote_currency,
        )
        LOG.info(
            "The reference price for %s is %s",
            self._config.symbol,
            reference_price,
        )

        balances = await asyncio.to_thread(
            self._rest_api.get_pair_balance,
            base_currency=self._config.base_currency,
            quote_currency=self._config.quote_currency,
        )

        quote = calculate_margin_quote(
            reference_price=reference_price,
            price_variation=self._config.price_variation,
            volume_percentage=self._config.volume_percentage,
            base_available=balances.base_available,
            quote_available=balances.quote_available,
        )
        LOG.info(
            "Buy %s %s when the price is %s %s",
            quote.buy.volume,
            self._config.base_currency,
            quote.buy.price,
            self._config.quote_currency,
        )
        LOG.info(
            "Sell %s %s when the price is %s %s",
            quote.sell.volume,
            self._config.base_currency,
            quote.sell.price,
            self._config.quote_currency,
        )

        if self._config.dry_run:
            LOG.warning("Trade execution is disabled (dry run), not placing orders.")
            return

        await self.place_orders(quote)

    async def cancel_open_orders(self: Self) -> CancellationReport:
        """
        Cancels all open orders of the market and collects the outcome of each
        cancellation. Failed cancellations are reported but do not abort.
        """
        LOG.info("Fetching current orders on %s", self._config.symbol)
        open_orders = await asyncio.to_thread(
            self._rest_api.get_open_orders,
            base_currency=self._config.base_currency,
            quote_currency=self._config.quote_currency,
            userref=self._config.userref,
        )

        LOG.info("Cancelling %d open orders on %s", len(open_orders), self._config.symbol)
        report = CancellationReport()
        # Kraken requires increasing nonces per API key, so one after another.
        for order in open_orders:
            try:
                await asyncio.to_thread(self._rest_api.cancel_order, order.txid)
            except Exception as exc:  # noqa: BLE001 # pylint: disable=broad-exception-caught
                LOG.error("Failed to cancel order '%s': %s", order.txid, exc)
                report.failed[order.txid] = str(exc)
            else:
                LOG.debug("Cancelled order '%s'", order.txid)
                report.cancelled.append(order.txid)

        LOG.info(
            "Finished cancelling %d of %d open orders",
            len(report.cancelled),
            report.total,
        )
        if report.failed:
            self._event_bus.publish(
                Event(
                    type="cancellation_failed",
                    data={
                        "count": len(report.failed),
                        "txids": ", ".join(report.failed),
                    },
                ),
            )
        return report

    async def place_orders(
        self: Self,
        quote: MarginQuote,
    ) -> list[CreateOrderResponseSchema]:
        """Places the sell order followed by the buy order."""
        placed = []
        for intent in (quote.sell, quote.buy):
            if (response := await self.__place_order(intent)) is not None:
                placed.append(response)

        LOG.info("Successfully placed %d orders", len(placed))
        return placed

    async def __place_order(
        self: Self,
        intent: OrderIntent,
    ) -> CreateOrderResponseSchema | None:
        volume = await asyncio.to_thread(
            self._rest_api.truncate,
            amount=intent.volume,
            amount_type="volume",
            base_currency=self._config.base_currency,
            quote_currency=self._config.quote_currency,
        )
        if float(volume) == 0:
            LOG.warning(
                "Not placing %s order, volume is zero after truncation.",
                intent.side,
            )
            return None

        price = await asyncio.to_thread(
            self._rest_api.truncate,
            amount=intent.price,
            amount_type="price",
            base_currency=self._config.base_currency,
            quote_currency=self._config.quote_currency,
        )

        LOG.info(
            "Placing %s order of %s %s @ %s %s",
            intent.side,
            volume,
            self._config.base_currency,
            price,
            self._config.quote_currency,
        )
        response = await asyncio.to_thread(
            self._rest_api.create_order,
            ordertype="limit",
            side=intent.side,
            volume=volume,
            base_currency=self._config.base_currency,
            quote_currency=self._config.quote_currency,
            price=price,
            userref=self._config.userref,
        )

        self._event_bus.publish(
            Event(
                type="order_placed",
                data={
                    "side": intent.side,
                    "volume": volume,
                    "price": price,
                    "txid": response.txid,
                },
            ),
        )
        return response
