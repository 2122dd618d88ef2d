# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#
from contextlib import suppress
from decimal import Decimal
from functools import cache
from logging import getLogger
from time import sleep
from typing import Self

from kraken.exceptions import (
    KrakenAuthenticationError,
    KrakenInvalidOrderError,
    KrakenPermissionDeniedError,
)
from kraken.spot import Market, Trade, User

from safe_margins.exceptions import BotStateError
from safe_margins.interfaces.exchange import IExchangeRESTService
from safe_margins.models.exchange import (
    AssetBalanceSchema,
    AssetPairInfoSchema,
    CreateOrderResponseSchema,
    OrderInfoSchema,
    PairBalanceSchema,
)

LOG = getLogger(__name__)


class KrakenExchangeRESTServiceAdapter(IExchangeRESTService):
    """Adapter for the Kraken exchange REST API based on python-kraken-sdk."""

    def __init__(
        self: Self,
        api_public_key: str,
        api_secret_key: str,
    ) -> None:
        self.__user_service: User = User(key=api_public_key, secret=api_secret_key)
        self.__trade_service: Trade = Trade(key=api_public_key, secret=api_secret_key)
        self.__market_service: Market = Market()

    # == Implemented abstract methods from IExchangeRESTService ================

    def check_api_key_permissions(
        self: Self,
        base_currency: str,
        quote_currency: str,
    ) -> None:
        """
        Checks if the credentials are valid and if the API keys have the
        required permissions. The order permission is checked by validating
        (not placing) a minimal order on the given market.
        """
        try:
            LOG.info("- Checking permissions of API keys...")

            LOG.info(" - Checking if 'Query Funds' permission set...")
            self.__user_service.get_account_balance()

            LOG.info(" - Checking if 'Query open order & trades' permission set...")
            self.__user_service.get_open_orders(trades=False)

            LOG.info(" - Checking if 'Create & modify orders' permission set...")
            pair_info = self.get_asset_pair_info(
                base_currency=base_currency,
                quote_currency=quote_currency,
            )
            self.__trade_service.create_order(
                pair=self.symbol(
                    base_currency=base_currency,
                    quote_currency=quote_currency,
                ),
                side="buy",
                ordertype="limit",
                volume=f"{Decimal(str(pair_info.ordermin or 10)):f}",
                price="10",
                validate=True,
            )

            LOG.info(" - Checking if 'Cancel & close orders' permission set...")
            with suppress(KrakenInvalidOrderError):
                self.__trade_service.cancel_order(
                    txid="",
                    extra_params={"cl_ord_id": "safe_margins_internal"},
                )

            LOG.info(" - Passed API keys and permissions are valid!")
        except (KrakenAuthenticationError, KrakenPermissionDeniedError) as exc:
            message = (
                "Passed API keys are invalid!"
                if isinstance(exc, KrakenAuthenticationError)
                else "Passed API keys are missing permissions!"
            )
            raise BotStateError(message) from exc

    def check_exchange_status(self: Self, tries: int = 0) -> None:
        """Checks whether the Kraken API is available."""
        if tries == 3:
            LOG.error("- Could not connect to the Kraken Exchange API.")
            raise BotStateError(
                "Could not connect to the Kraken Exchange API after 3 tries.",
            )
        try:
            if (
                status := self.__market_service.get_system_status()
                .get("status", "")
                .lower()
            ) == "online":
                LOG.info("- Kraken Exchange API Status: Online")
                return
            LOG.warning("- Kraken Exchange API Status: %s", status)
            raise ConnectionError("Kraken API is not online.")
        except (
            Exception  # noqa: BLE001
        ) as exc:  # pylint: disable=broad-exception-caught
            LOG.debug(
                "Exception while checking Kraken API status: %s",
                exc,
                exc_info=exc,
            )
            LOG.warning("- Kraken not available. (Try %d/3)", tries + 1)
            sleep(3)
            self.check_exchange_status(tries=tries + 1)

    def get_open_orders(
        self: Self,
        base_currency: str,
        quote_currency: str,
        userref: int | None = None,
    ) -> list[OrderInfoSchema]:
        """
        Returns the open orders of the given market. Kraken reports the pair of
        an order by its altname, e.g. "XBTUSD" for BTC/USD.
        """
        altname = self.get_asset_pair_info(
            base_currency=base_currency,
            quote_currency=quote_currency,
        ).altname

        params = {"trades": False}
        if userref is not None:
            params["userref"] = userref

        orders = []
        for txid, order in self.__user_service.get_open_orders(**params)[
            "open"
        ].items():
            if order["descr"]["pair"] != altname:
                continue
            orders.append(
                OrderInfoSchema(
                    txid=txid,
                    pair=order["descr"]["pair"],
                    side=order["descr"]["type"],
                    price=order["descr"]["price"],
                    vol=order["vol"],
                    vol_exec=order["vol_exec"],
                    status=order["status"],
                    userref=order.get("userref"),
                ),
            )
        LOG.debug("Retrieved %d open orders for %s", len(orders), altname)
        return orders

    def get_balances(self: Self) -> list[AssetBalanceSchema]:
        LOG.debug("Retrieving the user's balances...")
        balances = []
        for symbol, data in self.__user_service.get_balances().items():
            balances.append(AssetBalanceSchema(asset=symbol, **data))
        return balances

    def get_pair_balance(
        self: Self,
        base_currency: str,
        quote_currency: str,
    ) -> PairBalanceSchema:
        """
        Returns the available and overall balances of the quote and base
        currency.
        """
        custom_base, custom_quote = self.__retrieve_custom_base_quote_names(
            base_currency=base_currency,
            quote_currency=quote_currency,
        )

        base_balance = Decimal(0)
        base_available = Decimal(0)
        quote_balance = Decimal(0)
        quote_available = Decimal(0)

        for balance in self.get_balances():
            if balance.asset == custom_base:
                base_balance = Decimal(str(balance.balance))
                base_available = base_balance - Decimal(str(balance.hold_trade))
            elif balance.asset == custom_quote:
                quote_balance = Decimal(str(balance.balance))
                quote_available = quote_balance - Decimal(str(balance.hold_trade))

        LOG.debug(
            "Retrieved balances: %s",
            balances := PairBalanceSchema(
                base_balance=float(base_balance),
                quote_balance=float(quote_balance),
                base_available=float(base_available),
                quote_available=float(quote_available),
            ),
        )
        return balances

    @cache  # noqa: B019
    def symbol(self: Self, base_currency: str, quote_currency: str) -> str:
        """Returns the symbol for the given base and quote currency."""
        return f"{base_currency}/{quote_currency}".upper()

    def create_order(  # noqa: PLR0913
        self: Self,
        *,
        ordertype: str,
        side: str,
        volume: float | str,
        base_currency: str,
        quote_currency: str,
        price: float | str,
        userref: int | None = None,
        validate: bool = False,
    ) -> CreateOrderResponseSchema:
        """Create a new order."""
        params = {}
        if userref is not None:
            params["userref"] = userref

        return CreateOrderResponseSchema(
            txid=self.__trade_service.create_order(
                ordertype=ordertype,
                side=side,
                volume=volume,
                pair=self.symbol(
                    base_currency=base_currency,
                    quote_currency=quote_currency,
                ),
                price=price,
                validate=validate,
                **params,
            )["txid"][0],
        )

    def cancel_order(self: Self, txid: str) -> None:
        """Cancel an order."""
        self.__trade_service.cancel_order(txid=txid)

    def truncate(
        self: Self,
        amount: float | Decimal | str,
        amount_type: str,
        base_currency: str,
        quote_currency: str,
    ) -> str:
        """Truncate amount according to exchange precision."""
        return self.__trade_service.truncate(  # type: ignore[no-any-return]
            amount=amount,
            amount_type=amount_type,
            pair=self.symbol(
                base_currency=base_currency,
                quote_currency=quote_currency,
            ),
        )

    @cache  # noqa: B019
    def get_asset_pair_info(
        self: Self,
        base_currency: str,
        quote_currency: str,
    ) -> AssetPairInfoSchema:
        """Get available asset pair information from the exchange."""
        pair = self.symbol(
            base_currency=base_currency,
            quote_currency=quote_currency,
        )
        if (pair_info := self.__market_service.get_asset_pairs(pair=pair)) == {}:
            raise ValueError(
                f"Could not get asset pair info for {pair}. "
                "Please check the pair name and try again.",
            )
        return AssetPairInfoSchema(**pair_info[next(iter(pair_info))])

    # == Custom Kraken Methods for convenience =================================

    def __retrieve_custom_base_quote_names(
        self: Self,
        base_currency: str,
        quote_currency: str,
    ) -> tuple[str, str]:
        """
        Returns the custom base and quote name for the given currencies.
        On Kraken, crypto assets are prefixed with 'X' (e.g., 'XETH', 'XXBT'),
        while fiat assets are prefixed with 'Z' (e.g., 'ZEUR', 'ZUSD').
        """
        pair_info: AssetPairInfoSchema = self.get_asset_pair_info(
            base_currency=base_currency,
            quote_currency=quote_currency,
        )
        return pair_info.base, pair_info.quote
