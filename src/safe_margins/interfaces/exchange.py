# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Interfaces for exchange connectivity"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Self

from safe_margins.models.exchange import (
    CreateOrderResponseSchema,
    OrderInfoSchema,
    PairBalanceSchema,
)


class IExchangeRESTService(ABC):
    """Interface for exchange operations."""

    @abstractmethod
    def __init__(
        self: Self,
        api_public_key: str,
        api_secret_key: str,
    ) -> None:
        """Initialize the REST service"""

    @abstractmethod
    def check_api_key_permissions(
        self: Self,
        base_currency: str,
        quote_currency: str,
    ) -> None:
        """Check if the API key permissions are set correctly for the market."""

    @abstractmethod
    def check_exchange_status(self: Self, tries: int = 0) -> None:
        """Check if the exchange is online and operational.

        Raises an exception if the exchange is not online.
        """

    # == Getters for exchange user operations ==================================
    @abstractmethod
    def get_open_orders(
        self: Self,
        base_currency: str,
        quote_currency: str,
        userref: int | None = None,
    ) -> list[OrderInfoSchema]:
        """Get all open orders of a market, optionally filtered by userref."""

    @abstractmethod
    def get_pair_balance(
        self: Self,
        base_currency: str,
        quote_currency: str,
    ) -> PairBalanceSchema:
        """Get the balance for a specific currency pair."""

    # == Exchange trade operations =============================================
    @abstractmethod
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

    @abstractmethod
    def cancel_order(self: Self, txid: str) -> None:
        """Cancel an order."""

    @abstractmethod
    def truncate(
        self: Self,
        amount: float | Decimal | str,
        amount_type: str,
        base_currency: str,
        quote_currency: str,
    ) -> str:
        """Truncate amount according to exchange precision."""
