# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#
# Domain models

from typing import Literal

from pydantic import BaseModel, Field


class OrderIntent(BaseModel):
    """An order the strategy wants to place."""

    side: Literal["buy", "sell"]
    price: float = Field(..., gt=0)
    volume: float = Field(..., ge=0)


class MarginQuote(BaseModel):
    """Buy and sell orders derived from a reference price."""

    reference_price: float = Field(..., gt=0)
    buy: OrderIntent
    sell: OrderIntent


class CancellationReport(BaseModel):
    """Outcome of cancelling all open orders of a market."""

    cancelled: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)  # txid -> error

    @property
    def total(self) -> int:
        return len(self.cancelled) + len(self.failed)
