# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
Exchange models and schemas.

Adapters translate the exchange specific responses into these models, so the
strategy never deals with raw API payloads.
"""

from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator


class AssetPairInfoSchema(BaseModel):
    """Model for required asset pair information"""

    altname: str  # e.g. "XBTUSD"
    base: str  # "XXBT"
    quote: str  # "ZUSD"
    pair_decimals: int  # Number of decimals for prices, e.g. 1
    lot_decimals: int  # Number of decimals for volumes, e.g. 8
    ordermin: float | None = None  # Minimum order volume in base currency


class OrderInfoSchema(BaseModel):
    """Model for open order information"""

    txid: str = Field(..., min_length=1, description="Transaction ID")
    pair: str = Field(..., min_length=1, description="Asset pair name")
    side: str = Field(..., description="Order side (buy/sell)")
    price: float = Field(..., ge=0, description="Order price")
    vol: float = Field(..., gt=0, description="Total volume of the order")
    vol_exec: float = Field(0, ge=0, description="Volume executed")
    status: str = Field(..., description="Order status")  # e.g. "open"
    userref: int | None = Field(None, description="User reference number")

    @field_validator("pair")
    @classmethod
    def clean_pair(cls, v: str) -> str:
        """Ensure the pair is always the altname, e.g. "XBT/USD" -> "XBTUSD"."""
        return v.replace("/", "")


class PairBalanceSchema(BaseModel):
    base_balance: float = Field(..., ge=0, description="Base asset balance")
    quote_balance: float = Field(..., ge=0, description="Quote asset balance")
    base_available: float = Field(..., ge=0, description="Available base asset balance")
    quote_available: float = Field(
        ...,
        ge=0,
        description="Available quote asset balance",
    )

    @model_validator(mode="after")
    def validate_available_balances(self: Self) -> Self:
        """Validate that available balances don't exceed total balances"""
        if self.base_available > self.base_balance:
            raise ValueError(
                f"Available base balance ({self.base_available}) cannot exceed total base balance ({self.base_balance})",
            )
        if self.quote_available > self.quote_balance:
            raise ValueError(
                f"Available quote balance ({self.quote_available}) cannot exceed total quote balance ({self.quote_balance})",
            )
        return self


class AssetBalanceSchema(BaseModel):

    asset: str = Field(..., min_length=1, description="Asset name")  # e.g. "XXBT"
    balance: float = Field(..., ge=0, description="Current balance of the asset")
    hold_trade: float = Field(0, ge=0, description="Balance held in trades")

    @model_validator(mode="after")
    def validate_hold_trade(self: Self) -> Self:
        """Validate that held balance doesn't exceed total balance"""
        if self.hold_trade > self.balance:
            raise ValueError(
                f"Held balance ({self.hold_trade}) cannot exceed total balance ({self.balance})",
            )
        return self


class CreateOrderResponseSchema(BaseModel):
    """Model for the response of a create order operation"""

    txid: str = Field(
        ...,
        min_length=1,
        description="Transaction ID of the created order",
    )
