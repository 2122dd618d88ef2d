# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from pydantic import BaseModel, Field, computed_field, field_validator

DEFAULT_PRICE_FEED_URL = "https://api.cryptonator.com/api/ticker/{base}-{quote}"
DEFAULT_PRICE_FEED_KEY = "ticker.price"


class BotConfigDTO(BaseModel):
    """
    Data transfer object for the general bot configuration. These values are
    passed via CLI or environment variables.
    """

    # ==========================================================================
    # General attributes
    exchange: str = "Kraken"
    api_public_key: str
    api_secret_key: str
    name: str = "safe-margins"
    base_currency: str = Field(..., min_length=1)
    quote_currency: str = Field(..., min_length=1)
    userref: int | None = Field(None, ge=0)
    dry_run: bool = True

    # ==========================================================================
    # Strategy attributes
    volume_percentage: float = Field(0.1, gt=0, le=1)
    price_variation: float = Field(0.2, gt=0, lt=1)
    interval: float = Field(60, gt=0)

    # ==========================================================================
    # Reference price feed
    price_feed_url: str = DEFAULT_PRICE_FEED_URL
    price_feed_key: str = DEFAULT_PRICE_FEED_KEY

    @field_validator("exchange")
    @classmethod
    def validate_exchange(cls, value: str) -> str:
        """Validate the exchange value."""
        if value not in (valid_exchanges := ("Kraken",)):
            raise ValueError(f"Exchange must be one of: {', '.join(valid_exchanges)}")
        return value

    @field_validator("base_currency", "quote_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()

    @computed_field
    def symbol(self) -> str:
        """The market symbol, e.g. "BTC/USD"."""
        return f"{self.base_currency}/{self.quote_currency}"


class TelegramConfigDTO(BaseModel):
    """Pydantic model for Telegram notification configuration."""

    token: str | None = None
    chat_id: str | None = None

    @computed_field
    def enabled(self) -> bool:
        """Return True if both token and chat_id are truthy values."""
        return bool(self.token and self.chat_id)


class NotificationConfigDTO(BaseModel):
    """Pydantic model for notification service configuration."""

    telegram: TelegramConfigDTO = Field(default_factory=TelegramConfigDTO)
