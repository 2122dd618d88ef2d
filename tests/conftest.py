# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from unittest.mock import Mock

import pytest

from safe_margins.interfaces import IExchangeRESTService, IPriceFeed
from safe_margins.models.configuration import BotConfigDTO
from safe_margins.models.exchange import (
    CreateOrderResponseSchema,
    PairBalanceSchema,
)


@pytest.fixture
def bot_config() -> BotConfigDTO:
    return BotConfigDTO(
        api_public_key="test_api_key",
        api_secret_key="test_secret_key",
        name="TestBot",
        base_currency="BTC",
        quote_currency="USD",
        volume_percentage=0.1,
        price_variation=0.2,
        interval=60,
        dry_run=False,
    )


@pytest.fixture
def mock_rest_api() -> Mock:
    """Exchange REST service with 0.01 BTC and 30 USD available."""
    rest_api = Mock(spec=IExchangeRESTService)
    rest_api.get_open_orders.return_value = []
    rest_api.get_pair_balance.return_value = PairBalanceSchema(
        base_balance=0.01,
        quote_balance=30,
        base_available=0.01,
        quote_available=30,
    )
    rest_api.truncate.side_effect = lambda amount, **_: str(amount)
    rest_api.create_order.side_effect = [
        CreateOrderResponseSchema(txid=f"TXID-{i}") for i in range(1, 100)
    ]
    return rest_api


@pytest.fixture
def mock_price_feed() -> Mock:
    price_feed = Mock(spec=IPriceFeed)
    price_feed.get_price.return_value = 10000.0
    return price_feed
